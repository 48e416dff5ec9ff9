"""No-op exporter builders.

The exporters accept every batch and discard it. They stand in for a real
exporter where telemetry is switched off or in tests that only need the
pipeline wired up.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from opentelemetry.sdk._logs.export import LogRecordExporter, LogRecordExportResult
from opentelemetry.sdk.metrics.export import MetricExporter, MetricExportResult
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from opentelemetry.sdk.metrics.export import MetricsData
    from opentelemetry.sdk.trace import ReadableSpan

    from otelbuild.builder import Builder
    from otelbuild.context import Context

logger = logging.getLogger(__name__)


class NoopSpanExporter(SpanExporter):
    """Span exporter that discards all spans."""

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        pass

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True


class NoopMetricExporter(MetricExporter):
    """Metric exporter that discards all metrics.

    Uses cumulative temporality and the default aggregation for every
    instrument kind.
    """

    def export(
        self,
        metrics_data: MetricsData,
        timeout_millis: float = 10_000,
        **kwargs: Any,
    ) -> MetricExportResult:
        return MetricExportResult.SUCCESS

    def force_flush(self, timeout_millis: float = 10_000) -> bool:
        return True

    def shutdown(self, timeout_millis: float = 30_000, **kwargs: Any) -> None:
        pass


class NoopLogExporter(LogRecordExporter):
    """Log exporter that discards all log records."""

    def export(self, batch: Sequence[Any]) -> LogRecordExportResult:
        return LogRecordExportResult.SUCCESS

    def shutdown(self) -> None:
        pass

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True


def build_noop_span_exporter() -> Builder[NoopSpanExporter]:
    """Return a builder for a span exporter that discards everything."""

    def _build(ctx: Context) -> NoopSpanExporter:
        ctx.raise_if_done()
        return NoopSpanExporter()

    return _build


def build_noop_metric_exporter() -> Builder[NoopMetricExporter]:
    """Return a builder for a metric exporter that discards everything."""

    def _build(ctx: Context) -> NoopMetricExporter:
        ctx.raise_if_done()
        return NoopMetricExporter()

    return _build


def build_noop_log_exporter() -> Builder[NoopLogExporter]:
    """Return a builder for a log exporter that discards everything."""

    def _build(ctx: Context) -> NoopLogExporter:
        ctx.raise_if_done()
        logger.debug("Created no-op log exporter")
        return NoopLogExporter()

    return _build
