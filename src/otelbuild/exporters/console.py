"""Console exporter builders.

These write human-readable telemetry to a text stream. They are intended
for local development and examples; use the OTLP builders in production.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TextIO

from opentelemetry.sdk._logs.export import ConsoleLogRecordExporter
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter
from opentelemetry.sdk.trace.export import ConsoleSpanExporter

from otelbuild.builder import must_build

if TYPE_CHECKING:
    from otelbuild.builder import Builder
    from otelbuild.context import Context

logger = logging.getLogger(__name__)


def build_console_span_exporter(
    writer_builder: Builder[TextIO],
) -> Builder[ConsoleSpanExporter]:
    """Return a builder for a span exporter writing to the built stream."""

    def _build(ctx: Context) -> ConsoleSpanExporter:
        out = must_build(ctx, writer_builder)
        ctx.raise_if_done()
        return ConsoleSpanExporter(out=out)

    return _build


def build_console_metric_exporter(
    writer_builder: Builder[TextIO],
) -> Builder[ConsoleMetricExporter]:
    """Return a builder for a metric exporter writing to the built stream."""

    def _build(ctx: Context) -> ConsoleMetricExporter:
        out = must_build(ctx, writer_builder)
        ctx.raise_if_done()
        return ConsoleMetricExporter(out=out)

    return _build


def build_console_log_exporter(
    writer_builder: Builder[TextIO],
) -> Builder[ConsoleLogRecordExporter]:
    """Return a builder for a log exporter writing to the built stream."""

    def _build(ctx: Context) -> ConsoleLogRecordExporter:
        out = must_build(ctx, writer_builder)
        ctx.raise_if_done()
        logger.debug("Created console log exporter writing to %r", out)
        return ConsoleLogRecordExporter(out=out)

    return _build
