"""OTLP exporter builders for traces, metrics and logs over gRPC and HTTP.

Each function takes builders (and, for HTTP, an endpoint reader) for the
transport it needs and returns a builder for the exporter. Nothing is
resolved until the returned builder is invoked with a Context.

The exporter classes live in optional distributions and are imported when
a builder runs, not when this module is imported.
"""

from __future__ import annotations

import functools
import importlib
import logging
from typing import TYPE_CHECKING, Any

from otelbuild.builder import must_build
from otelbuild.config import must
from otelbuild.transport import SharedChannel

if TYPE_CHECKING:
    import grpc
    import requests
    from opentelemetry.exporter.otlp.proto.grpc._log_exporter import (
        OTLPLogExporter as GrpcLogExporter,
    )
    from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
        OTLPMetricExporter as GrpcMetricExporter,
    )
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
        OTLPSpanExporter as GrpcSpanExporter,
    )
    from opentelemetry.exporter.otlp.proto.http._log_exporter import (
        OTLPLogExporter as HttpLogExporter,
    )
    from opentelemetry.exporter.otlp.proto.http.metric_exporter import (
        OTLPMetricExporter as HttpMetricExporter,
    )
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter as HttpSpanExporter,
    )

    from otelbuild.builder import Builder
    from otelbuild.config import Reader
    from otelbuild.context import Context

logger = logging.getLogger(__name__)

GRPC = "grpc"
HTTP = "http"

TRACES = "traces"
METRICS = "metrics"
LOGS = "logs"

# Registry of exporter classes: (transport, signal) -> (module_path, class_name)
EXPORTER_CLASSES: dict[tuple[str, str], tuple[str, str]] = {
    (GRPC, TRACES): (
        "opentelemetry.exporter.otlp.proto.grpc.trace_exporter",
        "OTLPSpanExporter",
    ),
    (GRPC, METRICS): (
        "opentelemetry.exporter.otlp.proto.grpc.metric_exporter",
        "OTLPMetricExporter",
    ),
    (GRPC, LOGS): (
        "opentelemetry.exporter.otlp.proto.grpc._log_exporter",
        "OTLPLogExporter",
    ),
    (HTTP, TRACES): (
        "opentelemetry.exporter.otlp.proto.http.trace_exporter",
        "OTLPSpanExporter",
    ),
    (HTTP, METRICS): (
        "opentelemetry.exporter.otlp.proto.http.metric_exporter",
        "OTLPMetricExporter",
    ),
    (HTTP, LOGS): (
        "opentelemetry.exporter.otlp.proto.http._log_exporter",
        "OTLPLogExporter",
    ),
}

_DISTRIBUTIONS = {
    GRPC: "opentelemetry-exporter-otlp-proto-grpc",
    HTTP: "opentelemetry-exporter-otlp-proto-http",
}


def check_dependencies(transport: str) -> None:
    """Verify the OTLP exporter package for a transport is installed.

    Raises:
        ImportError: If the exporter package is not installed.
    """
    try:
        __import__(f"opentelemetry.exporter.otlp.proto.{transport}")
    except ImportError:
        raise ImportError(
            f"OTLP/{transport} exporters require the "
            f"'{_DISTRIBUTIONS[transport]}' package.\n"
            f"Install with: pip install otel-build[{transport}]"
        ) from None


def exporter_class(transport: str, signal: str) -> type[Any]:
    """Import and return the exporter class for a transport and signal.

    Raises:
        ValueError: If the combination is unknown.
        ImportError: If the exporter package is not installed.
    """
    if (transport, signal) not in EXPORTER_CLASSES:
        raise ValueError(f"Unknown OTLP exporter: transport={transport} signal={signal}")

    check_dependencies(transport)
    module_path, class_name = EXPORTER_CLASSES[(transport, signal)]
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


class _ChannelBinding:
    """Runs an OTLP/gRPC exporter on a SharedChannel.

    The exporters open their own channel from their endpoint setting and
    reopen it after an UNAVAILABLE error. Placed ahead of the exporter class
    in the MRO, this keeps the stub on the supplied channel instead, and
    releases that channel on shutdown rather than closing it.
    """

    def __init__(self, *, shared_channel: SharedChannel, **kwargs: Any) -> None:
        self._shared_channel = shared_channel
        super().__init__(**kwargs)
        shared_channel.acquire()

    def _initialize_channel_and_stub(self) -> None:
        self._channel = self._shared_channel
        self._client = self._stub(self._shared_channel.channel)

    def shutdown(self, *args: Any, **kwargs: Any) -> None:
        first = not self._shutdown
        super().shutdown(*args, **kwargs)
        if first:
            self._shared_channel.release()


@functools.lru_cache(maxsize=None)
def bound_exporter_class(exporter_cls: type[Any]) -> type[Any]:
    """Return a subclass of an OTLP/gRPC exporter class bound to a SharedChannel.

    Instances take a ``shared_channel`` keyword in addition to the exporter's
    own arguments.
    """
    return type(
        exporter_cls.__name__,
        (_ChannelBinding, exporter_cls),
        {"__module__": exporter_cls.__module__},
    )


def _grpc_exporter(signal: str, grpc_conn_builder: Builder[grpc.Channel]) -> Builder[Any]:
    def _build(ctx: Context) -> Any:
        exporter_cls = bound_exporter_class(exporter_class(GRPC, signal))
        channel = must_build(ctx, grpc_conn_builder)
        ctx.raise_if_done()

        if not isinstance(channel, SharedChannel):
            channel = SharedChannel(channel)
        exporter = exporter_cls(shared_channel=channel, insecure=True)
        logger.debug("Created OTLP/gRPC %s exporter on channel %r", signal, channel)
        return exporter

    return _build


def _http_exporter(
    signal: str,
    endpoint: Reader[str],
    http_client_builder: Builder[requests.Session],
) -> Builder[Any]:
    def _build(ctx: Context) -> Any:
        exporter_cls = exporter_class(HTTP, signal)
        url = must(ctx, endpoint)
        session = must_build(ctx, http_client_builder)
        ctx.raise_if_done()

        exporter = exporter_cls(endpoint=url, session=session)
        logger.debug("Created OTLP/HTTP %s exporter for endpoint: %s", signal, url)
        return exporter

    return _build


def build_grpc_span_exporter(
    grpc_conn_builder: Builder[grpc.Channel],
) -> Builder[GrpcSpanExporter]:
    """Return a builder for an OTLP span exporter using gRPC transport.

    The exporter sends trace data over the channel produced by
    ``grpc_conn_builder``. The channel is not closed by the exporter; see
    otelbuild.transport.SharedChannel.
    """
    return _grpc_exporter(TRACES, grpc_conn_builder)


def build_http_span_exporter(
    endpoint: Reader[str],
    http_client_builder: Builder[requests.Session],
) -> Builder[HttpSpanExporter]:
    """Return a builder for an OTLP span exporter using HTTP transport.

    The exporter posts trace data to ``endpoint`` with the session produced
    by ``http_client_builder``.
    """
    return _http_exporter(TRACES, endpoint, http_client_builder)


def build_grpc_metric_exporter(
    grpc_conn_builder: Builder[grpc.Channel],
) -> Builder[GrpcMetricExporter]:
    """Return a builder for an OTLP metric exporter using gRPC transport."""
    return _grpc_exporter(METRICS, grpc_conn_builder)


def build_http_metric_exporter(
    endpoint: Reader[str],
    http_client_builder: Builder[requests.Session],
) -> Builder[HttpMetricExporter]:
    """Return a builder for an OTLP metric exporter using HTTP transport."""
    return _http_exporter(METRICS, endpoint, http_client_builder)


def build_grpc_log_exporter(
    grpc_conn_builder: Builder[grpc.Channel],
) -> Builder[GrpcLogExporter]:
    """Return a builder for an OTLP log exporter using gRPC transport."""
    return _grpc_exporter(LOGS, grpc_conn_builder)


def build_http_log_exporter(
    endpoint: Reader[str],
    http_client_builder: Builder[requests.Session],
) -> Builder[HttpLogExporter]:
    """Return a builder for an OTLP log exporter using HTTP transport."""
    return _http_exporter(LOGS, endpoint, http_client_builder)
