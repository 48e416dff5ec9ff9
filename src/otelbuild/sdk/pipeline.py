"""Pipeline composition: exporter builder dispatch from configuration.

This module is responsible for:
- Choosing the exporter builder for each configured signal and transport
- Sharing one channel or session between those builders
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable
from urllib.parse import urlparse

from otelbuild.builder import map_builder, memoize
from otelbuild.config import reader_of
from otelbuild.exporters.otlp.exporter import (
    GRPC,
    HTTP,
    LOGS,
    METRICS,
    TRACES,
    build_grpc_log_exporter,
    build_grpc_metric_exporter,
    build_grpc_span_exporter,
    build_http_log_exporter,
    build_http_metric_exporter,
    build_http_span_exporter,
)
from otelbuild.transport import SharedChannel, build_insecure_channel, build_session

if TYPE_CHECKING:
    import grpc
    import requests

    from otelbuild.api.types import Config
    from otelbuild.builder import Builder

logger = logging.getLogger(__name__)

# Registry of exporter builder factories: (transport, signal) -> factory
EXPORTER_FACTORIES: dict[tuple[str, str], Callable[..., Builder[Any]]] = {
    (GRPC, TRACES): build_grpc_span_exporter,
    (GRPC, METRICS): build_grpc_metric_exporter,
    (GRPC, LOGS): build_grpc_log_exporter,
    (HTTP, TRACES): build_http_span_exporter,
    (HTTP, METRICS): build_http_metric_exporter,
    (HTTP, LOGS): build_http_log_exporter,
}

# Per-signal paths appended to the HTTP base endpoint
HTTP_SIGNAL_PATHS: dict[str, str] = {
    TRACES: "/v1/traces",
    METRICS: "/v1/metrics",
    LOGS: "/v1/logs",
}


def grpc_target(endpoint: str) -> str:
    """Turn a configured endpoint into a gRPC target (``host:port``)."""
    parsed = urlparse(endpoint)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return parsed.netloc
    return endpoint


def http_signal_endpoint(endpoint: str, signal: str) -> str:
    """Append the signal path to a base URL unless it is already there."""
    path = HTTP_SIGNAL_PATHS[signal]
    base = endpoint.rstrip("/")
    if base.endswith(path):
        return base
    return base + path


def _owned_channel(channel: grpc.Channel) -> SharedChannel:
    return SharedChannel(channel, owned=True)


def exporter_builders(
    config: Config,
    channel_builder: Builder[grpc.Channel] | None = None,
    session_builder: Builder[requests.Session] | None = None,
) -> dict[str, Builder[Any]]:
    """Create exporter builders for every signal enabled in config.

    Without an explicit channel or session builder, one is created from the
    configured endpoint and memoized so all signals share it. A default
    channel is closed when the last exporter using it is shut down.

    Args:
        config: Configuration with the otlp section set.
        channel_builder: Channel builder for the gRPC transport.
        session_builder: Session builder for the HTTP transport.

    Returns:
        Mapping of signal name to an unresolved exporter builder.

    Raises:
        ValueError: If transport or signal is unknown.
    """
    transport = config.otlp.transport
    builders: dict[str, Builder[Any]] = {}

    if transport == GRPC and channel_builder is None:
        channel_builder = memoize(
            map_builder(
                build_insecure_channel(reader_of(grpc_target(config.otlp.endpoint))),
                _owned_channel,
            )
        )
    if transport == HTTP and session_builder is None:
        session_builder = memoize(build_session())

    for signal in config.otlp.signals:
        key = (transport, signal)
        if key not in EXPORTER_FACTORIES:
            raise ValueError(
                f"Unknown exporter: transport={transport} signal={signal}. "
                f"Valid transports: {', '.join(sorted({t for t, _ in EXPORTER_FACTORIES}))}"
            )

        factory = EXPORTER_FACTORIES[key]
        if transport == GRPC:
            builders[signal] = factory(channel_builder)
        else:
            endpoint = http_signal_endpoint(config.otlp.endpoint, signal)
            builders[signal] = factory(reader_of(endpoint), session_builder)
        logger.debug("Registered %s exporter builder for %s", transport, signal)

    return builders
