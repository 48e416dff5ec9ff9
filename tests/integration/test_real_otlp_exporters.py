"""Integration tests against the real OTLP exporter classes.

No collector is needed: gRPC channels connect lazily and nothing is
exported.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from otelbuild.builder import builder_of, map_builder, memoize
from otelbuild.config import reader_of
from otelbuild.context import Context
from otelbuild.exporters.otlp import (
    build_grpc_log_exporter,
    build_grpc_metric_exporter,
    build_grpc_span_exporter,
    build_http_log_exporter,
    build_http_metric_exporter,
    build_http_span_exporter,
)
from otelbuild.transport import SharedChannel, build_insecure_channel, build_session

grpc = pytest.importorskip("grpc")
requests = pytest.importorskip("requests")
pytest.importorskip("opentelemetry.exporter.otlp.proto.grpc")
pytest.importorskip("opentelemetry.exporter.otlp.proto.http")

ENDPOINT = "http://collector.local:4318/v1/traces"


@pytest.fixture
def grpc_channel() -> Any:
    channel = grpc.insecure_channel("localhost:4317")
    yield channel
    channel.close()


def assert_channel_open(channel: Any) -> None:
    """A call on an open channel fails with an RPC error, not ValueError."""
    call = channel.unary_unary("/otelbuild.test.Nothing/Call")
    with pytest.raises(grpc.RpcError):
        call(b"", timeout=0.01)


GRPC_EXPORTERS = [
    (
        build_grpc_span_exporter,
        "opentelemetry.exporter.otlp.proto.grpc.trace_exporter",
        "OTLPSpanExporter",
    ),
    (
        build_grpc_metric_exporter,
        "opentelemetry.exporter.otlp.proto.grpc.metric_exporter",
        "OTLPMetricExporter",
    ),
    (
        build_grpc_log_exporter,
        "opentelemetry.exporter.otlp.proto.grpc._log_exporter",
        "OTLPLogExporter",
    ),
]


@pytest.mark.integration
class TestRealGrpcExporters:
    @pytest.mark.parametrize("factory,module_path,class_name", GRPC_EXPORTERS)
    def test_exporter_uses_channel(
        self,
        factory: Callable[..., Any],
        module_path: str,
        class_name: str,
        ctx: Context,
        grpc_channel: Any,
    ) -> None:
        import importlib

        exporter = factory(builder_of(grpc_channel))(ctx)

        cls = getattr(importlib.import_module(module_path), class_name)
        assert isinstance(exporter, cls)
        assert exporter._channel.channel is grpc_channel

    @pytest.mark.parametrize("factory,module_path,class_name", GRPC_EXPORTERS)
    def test_reconnect_and_shutdown_keep_channel(
        self,
        factory: Callable[..., Any],
        module_path: str,
        class_name: str,
        ctx: Context,
        grpc_channel: Any,
    ) -> None:
        """
        GIVEN a real exporter bound to a caller's channel
        WHEN it goes through the UNAVAILABLE reconnect path and shuts down
        THEN it stays on the caller's channel, which is still open
        """
        exporter = factory(builder_of(grpc_channel))(ctx)

        exporter._channel.close()
        exporter._initialize_channel_and_stub()
        assert exporter._channel.channel is grpc_channel

        exporter.shutdown()
        assert_channel_open(grpc_channel)

    def test_shared_insecure_channel(self, ctx: Context) -> None:
        channel_builder = memoize(
            map_builder(
                build_insecure_channel(reader_of("localhost:4317")),
                lambda channel: SharedChannel(channel, owned=True),
            )
        )

        span = build_grpc_span_exporter(channel_builder)(ctx)
        log = build_grpc_log_exporter(channel_builder)(ctx)
        shared = span._channel

        assert log._channel is shared
        span.shutdown()
        assert_channel_open(shared.channel)

        log.shutdown()
        with pytest.raises(ValueError):
            shared.channel.unary_unary("/otelbuild.test.Nothing/Call")(b"", timeout=0.01)


@pytest.mark.integration
class TestRealHttpExporters:
    @pytest.mark.parametrize(
        "factory,module_path,class_name",
        [
            (
                build_http_span_exporter,
                "opentelemetry.exporter.otlp.proto.http.trace_exporter",
                "OTLPSpanExporter",
            ),
            (
                build_http_metric_exporter,
                "opentelemetry.exporter.otlp.proto.http.metric_exporter",
                "OTLPMetricExporter",
            ),
            (
                build_http_log_exporter,
                "opentelemetry.exporter.otlp.proto.http._log_exporter",
                "OTLPLogExporter",
            ),
        ],
    )
    def test_exporter_uses_endpoint_and_session(
        self,
        factory: Callable[..., Any],
        module_path: str,
        class_name: str,
        ctx: Context,
    ) -> None:
        import importlib

        session = requests.Session()

        exporter = factory(reader_of(ENDPOINT), builder_of(session))(ctx)

        cls = getattr(importlib.import_module(module_path), class_name)
        assert isinstance(exporter, cls)
        assert exporter._endpoint == ENDPOINT
        assert exporter._client._transport._session is session

    def test_session_builder(self, ctx: Context) -> None:
        session = build_session()(ctx)

        assert isinstance(session, requests.Session)
