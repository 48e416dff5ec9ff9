"""Unit tests for exporter builder dispatch from configuration."""

from __future__ import annotations

import pytest

from otelbuild.api.types import Config, OTLPConfig
from otelbuild.builder import builder_of
from otelbuild.context import Context
from otelbuild.sdk.pipeline import (
    exporter_builders,
    grpc_target,
    http_signal_endpoint,
)
from tests.fakes import (
    FakeChannel,
    FakeOTLPExporters,
    FakeSession,
    RecordingBuilder,
)


@pytest.mark.unit
class TestEndpointHelpers:
    @pytest.mark.parametrize(
        "endpoint,expected",
        [
            ("http://collector:4317", "collector:4317"),
            ("https://collector.example.com:443", "collector.example.com:443"),
            ("collector:4317", "collector:4317"),
            ("dns:///collector:4317", "dns:///collector:4317"),
        ],
    )
    def test_grpc_target(self, endpoint: str, expected: str) -> None:
        assert grpc_target(endpoint) == expected

    @pytest.mark.parametrize(
        "endpoint,signal,expected",
        [
            ("http://c:4318", "traces", "http://c:4318/v1/traces"),
            ("http://c:4318/", "metrics", "http://c:4318/v1/metrics"),
            ("http://c:4318/v1/logs", "logs", "http://c:4318/v1/logs"),
        ],
    )
    def test_http_signal_endpoint(self, endpoint: str, signal: str, expected: str) -> None:
        assert http_signal_endpoint(endpoint, signal) == expected


@pytest.mark.unit
class TestExporterBuilders:
    def test_grpc_signals_share_channel(
        self,
        ctx: Context,
        channel: FakeChannel,
        fake_exporters: FakeOTLPExporters,
    ) -> None:
        """
        GIVEN a gRPC config with all three signals
        WHEN the builders are created with one memoized channel builder
        THEN every exporter is bound to that channel
        """
        from otelbuild.builder import memoize

        dial = RecordingBuilder(value=channel)
        config = Config(otlp=OTLPConfig(endpoint="collector:4317"))

        builders = exporter_builders(config, channel_builder=memoize(dial))

        assert list(builders) == ["traces", "metrics", "logs"]
        assert dial.calls == 0

        exporters = {signal: b(ctx) for signal, b in builders.items()}

        assert all(e.channel is channel for e in exporters.values())
        assert dial.calls == 1

    def test_default_channel_builder_is_memoized(
        self,
        ctx: Context,
        fake_exporters: FakeOTLPExporters,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        targets: list[str] = []

        def fake_insecure_channel(reader):  # type: ignore[no-untyped-def]
            def _build(ctx: Context) -> FakeChannel:
                from otelbuild.config import read

                targets.append(read(ctx, reader))
                return FakeChannel("dialed")

            return _build

        monkeypatch.setattr(
            "otelbuild.sdk.pipeline.build_insecure_channel", fake_insecure_channel
        )
        config = Config(otlp=OTLPConfig(endpoint="http://collector:4317"))

        exporters = [b(ctx) for b in exporter_builders(config).values()]

        assert targets == ["collector:4317"]
        assert len({id(e.channel) for e in exporters}) == 1

    def test_http_endpoints_per_signal(
        self,
        ctx: Context,
        session: FakeSession,
        fake_exporters: FakeOTLPExporters,
    ) -> None:
        config = Config(
            otlp=OTLPConfig(
                endpoint="http://collector.local:4318",
                transport="http",
                signals=["traces", "logs"],
            )
        )

        builders = exporter_builders(config, session_builder=builder_of(session))
        exporters = {signal: b(ctx) for signal, b in builders.items()}

        assert set(exporters) == {"traces", "logs"}
        assert exporters["traces"].endpoint == "http://collector.local:4318/v1/traces"
        assert exporters["logs"].endpoint == "http://collector.local:4318/v1/logs"
        assert all(e.session is session for e in exporters.values())

    def test_unknown_transport(self) -> None:
        config = Config(otlp=OTLPConfig(endpoint="c:4317", transport="kafka"))

        with pytest.raises(ValueError, match="Unknown exporter"):
            exporter_builders(config)
