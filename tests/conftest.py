"""Shared pytest configuration and fixtures.

This module provides test fixtures that:
1. Replace the OTLP exporter classes with typed fakes (FakeOTLPExporters)
2. Provide operation contexts, live and cancelled
3. Provide YAML configuration files for the loader
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from otelbuild.context import Context, background, with_cancel
from tests.fakes import FakeChannel, FakeOTLPExporters, FakeSession

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def ctx() -> Context:
    """A live operation context."""
    return background()


@pytest.fixture
def cancelled_ctx() -> Context:
    """An operation context that was cancelled before use."""
    ctx, cancel = with_cancel(background())
    cancel()
    return ctx


@pytest.fixture
def fake_exporters(monkeypatch: pytest.MonkeyPatch) -> FakeOTLPExporters:
    """Patch the exporter class lookup with FakeOTLPExporters.

    The exporter builders resolve their class through exporter_class() at
    build time, so patching the module attribute is enough.
    """
    from otelbuild.exporters.otlp import exporter as exporter_module

    fake = FakeOTLPExporters()
    monkeypatch.setattr(exporter_module, "exporter_class", fake.exporter_class)
    return fake


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel("Ch1")


@pytest.fixture
def session() -> FakeSession:
    return FakeSession("Cl1")


@pytest.fixture
def valid_config_content() -> str:
    """Return valid YAML config content for tests."""
    return """otlp:
  endpoint: http://collector.local:4318
  transport: http
  signals: [traces, metrics, logs]

validation:
  mode: strict
"""


@pytest.fixture
def valid_config_file(tmp_path: "Path", valid_config_content: str) -> "Path":
    """Create a valid config file and return its path."""
    config_path = tmp_path / "otelbuild.yaml"
    config_path.write_text(valid_config_content)
    return config_path
