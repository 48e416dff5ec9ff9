"""Public API for otelbuild.

This module re-exports the stable public interface:
- build_exporters() - Build OTLP exporters from configuration
- Config and related types - Programmatic configuration
"""

from __future__ import annotations

from otelbuild.api._init import build_exporters
from otelbuild.api.types import Config, OTLPConfig, ValidationConfig

__all__ = [
    "build_exporters",
    "Config",
    "OTLPConfig",
    "ValidationConfig",
]
