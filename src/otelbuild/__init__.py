"""otelbuild: deferred builders for OpenTelemetry OTLP exporters.

Declare how to build an exporter, then build it when the application
starts:

    import otelbuild
    from otelbuild import config
    from otelbuild.exporters.otlp import build_grpc_span_exporter
    from otelbuild.transport import build_insecure_channel

    channel = otelbuild.memoize(build_insecure_channel(config.reader_of("collector:4317")))
    span_exporter = otelbuild.build(
        otelbuild.background(),
        otelbuild.recover(build_grpc_span_exporter(channel)),
    )

Exporter modules are imported lazily so that optional OTLP exporter
packages are only needed when they are used.
"""

from __future__ import annotations

from otelbuild.builder import (
    Builder,
    bind,
    build,
    builder_of,
    map_builder,
    memoize,
    must_build,
    recover,
)
from otelbuild.context import Context, background, with_cancel, with_timeout
from otelbuild.exceptions import (
    BuildAbort,
    BuildError,
    ConfigurationError,
    ContextCancelledError,
    ContextError,
    DeadlineExceededError,
    ValueNotSetError,
)

__version__ = "0.1.0"

__all__ = [
    "Builder",
    "BuildAbort",
    "BuildError",
    "ConfigurationError",
    "Context",
    "ContextCancelledError",
    "ContextError",
    "DeadlineExceededError",
    "ValueNotSetError",
    "__version__",
    "background",
    "bind",
    "build",
    "build_exporters",
    "builder_of",
    "map_builder",
    "memoize",
    "must_build",
    "recover",
    "with_cancel",
    "with_timeout",
    "Config",
    "OTLPConfig",
    "ValidationConfig",
]

_API_NAMES = {"build_exporters", "Config", "OTLPConfig", "ValidationConfig"}


def __getattr__(name: str):
    if name in _API_NAMES:
        import importlib

        return getattr(importlib.import_module("otelbuild.api"), name)
    raise AttributeError(f"module 'otelbuild' has no attribute '{name}'")


def __dir__() -> list[str]:
    return sorted(__all__)
