"""Main entry point: build_exporters().

This module is the top level of a build: it is where a BuildAbort raised
by a dependency is turned into a BuildError.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from otelbuild.builder import build, recover
from otelbuild.context import background
from otelbuild.exceptions import ConfigurationError
from otelbuild.sdk.config.load import load_config
from otelbuild.sdk.pipeline import exporter_builders

if TYPE_CHECKING:
    from otelbuild.api.types import Config
    from otelbuild.context import Context

logger = logging.getLogger(__name__)

# Environment variable for config path fallback
OTELBUILD_CONFIG_PATH_ENV = "OTELBUILD_CONFIG_PATH"


def _resolve_config_path(config_path: str | Path | None) -> Path:
    """Resolve configuration file path from argument or environment.

    Raises:
        ConfigurationError: If no config path is provided and
                           OTELBUILD_CONFIG_PATH env var is not set.
    """
    if config_path is not None:
        return Path(config_path)

    env_path = os.environ.get(OTELBUILD_CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    raise ConfigurationError(
        f"No configuration path provided. Either pass a config path to "
        f"build_exporters() or set the {OTELBUILD_CONFIG_PATH_ENV} environment variable."
    )


def _shutdown_exporters(exporters: dict[str, Any]) -> None:
    """Shut down exporters built before a failure so their transports are released."""
    for signal, exporter in exporters.items():
        try:
            exporter.shutdown()
        except Exception:
            logger.warning("Failed to shut down %s exporter", signal, exc_info=True)


def build_exporters(
    config: str | Path | Config | None = None,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Build OTLP exporters for every signal enabled in the configuration.

    Configuration can be provided as:
    - A path to a YAML config file (str or Path)
    - A Config object for programmatic configuration
    - None to use the OTELBUILD_CONFIG_PATH environment variable

    The caller owns the returned exporters and is responsible for shutting
    them down. When a build fails and the error is raised, the exporters
    already built for other signals are shut down first.

    Args:
        config: Configuration source.
        ctx: Operation context. Defaults to background().

    Returns:
        Mapping of signal name ("traces", "metrics", "logs") to exporter.

    Raises:
        ConfigurationError: If configuration is invalid or missing.
        BuildError: In strict mode, if a dependency of an exporter failed.
        Exception: In strict mode, if an exporter could not be constructed.
    """
    from otelbuild.api.types import Config as ConfigType

    if isinstance(config, ConfigType):
        resolved_config = config
    else:
        resolved_config = load_config(_resolve_config_path(config))

    if ctx is None:
        ctx = background()

    exporters: dict[str, Any] = {}
    for signal, builder in exporter_builders(resolved_config).items():
        try:
            exporters[signal] = build(ctx, recover(builder))
        except ImportError as e:
            # Exporter package not installed
            _shutdown_exporters(exporters)
            raise ConfigurationError(str(e)) from e
        except Exception as e:
            if resolved_config.is_strict:
                _shutdown_exporters(exporters)
                raise
            logger.warning("Skipping %s exporter, build failed: %s", signal, e)

    logger.debug(
        "Built %s exporters for %s",
        resolved_config.otlp.transport,
        ", ".join(exporters) or "no signals",
    )
    return exporters
