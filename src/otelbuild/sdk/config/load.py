"""Configuration loading, parsing, and validation for otelbuild."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from otelbuild._internal.yamlsource import (
    load_yaml_file,
    substitute_env_vars_recursive,
)
from otelbuild.api.types import ALL_SIGNALS, Config, OTLPConfig, ValidationConfig
from otelbuild.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

VALID_TRANSPORTS = {"grpc", "http"}


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a top-level section, which must be a mapping when present."""
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"'{name}' must be a mapping, got {type(section).__name__}: {section!r}"
        )
    return section


def _parse_otlp_config(data: dict[str, Any]) -> OTLPConfig:
    """Parse otlp configuration section."""
    endpoint = data.get("endpoint")
    if endpoint is None:
        endpoint = ""
    if not isinstance(endpoint, str):
        raise ConfigurationError(
            f"otlp.endpoint must be a string, got {type(endpoint).__name__}"
        )

    transport = data.get("transport", "grpc")
    if not isinstance(transport, str) or transport not in VALID_TRANSPORTS:
        logger.warning("Unknown transport '%s', defaulting to 'grpc'", transport)
        transport = "grpc"

    signals = data.get("signals")
    if signals is None:
        signals = list(ALL_SIGNALS)
    elif isinstance(signals, str):
        signals = [signals]
    elif not isinstance(signals, list):
        raise ConfigurationError(
            f"otlp.signals must be a list or a single signal name, "
            f"got {type(signals).__name__}: {signals!r}"
        )

    unknown = [s for s in signals if s not in ALL_SIGNALS]
    if unknown:
        logger.warning("Unknown signals ignored: %s", unknown)
        signals = [s for s in signals if s in ALL_SIGNALS]

    return OTLPConfig(
        endpoint=endpoint,
        transport=transport,
        signals=signals,
    )


def _parse_validation_config(data: dict[str, Any]) -> ValidationConfig:
    """Parse validation configuration section."""
    mode = data.get("mode", "permissive")
    if mode not in ("strict", "permissive"):
        logger.warning("Unknown validation mode '%s', defaulting to permissive", mode)
        mode = "permissive"
    return ValidationConfig(mode=mode)


def _validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of error messages.

    Args:
        config: Parsed configuration to validate.

    Returns:
        List of validation error messages. Empty if valid.
    """
    errors: list[str] = []

    if not config.otlp.endpoint:
        errors.append("otlp.endpoint is required")

    if not config.otlp.signals:
        errors.append("otlp.signals must name at least one of traces, metrics, logs")

    return errors


def load_config(path: str | Path, strict: bool | None = None) -> Config:
    """Load and parse configuration from a YAML file.

    Example file::

        otlp:
          endpoint: ${OTEL_COLLECTOR_ENDPOINT}
          transport: http
          signals: [traces, logs]
        validation:
          mode: strict

    Args:
        path: Path to the YAML configuration file.
        strict: Override validation mode. If None, use mode from config file.

    Returns:
        Parsed and validated Config.

    Raises:
        ConfigurationError: If file doesn't exist, YAML is invalid, a section
                           or field has the wrong type, or validation
                           fails in strict mode.
    """
    raw_data = load_yaml_file(Path(path))

    # Determine validation mode early (needed for env var substitution)
    validation_data = _section(raw_data, "validation")
    validation_mode = validation_data.get("mode", "permissive")
    is_strict = strict if strict is not None else (validation_mode == "strict")

    data = substitute_env_vars_recursive(raw_data, strict=is_strict)

    config = Config(
        otlp=_parse_otlp_config(_section(data, "otlp")),
        validation=_parse_validation_config(_section(data, "validation")),
    )

    # Override validation mode if specified
    if strict is not None:
        config.validation.mode = "strict" if strict else "permissive"

    errors = _validate_config(config)
    if errors:
        if config.is_strict:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}"
            )
        for error in errors:
            logger.warning("Configuration problem ignored in permissive mode: %s", error)

    return config
