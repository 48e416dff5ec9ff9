"""YAML file loading with ${VAR_NAME} substitution."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from otelbuild.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Pattern for environment variable substitution: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(value: str, strict: bool) -> str:
    """Substitute ${VAR_NAME} patterns with environment variable values.

    Args:
        value: String potentially containing ${VAR_NAME} patterns.
        strict: If True, raise ConfigurationError for missing env vars.

    Returns:
        String with environment variables substituted.

    Raises:
        ConfigurationError: If strict=True and an env var is not set.
    """

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            if strict:
                raise ConfigurationError(
                    f"Environment variable '{var_name}' is not set"
                )
            logger.warning(
                "Environment variable '%s' not set, using empty string", var_name
            )
            return ""
        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def substitute_env_vars_recursive(data: Any, strict: bool) -> Any:
    """Recursively substitute environment variables in a YAML data structure."""
    if isinstance(data, dict):
        return {k: substitute_env_vars_recursive(v, strict) for k, v in data.items()}
    elif isinstance(data, list):
        return [substitute_env_vars_recursive(item, strict) for item in data]
    elif isinstance(data, str):
        return substitute_env_vars(data, strict)
    else:
        return data


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Read a YAML mapping from disk.

    An empty document yields an empty dict.

    Raises:
        ConfigurationError: If the file doesn't exist, the YAML is invalid
                           or the document is not a mapping.
    """
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path) as f:
            raw_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e

    if raw_data is None:
        return {}
    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping at the top level: {path}"
        )
    return raw_data
