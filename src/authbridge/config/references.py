"""External configuration reference handling.

Supported references inside string values:

- `${ENV_VAR}`: replaced with the environment variable. An unset variable
  resolves to an empty string, so a provider whose credentials come from an
  unset variable is simply not registered.
- `file://path`: replaced with the stripped contents of the file (relative
  paths resolve against the config file's directory).
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z0-9_]+)\}")
FILE_URL_PATTERN = re.compile(r"file://(.+)")


def is_external_reference(value: Any) -> bool:
    """Check if a value contains any external reference."""
    if not isinstance(value, str):
        return False
    return value.startswith("file://") or ENV_VAR_PATTERN.search(value) is not None


def resolve_env_var(value: str) -> str:
    """Resolve environment variable references in a string."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in os.environ:
            logger.debug(f"Environment variable {name} is not set, using empty string")
        return os.environ.get(name, "")

    return ENV_VAR_PATTERN.sub(_replace, value)


def resolve_file_url(file_url: str, base_dir: Path | None = None) -> str:
    """Read a value from a file:// reference.

    Raises:
        ValueError: If the URL is malformed or the file cannot be read.
    """
    match = FILE_URL_PATTERN.match(file_url)
    if not match:
        raise ValueError(f"Invalid file URL format: {file_url}")

    path = Path(match.group(1))
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path

    try:
        return path.read_text().strip()
    except OSError as e:
        raise ValueError(f"Failed to read file {path}: {e}") from e


def resolve_value(value: str, base_dir: Path | None = None) -> str:
    if value.startswith("file://"):
        return resolve_file_url(value, base_dir)
    return resolve_env_var(value)


def interpolate_all(config: Any, base_dir: Path | None = None) -> Any:
    """Recursively interpolate all external references in a configuration."""
    if isinstance(config, str) and is_external_reference(config):
        return resolve_value(config, base_dir)
    elif isinstance(config, dict):
        return {k: interpolate_all(v, base_dir) for k, v in config.items()}
    elif isinstance(config, list):
        return [interpolate_all(item, base_dir) for item in config]
    else:
        return config


__all__ = ["interpolate_all", "is_external_reference", "resolve_env_var", "resolve_file_url"]
