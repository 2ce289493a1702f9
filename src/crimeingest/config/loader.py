"""
Configuration loading utilities.

Supports environment variable interpolation. Every key is optional; an
empty or missing section falls back to the defaults in ``IngestConfig``.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from crimeingest.config.settings import IngestConfig


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Config root must be a mapping, got {type(data).__name__}: {path}"
        raise ValueError(msg)
    return _process_config_values(data)


def load_config(config_path: Path | None = None) -> IngestConfig:
    """
    Load ingestion configuration from a YAML file.

    Keys may sit at the top level or below an ``ingest:`` section, e.g.:

        ingest:
          max_rows: ${MAX_ROWS:50000}
          strict_headers: true

    Args:
        config_path: Path to the YAML file. None returns the defaults.

    Returns:
        Fully validated IngestConfig instance.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If a value violates a constraint.
    """
    if config_path is None:
        return IngestConfig()

    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)

    data = load_yaml(config_path)
    section = data.get("ingest", data) or {}

    # YAML scalars for numeric limits arrive as str after interpolation
    return IngestConfig.model_validate(section)
