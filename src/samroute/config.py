"""Configuration management with XDG paths and precedence resolution.

This module handles runtime configuration for samroute:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.samroute/`` on macOS and Windows. Only the data directory is used
  (crash logs); see :func:`get_data_dir`.
* **Project config** -- an optional ``samroute.json`` in the current
  working directory, typically pinning the AWS profile or region used to
  fetch S3-hosted definitions.
* **Precedence resolution** -- :func:`resolve_settings` merges CLI flags,
  environment variables, project-local config, and defaults into a
  :class:`~samroute.models.Settings`.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from samroute.exceptions import ConfigError
from samroute.models import Settings

_APP_NAME = "samroute"
_PROJECT_CONFIG_FILENAME = "samroute.json"

_ENV_PREFIX = "SAMROUTE_"
_ENV_FIELDS = ("aws_profile", "aws_region", "s3_endpoint_url")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/samroute/`` (default ``~/.local/share/samroute/``).
    On macOS/Windows: ``~/.samroute/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``samroute.json``.

    Args:
        directory: Directory to look in. Defaults to the current working
            directory.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_settings(
    cli_profile: Optional[str] = None,
    cli_region: Optional[str] = None,
    cli_endpoint_url: Optional[str] = None,
    cli_format: Optional[str] = None,
    project_dir: Optional[Path] = None,
) -> Settings:
    """Resolve settings with full precedence chain.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``SAMROUTE_AWS_PROFILE``,
           ``SAMROUTE_AWS_REGION``, ``SAMROUTE_S3_ENDPOINT_URL``,
           ``SAMROUTE_OUTPUT``)
        3. Project config (``./samroute.json``)
        4. Defaults

    Returns:
        The effective :class:`~samroute.models.Settings`.

    Raises:
        ConfigError: If the project config is unreadable or holds values
            of the wrong type.
    """
    merged: dict[str, Any] = {}

    # 3. Project-local config
    project = load_project_config(project_dir)
    if project is not None:
        merged.update(
            {k: v for k, v in project.items() if k in Settings.model_fields}
        )

    # 2. Environment variables
    for field in _ENV_FIELDS:
        value = os.environ.get(_ENV_PREFIX + field.upper())
        if value:
            merged[field] = value
    env_format = os.environ.get(_ENV_PREFIX + "OUTPUT")
    if env_format:
        merged["output_format"] = env_format

    # 1. CLI flags
    cli_values = {
        "aws_profile": cli_profile,
        "aws_region": cli_region,
        "s3_endpoint_url": cli_endpoint_url,
        "output_format": cli_format,
    }
    merged.update({k: v for k, v in cli_values.items() if v is not None})

    try:
        return Settings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
