"""Configuration loading with XDG paths and precedence resolution.

:class:`~specgen.models.GeneratorConfig` values come from, in order of
precedence (high to low):

1. Explicit overrides passed by the caller (CLI flags).
2. Environment variables (``SPECGEN_DEFAULT_SERVICE``,
   ``SPECGEN_SERVICE_SUFFIX``, ``SPECGEN_VERSION_PARAMETER``,
   ``SPECGEN_VERSION_EXPRESSION``, ``SPECGEN_PREFERRED_MEDIA_TYPES``,
   ``SPECGEN_MAX_WORKERS``).
3. Project config (``./specgen.json``).
4. User config (``$XDG_CONFIG_HOME/specgen/config.json``).
5. Model defaults.

Every layer is a partial mapping of field names; layers are merged key by
key and validated once, so a bad value anywhere surfaces as a single
:class:`~specgen.exceptions.ConfigError`.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specgen.exceptions import ConfigError
from specgen.models import GeneratorConfig

_APP_NAME = "specgen"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specgen.json"

_ENV_PREFIX = "SPECGEN_"
_ENV_FIELDS = (
    "default_service",
    "service_suffix",
    "version_parameter",
    "version_expression",
    "preferred_media_types",
    "max_workers",
)


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the user configuration directory.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specgen/`` (default ``~/.config/specgen/``).
    On macOS/Windows: ``~/.specgen/``.  The directory is not created; specgen
    only ever reads from it.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        return base / _APP_NAME
    return Path.home() / f".{_APP_NAME}"


# --- Config files ---


def _read_json_object(path: Path, label: str) -> Optional[dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {label} config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} config at {path}: expected a JSON object")
    return data


def load_global_config() -> dict[str, Any]:
    """Load the user configuration file.

    Returns:
        The parsed JSON object, or an empty dict if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a valid JSON object.
    """
    return _read_json_object(get_config_dir() / _CONFIG_FILENAME, "global") or {}


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specgen.json``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a valid JSON object.
    """
    return _read_json_object(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project")


def load_env_config() -> dict[str, Any]:
    """Collect ``SPECGEN_*`` environment variables into a partial config.

    ``SPECGEN_PREFERRED_MEDIA_TYPES`` is a comma-separated list.  Empty
    variables are ignored.
    """
    values: dict[str, Any] = {}
    for field in _ENV_FIELDS:
        raw = os.environ.get(f"{_ENV_PREFIX}{field.upper()}", "")
        if not raw:
            continue
        if field == "preferred_media_types":
            values[field] = [item.strip() for item in raw.split(",") if item.strip()]
        else:
            values[field] = raw
    return values


# --- Precedence resolution ---


def resolve_config(overrides: Optional[dict[str, Any]] = None) -> GeneratorConfig:
    """Resolve the effective generator configuration.

    Args:
        overrides: Highest-precedence values, usually from CLI flags.
            Entries whose value is ``None`` are ignored.

    Returns:
        The validated :class:`~specgen.models.GeneratorConfig`.

    Raises:
        ConfigError: If a config file is malformed or the merged values fail
            validation.
    """
    merged: dict[str, Any] = {}
    merged.update(load_global_config())
    merged.update(load_project_config() or {})
    merged.update(load_env_config())
    merged.update({key: value for key, value in (overrides or {}).items() if value is not None})

    try:
        return GeneratorConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
