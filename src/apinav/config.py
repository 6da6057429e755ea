"""Parser configuration with precedence resolution and XDG data paths.

This module decides the effective :class:`~apinav.models.ParserConfig` for a
run and where the CLI writes its crash logs:

* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  ``APINAV_*`` environment variables, the project-local ``./apinav.json``
  and model defaults, highest first.
* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.apinav/`` on macOS and Windows. See :func:`get_data_dir`.

Values from every layer are validated together by Pydantic; anything it
rejects surfaces as :class:`~apinav.exceptions.ConfigError`.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from apinav.exceptions import ConfigError
from apinav.models import ParserConfig

_APP_NAME = "apinav"
_PROJECT_CONFIG_FILENAME = "apinav.json"

# Environment variable -> ParserConfig field
_ENV_VARS = {
    "APINAV_MAX_REF_DEPTH": "max_ref_depth",
    "APINAV_NAV_PREFIX": "nav_prefix",
    "APINAV_DEFAULT_TAG": "default_tag",
    "APINAV_COLLISION_POLICY": "collision_policy",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/apinav/`` (default ``~/.local/share/apinav/``).
    On macOS/Windows: ``~/.apinav/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./apinav.json``.

    The file holds a JSON object with any subset of the
    :class:`~apinav.models.ParserConfig` fields, e.g.
    ``{"nav_prefix": "/docs/api", "collision_policy": "suffix"}``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _env_overrides() -> dict[str, str]:
    """Non-empty ``APINAV_*`` variables, keyed by config field."""
    return {
        field: os.environ[var]
        for var, field in _ENV_VARS.items()
        if os.environ.get(var)
    }


# --- Precedence resolution ---


def resolve_config(cli_overrides: Optional[dict[str, Any]] = None) -> ParserConfig:
    """Resolve the parser configuration with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_overrides``; ``None`` values are ignored)
        2. Environment variables (``APINAV_MAX_REF_DEPTH``,
           ``APINAV_NAV_PREFIX``, ``APINAV_DEFAULT_TAG``,
           ``APINAV_COLLISION_POLICY``)
        3. Project config (``./apinav.json``)
        4. Defaults

    Args:
        cli_overrides: Field name -> value pairs from the command line.

    Returns:
        The effective :class:`~apinav.models.ParserConfig`.

    Raises:
        ConfigError: If the merged values fail validation (unknown collision
            policy, non-numeric depth, ...).
    """
    merged: dict[str, Any] = {}

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        unknown = set(project) - set(ParserConfig.model_fields)
        if unknown:
            raise ConfigError(
                f"Unknown keys in {_PROJECT_CONFIG_FILENAME}: {', '.join(sorted(unknown))}"
            )
        merged.update(project)

    # 2. Environment variables
    merged.update(_env_overrides())

    # 1. CLI flags (highest precedence)
    if cli_overrides:
        merged.update({k: v for k, v in cli_overrides.items() if v is not None})

    try:
        return ParserConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
