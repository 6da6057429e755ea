"""Tests for apinav.config -- XDG data path, project config, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from apinav.config import get_data_dir, load_project_config, resolve_config
from apinav.exceptions import ConfigError
from apinav.models import CollisionPolicy, ParserConfig

_ENV_NAMES = (
    "APINAV_MAX_REF_DEPTH",
    "APINAV_NAV_PREFIX",
    "APINAV_DEFAULT_TAG",
    "APINAV_COLLISION_POLICY",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty directory with no APINAV_* variables set."""
    monkeypatch.chdir(tmp_path)
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def _write_project_config(directory: Path, data: Any) -> None:
    (directory / "apinav.json").write_text(json.dumps(data), encoding="utf-8")


# ---------------------------------------------------------------------------
# Data directory
# ---------------------------------------------------------------------------


class TestDataDir:
    """Crash-log directory resolution."""

    def test_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("apinav.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()

        assert result == tmp_path / ".local" / "share" / "apinav"
        assert result.is_dir()

    def test_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_data"
        monkeypatch.setattr("apinav.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(custom))

        assert get_data_dir() == custom / "apinav"

    def test_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("apinav.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()

        assert result == tmp_path / ".apinav" / "logs"
        assert result.is_dir()


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestLoadProjectConfig:
    """./apinav.json discovery and validation."""

    def test_missing_file(self, project_dir: Path) -> None:
        assert load_project_config() is None

    def test_loads_object(self, project_dir: Path) -> None:
        _write_project_config(project_dir, {"nav_prefix": "/docs"})
        assert load_project_config() == {"nav_prefix": "/docs"}

    def test_invalid_json(self, project_dir: Path) -> None:
        (project_dir / "apinav.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_non_object(self, project_dir: Path) -> None:
        _write_project_config(project_dir, ["nav_prefix"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    """CLI > env > project file > defaults."""

    def test_defaults(self, project_dir: Path) -> None:
        assert resolve_config() == ParserConfig()

    def test_project_file(self, project_dir: Path) -> None:
        _write_project_config(project_dir, {"nav_prefix": "/docs", "collision_policy": "suffix"})

        config = resolve_config()

        assert config.nav_prefix == "/docs"
        assert config.collision_policy is CollisionPolicy.SUFFIX

    def test_env_beats_project_file(self, project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_project_config(project_dir, {"default_tag": "from-file", "max_ref_depth": 5})
        monkeypatch.setenv("APINAV_DEFAULT_TAG", "from-env")
        monkeypatch.setenv("APINAV_MAX_REF_DEPTH", "7")

        config = resolve_config()

        assert config.default_tag == "from-env"
        assert config.max_ref_depth == 7

    def test_cli_beats_env(self, project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APINAV_COLLISION_POLICY", "suffix")

        config = resolve_config({"collision_policy": CollisionPolicy.ERROR})

        assert config.collision_policy is CollisionPolicy.ERROR

    def test_none_cli_values_are_ignored(self, project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APINAV_NAV_PREFIX", "/env")

        config = resolve_config({"nav_prefix": None, "default_tag": None})

        assert config.nav_prefix == "/env"
        assert config.default_tag == "default"

    def test_empty_env_values_are_ignored(self, project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APINAV_NAV_PREFIX", "")
        assert resolve_config().nav_prefix == "/api_reference"

    def test_unknown_project_keys(self, project_dir: Path) -> None:
        _write_project_config(project_dir, {"nav_prefix": "/docs", "colour": "blue"})
        with pytest.raises(ConfigError, match="Unknown keys in apinav.json: colour"):
            resolve_config()

    def test_invalid_collision_policy(self, project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APINAV_COLLISION_POLICY", "ignore")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config()

    def test_invalid_depth(self, project_dir: Path) -> None:
        with pytest.raises(ConfigError):
            resolve_config({"max_ref_depth": 0})
