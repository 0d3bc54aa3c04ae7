"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from src.config.loader import load_config
from src.config.settings import Settings
from src.utils.errors import ConfigurationError


def _settings(**overrides) -> Settings:
    """Build a Settings instance that ignores any local .env file."""
    defaults = {"app_env": "test"}
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


class TestSettings:
    def test_defaults(self) -> None:
        s = _settings()
        assert s.fetch_min_interval == 0.9
        assert s.prefetch_window == 3
        assert s.decision_cooldown == 1.0
        assert s.jikan_base_url == "https://api.jikan.moe/v4"
        assert s.shuffle_seed is None

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FETCH_MIN_INTERVAL", "1.5")
        monkeypatch.setenv("PREFETCH_WINDOW", "5")
        monkeypatch.setenv("SHUFFLE_SEED", "42")

        s = Settings(_env_file=None)

        assert s.fetch_min_interval == 1.5
        assert s.prefetch_window == 5
        assert s.shuffle_seed == 42

    def test_negative_interval_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _settings(fetch_min_interval=-0.1)

    def test_negative_window_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _settings(prefetch_window=-1)


class TestLoadConfig:
    def test_yaml_values_kept_and_settings_merged(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "api:\n  cors_origins:\n    - https://picker.example.com\n"
            "list:\n  allowed_extensions:\n    - .xml\n",
            encoding="utf-8",
        )

        config = load_config(str(path), settings=_settings(prefetch_window=4))

        assert config["api"]["cors_origins"] == ["https://picker.example.com"]
        assert config["list"]["allowed_extensions"] == [".xml"]
        assert config["list"]["max_upload_bytes"] == 5 * 1024 * 1024
        assert config["enrichment"]["prefetch_window"] == 4
        assert config["app"]["env"] == "test"

    def test_missing_file_yields_settings_only(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), settings=_settings())

        assert "api" not in config
        assert config["enrichment"]["fetch_min_interval"] == 0.9

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        config = load_config(str(path), settings=_settings())

        assert config["session"]["decision_cooldown"] == 1.0

    def test_repo_config_file_loads(self, project_root: Path) -> None:
        config = load_config(str(project_root / "config" / "config.yaml"), settings=_settings())
        assert config["api"]["cors_origins"] == ["*"]

    def test_non_mapping_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_config(str(path), settings=_settings())
