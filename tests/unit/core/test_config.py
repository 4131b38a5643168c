"""Unit tests for configuration loading and saving."""

import tomllib
from pathlib import Path

import pytest
from craftbrew.core.config import (
    DEFAULT_PROFILES,
    CraftbrewConfig,
    EngineSettings,
    load_config,
    save_config,
)
from craftbrew.core.errors import ConfigError
from craftbrew.core.paths import get_config_path, get_manifests_dir, get_snapshot_dir
from craftbrew.models.plan import PlanOrder
from pydantic import ValidationError


class TestCraftbrewConfig:
    """Tests for the configuration model."""

    def test_defaults(self) -> None:
        """An empty config has usable defaults."""
        config = CraftbrewConfig()

        assert config.protected == []
        assert config.engine.default_profile == "base"
        assert config.engine.order == PlanOrder.INSTALLS_FIRST
        assert config.retry.attempts == 3
        assert config.client.timeout_seconds == 600
        assert config.manifests_dir == get_manifests_dir()
        assert config.snapshot_dir == get_snapshot_dir()

    def test_protected_entries_validated(self) -> None:
        """Protected entries must use kind:name notation."""
        CraftbrewConfig(protected=["formula:git", "cask:1password", "mas:Xcode"])

        with pytest.raises(ValidationError, match="must look like"):
            CraftbrewConfig(protected=["git"])

        with pytest.raises(ValidationError, match="unknown kind 'npm'"):
            CraftbrewConfig(protected=["npm:left-pad"])

    def test_unknown_keys_rejected(self) -> None:
        """Typos in config keys are errors."""
        with pytest.raises(ValidationError):
            CraftbrewConfig.model_validate({"engine": {"ordr": "removals-first"}})

    def test_retry_bounds(self) -> None:
        """Retry attempts are bounded."""
        with pytest.raises(ValidationError):
            CraftbrewConfig.model_validate({"retry": {"attempts": 0}})

    def test_empty_profile_rejected(self) -> None:
        """Profiles must list manifests."""
        with pytest.raises(ValidationError, match="at least one manifest"):
            CraftbrewConfig(profiles={"empty": []})

    def test_profiles_merge_with_defaults(self) -> None:
        """Configured profiles extend and override the built-in ones."""
        config = CraftbrewConfig(profiles={"dev": ["dev.brewfile"], "work": ["work.brewfile"]})

        profiles = config.all_profiles

        assert profiles["dev"] == ["dev.brewfile"]
        assert profiles["work"] == ["work.brewfile"]
        assert profiles["all"] == DEFAULT_PROFILES["all"]

    def test_directories_expand_user(self) -> None:
        """Configured directories expand '~'."""
        config = CraftbrewConfig(engine=EngineSettings(manifests_dir="~/dotfiles/brew"))

        assert config.manifests_dir == Path.home() / "dotfiles" / "brew"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_missing_default_file(self) -> None:
        """A missing default config gives defaults."""
        assert load_config() == CraftbrewConfig()

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        """A missing --config file is an error with an init hint."""
        with pytest.raises(ConfigError, match="Config file not found") as exc_info:
            load_config(tmp_path / "nope.toml")

        assert "craftbrew init" in (exc_info.value.hint or "")

    def test_loads_values(self, tmp_path: Path) -> None:
        """Values from the file are applied."""
        path = tmp_path / "config.toml"
        path.write_text(
            'protected = ["formula:git"]\n'
            "[engine]\n"
            'order = "removals-first"\n'
            "[retry]\n"
            "attempts = 5\n"
        )

        config = load_config(path)

        assert config.protected == ["formula:git"]
        assert config.engine.order == PlanOrder.REMOVALS_FIRST
        assert config.retry.attempts == 5

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML raises ConfigError."""
        path = tmp_path / "config.toml"
        path.write_text("protected = [\n")

        with pytest.raises(ConfigError, match="Invalid TOML syntax"):
            load_config(path)

    def test_invalid_content(self, tmp_path: Path) -> None:
        """Schema violations raise ConfigError."""
        path = tmp_path / "config.toml"
        path.write_text('[engine]\norder = "sideways"\n')

        with pytest.raises(ConfigError, match="Invalid config content"):
            load_config(path)


class TestSaveConfig:
    """Tests for save_config function."""

    def test_save_to_default_path(self) -> None:
        """save_config writes to the XDG config path by default."""
        path = save_config(CraftbrewConfig())

        assert path == get_config_path()
        assert path.is_file()

    def test_round_trip(self, tmp_path: Path) -> None:
        """A saved config loads back identically."""
        config = CraftbrewConfig(
            protected=["cask:1password"],
            engine=EngineSettings(order=PlanOrder.REMOVALS_FIRST, default_profile="dev"),
            profiles={"work": ["base.brewfile", "work.brewfile"]},
        )

        path = save_config(config, tmp_path / "config.toml")

        assert load_config(path) == config

    def test_none_values_omitted(self, tmp_path: Path) -> None:
        """Unset optional directories are not written."""
        path = save_config(CraftbrewConfig(), tmp_path / "config.toml")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        assert "manifests_dir" not in data["engine"]
        assert data["engine"]["order"] == "installs-first"
