"""Configuration model and I/O for craftbrew.

Configuration is stored in ~/.config/craftbrew/config.toml. A missing
file is not an error: every setting has a default.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from craftbrew.core.errors import ConfigError
from craftbrew.core.paths import (
    expand_path,
    get_config_path,
    get_manifests_dir,
    get_snapshot_dir,
)
from craftbrew.models.package import PackageKind
from craftbrew.models.plan import PlanOrder

logger = logging.getLogger(__name__)

# Built-in profiles for --system, mirroring the dotfiles Brewfile layout
DEFAULT_PROFILES: dict[str, list[str]] = {
    "base": ["base.brewfile"],
    "dev": ["base.brewfile", "dev.brewfile"],
    "productivity": ["base.brewfile", "productivity.brewfile"],
    "utilities": ["base.brewfile", "utilities.brewfile"],
    "all": [
        "base.brewfile",
        "dev.brewfile",
        "productivity.brewfile",
        "utilities.brewfile",
    ],
}


class EngineSettings(BaseModel):
    """Reconciliation engine settings.

    Attributes:
        manifests_dir: Directory searched for manifest names (None = XDG default).
        snapshot_dir: Snapshot store directory (None = XDG default).
        default_profile: Profile used when no manifests are given.
        order: Whether installs or removals run first.
    """

    model_config = ConfigDict(extra="forbid")

    manifests_dir: Annotated[
        str | None,
        Field(description="Directory containing manifest files"),
    ] = None
    snapshot_dir: Annotated[
        str | None,
        Field(description="Directory for snapshots"),
    ] = None
    default_profile: Annotated[
        str,
        Field(min_length=1, description="Profile used without --system/--manifests"),
    ] = "base"
    order: Annotated[
        PlanOrder,
        Field(description="Batch order: installs-first or removals-first"),
    ] = PlanOrder.INSTALLS_FIRST


class ClientSettings(BaseModel):
    """Package-manager client settings."""

    model_config = ConfigDict(extra="forbid")

    timeout_seconds: Annotated[
        int,
        Field(ge=10, le=7200, description="Timeout for install/remove calls"),
    ] = 600
    list_timeout_seconds: Annotated[
        int,
        Field(ge=5, le=600, description="Timeout for listing installed packages"),
    ] = 60


class RetrySettings(BaseModel):
    """Retry policy for transient client failures."""

    model_config = ConfigDict(extra="forbid")

    attempts: Annotated[
        int,
        Field(ge=1, le=10, description="Total attempts per operation"),
    ] = 3
    backoff_seconds: Annotated[
        float,
        Field(ge=0, le=300, description="Linear backoff step between attempts"),
    ] = 2.0


class CraftbrewConfig(BaseModel):
    """Top-level craftbrew configuration.

    Attributes:
        protected: Extra identities that must never be removed ('formula:git').
        engine: Engine settings.
        client: Client timeouts.
        retry: Retry policy.
        profiles: Profile overrides and additions (name -> manifest names).
    """

    model_config = ConfigDict(extra="forbid")

    protected: list[str] = Field(default_factory=list)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    profiles: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("protected")
    @classmethod
    def validate_protected(cls, v: list[str]) -> list[str]:
        """Validate 'kind:name' identity notation."""
        for entry in v:
            kind, sep, name = entry.partition(":")
            if not sep or not name:
                msg = f"Protected entry '{entry}' must look like 'formula:git'"
                raise ValueError(msg)
            valid = {k.value for k in PackageKind} | {k.keyword for k in PackageKind}
            if kind not in valid:
                msg = f"Protected entry '{entry}' has unknown kind '{kind}'"
                raise ValueError(msg)
        return v

    @field_validator("profiles")
    @classmethod
    def validate_profiles(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        """Reject empty profiles."""
        for name, manifests in v.items():
            if not manifests:
                msg = f"Profile '{name}' must list at least one manifest"
                raise ValueError(msg)
        return v

    @property
    def manifests_dir(self) -> Path:
        """Effective manifest directory."""
        if self.engine.manifests_dir:
            return expand_path(self.engine.manifests_dir)
        return get_manifests_dir()

    @property
    def snapshot_dir(self) -> Path:
        """Effective snapshot directory."""
        if self.engine.snapshot_dir:
            return expand_path(self.engine.snapshot_dir)
        return get_snapshot_dir()

    @property
    def all_profiles(self) -> dict[str, list[str]]:
        """Built-in profiles with configured overrides applied."""
        return {**DEFAULT_PROFILES, **self.profiles}


def load_config(path: Path | None = None) -> CraftbrewConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated CraftbrewConfig; defaults if the file does not exist.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        if path is not None:
            raise ConfigError(
                f"Config file not found: {config_path}",
                hint="Run 'craftbrew init' to create one, or drop --config.",
            )
        logger.debug("No config file at %s, using defaults", config_path)
        return CraftbrewConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        config = CraftbrewConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e

    logger.debug("Loaded config from %s", config_path)
    return config


def save_config(config: CraftbrewConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The configuration to save.
        path: Destination. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # mode="json" turns enums into their values; None is not representable in TOML
    data = config.model_dump(mode="json", exclude_none=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config {config_path}: {e}") from e

    return config_path
