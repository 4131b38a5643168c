"""XDG-compliant path management for craftbrew.

Configuration and state live in the XDG base directories, honouring
XDG_CONFIG_HOME and XDG_STATE_HOME when set.

XDG defaults:
- Config: ~/.config/craftbrew/ (config.toml, theme.toml, manifests/)
- State: ~/.local/state/craftbrew/ (snapshots/, operations.jsonl, craftbrew.log)
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "craftbrew"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/craftbrew/ (or XDG_CONFIG_HOME/craftbrew/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes snapshots and logs that should persist between
    runs but is not configuration.

    Returns:
        Path to ~/.local/state/craftbrew/ (or XDG_STATE_HOME/craftbrew/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Get the configuration file path.

    Returns:
        Path to ~/.config/craftbrew/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/craftbrew/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_manifests_dir() -> Path:
    """Get the default directory that holds the manifest files.

    Returns:
        Path to ~/.config/craftbrew/manifests/.
    """
    return get_config_dir() / "manifests"


def get_snapshot_dir() -> Path:
    """Get the default snapshot store directory.

    Returns:
        Path to ~/.local/state/craftbrew/snapshots/.
    """
    return get_state_dir() / "snapshots"


def get_oplog_path() -> Path:
    """Get the operation log path.

    Returns:
        Path to ~/.local/state/craftbrew/operations.jsonl.
    """
    return get_state_dir() / "operations.jsonl"


def get_log_file_path() -> Path:
    """Get the diagnostic log file path.

    Returns:
        Path to ~/.local/state/craftbrew/craftbrew.log.
    """
    return get_state_dir() / "craftbrew.log"


def expand_path(path: str | Path) -> Path:
    """Expand '~' and environment variables in a configured path."""
    return Path(os.path.expandvars(str(path))).expanduser()


def ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
