"""XDG-compliant path management for reclaim.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and state storage, plus the user cache root that
reclaim scans.

XDG defaults:
- Config: ~/.config/reclaim/
- State: ~/.local/state/reclaim/
- User cache root: ~/.cache/

Backup archives live under the state directory and are the only data
reclaim persists on its own.
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "reclaim"


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
        Path to ~/.config/reclaim/ (or XDG_CONFIG_HOME/reclaim/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    Returns:
        Path to ~/.local/state/reclaim/ (or XDG_STATE_HOME/reclaim/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_user_cache_root() -> Path:
    """Get the user's cache root shared by all applications.

    This is the directory reclaim cleans, not one it writes to.

    Returns:
        Path to ~/.cache/ (or XDG_CACHE_HOME/).
    """
    base = os.environ.get("XDG_CACHE_HOME")
    return Path(base) if base else Path.home() / ".cache"


def get_config_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to ~/.config/reclaim/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_backup_dir() -> Path:
    """Get the backup storage root.

    Every cleanup that requests a backup writes one archive here.

    Returns:
        Path to ~/.local/state/reclaim/backups/.
    """
    return get_state_dir() / "backups"


def _ensure_dir(path: Path, name: str) -> Path:
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


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_backup_dir(path: Path | None = None) -> Path:
    """Create the backup directory if it doesn't exist.

    Args:
        path: Custom backup root. Defaults to get_backup_dir().

    Returns:
        Path to the backup directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(path or get_backup_dir(), "backup")
