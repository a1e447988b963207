"""XDG-compliant path management for dropctl.

This module provides the configuration directory location and the
default holding directory for dropped entries.

Defaults:
- Config: ~/.config/dropctl/
- Holding: /tmp/dr (cleared on reboot on most systems)
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "dropctl"

# Default holding directory for dropped entries
DEFAULT_HOLDING_DIR = Path("/tmp/dr")

# Environment variable overriding the configured holding directory
HOLDING_DIR_ENV = "DROPCTL_HOLDING_DIR"


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
        Path to ~/.config/dropctl/ (or XDG_CONFIG_HOME/dropctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_config_path() -> Path:
    """Get the main configuration file path.

    Returns:
        Path to ~/.config/dropctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_user_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/dropctl/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_env_holding_dir() -> Path | None:
    """Get the holding directory override from the environment.

    Returns:
        Path from DROPCTL_HOLDING_DIR, or None if unset or empty.
    """
    value = os.environ.get(HOLDING_DIR_ENV)
    if value:
        return Path(value)
    return None
