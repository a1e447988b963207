"""dropctl configuration and settings.

This module provides the configuration model and loader for dropctl.
The only persisted setting is the location of the holding directory.

Configuration is stored in ~/.config/dropctl/config.toml, e.g.:

    holding_dir = "/var/tmp/dr"

Precedence when resolving the holding directory:
1. Explicit override (the --holding-dir CLI option)
2. DROPCTL_HOLDING_DIR environment variable
3. Config file
4. Built-in default (/tmp/dr)
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dropctl.core.paths import DEFAULT_HOLDING_DIR, get_config_path, get_env_holding_dir

logger = logging.getLogger(__name__)


class DropConfig(BaseModel):
    """Configuration for dropctl.

    Attributes:
        holding_dir: Absolute path of the flat directory holding dropped entries.
    """

    model_config = ConfigDict(extra="forbid")

    holding_dir: Annotated[
        Path,
        Field(description="Directory where dropped entries are kept"),
    ] = DEFAULT_HOLDING_DIR

    @field_validator("holding_dir", mode="after")
    @classmethod
    def validate_absolute(cls, v: Path) -> Path:
        """Require an absolute holding directory."""
        expanded = v.expanduser()
        if not expanded.is_absolute():
            msg = f"holding_dir must be an absolute path, got '{v}'"
            raise ValueError(msg)
        return expanded


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> DropConfig:
    """Load configuration from a TOML file.

    A missing config file is not an error; defaults are returned.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated DropConfig object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return DropConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return DropConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def resolve_holding_dir(override: Path | None = None, config_path: Path | None = None) -> Path:
    """Determine the holding directory for this invocation.

    Args:
        override: Explicit directory (highest precedence).
        config_path: Alternative config file location.

    Returns:
        Absolute holding directory path.

    Raises:
        ConfigError: If the config file is unreadable or invalid, or if an
            override is not absolute.
    """
    if override is None:
        override = get_env_holding_dir()

    if override is not None:
        try:
            return DropConfig(holding_dir=override).holding_dir
        except ValidationError as e:
            raise ConfigError(f"Invalid holding directory '{override}': {e}") from e

    return load_config(config_path).holding_dir
