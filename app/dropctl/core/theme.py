"""Color theme for dr output.

The bundled data/theme.toml holds the defaults. A theme.toml in the user
config directory may override any subset of its [colors] table.
"""

import logging
import re
import tomllib
from functools import cache
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator
from rich.theme import Theme

from dropctl.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


class ThemeColors(BaseModel):
    """Colors used by dr, as #RGB or #RRGGBB hex codes."""

    model_config = ConfigDict(extra="forbid")

    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    success: str = "#03b971"
    error: str = "#f53263"
    info: str = "#0ec1c8"
    dropped: str = "#0e8ac8"
    foreign: str = "#d44ebc"

    @field_validator("*")
    @classmethod
    def validate_hex_color(cls, v: str, info: ValidationInfo) -> str:
        """Reject anything that is not a hex color code."""
        color = v.strip()
        if not _HEX_COLOR_RE.match(color):
            msg = f"{info.field_name}: '{color}' is not a #RGB or #RRGGBB color"
            raise ValueError(msg)
        return color


def _bundled_theme_file() -> Traversable:
    return resources.files("dropctl.data").joinpath("theme.toml")


def _read_colors(path: Path | Traversable) -> dict[str, object]:
    """Read the [colors] table of a theme file.

    A missing file is silently empty. An unreadable or malformed one is
    logged and treated as empty.
    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return {}
    return colors


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Merge the user's overrides over the bundled colors.

    Args:
        user_path: Override file. Defaults to the config directory theme.toml.

    Returns:
        Validated colors; the defaults when the merged result is invalid.
    """
    colors = _read_colors(_bundled_theme_file())
    colors.update(_read_colors(user_path or get_user_theme_path()))

    try:
        return ThemeColors.model_validate(colors)
    except ValidationError as e:
        logger.warning("Invalid theme, using defaults: %s", e)
        return ThemeColors()


def build_rich_theme(colors: ThemeColors) -> Theme:
    """Map theme colors onto the style names used in markup and tables."""
    return Theme(
        {
            "muted": colors.muted,
            "dim": colors.muted,
            "bold_header": f"bold {colors.header}",
            "border": colors.border,
            "success": colors.success,
            "error": f"bold {colors.error}",
            "info": colors.info,
            "dropped": colors.dropped,
            "foreign": f"italic {colors.foreign}",
        }
    )


@cache
def get_theme() -> Theme:
    """Rich theme for the shared consoles, loaded once per process."""
    return build_rich_theme(load_theme())
