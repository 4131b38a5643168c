"""Theme management for craftbrew CLI.

The palette lives in ThemeColors. Users can override single colors in
~/.config/craftbrew/theme.toml:

    [colors]
    added = "#00ff00"
    removed = "#ff5f5f"

Anything invalid in that file is logged and the defaults are used.
"""

import functools
import logging
import re
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from craftbrew.core.paths import get_theme_path

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")

# Rich style name -> style template over the ThemeColors fields
STYLES: dict[str, str] = {
    "text": "{text}",
    "muted": "{muted}",
    "header": "{header}",
    "bold_header": "bold {header}",
    "border": "{border}",
    "success": "{success}",
    "warning": "{warning}",
    "error": "bold {error}",
    "info": "{info}",
    "added": "{added}",
    "removed": "{removed}",
    "unchanged": "{unchanged}",
    "protected": "{protected}",
}


class ThemeColors(BaseModel):
    """Palette used by the CLI tables and messages."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#e0a458"
    border: str = "#5c4033"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Diff and plan markers
    added: str = "#c1ff62"
    removed: str = "#f53263"
    unchanged: str = "#636e72"
    protected: str = "#a29bfe"

    @field_validator("*", mode="before")
    @classmethod
    def check_hex(cls, v: object) -> str:
        if not isinstance(v, str) or not HEX_COLOR.fullmatch(v.strip()):
            msg = f"expected a hex color like #RRGGBB or #RGB, got {v!r}"
            raise ValueError(msg)
        return v.strip()


def read_color_overrides(path: Path) -> dict[str, str]:
    """Read the ``[colors]`` table of a theme file.

    Non-string values are dropped. A missing, unreadable or malformed
    file yields no overrides.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: 'colors' must be a table", path)
        return {}
    return {name: value for name, value in colors.items() if isinstance(value, str)}


def load_theme(path: Path | None = None) -> ThemeColors:
    """Return the default palette with the user's overrides applied."""
    theme_path = path or get_theme_path()
    overrides = read_color_overrides(theme_path)
    if not overrides:
        return ThemeColors()

    try:
        colors = ThemeColors(**overrides)
    except ValidationError as e:
        logger.warning("Invalid theme file %s, using default colors: %s", theme_path, e)
        return ThemeColors()
    logger.debug("Applied %d color override(s) from %s", len(overrides), theme_path)
    return colors


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme for a palette (the user's palette by default)."""
    values = (colors or load_theme()).model_dump()
    return Theme({name: template.format(**values) for name, template in STYLES.items()})


@functools.cache
def get_theme() -> Theme:
    """Rich theme shared by the CLI consoles, built once per process."""
    return get_rich_theme()
