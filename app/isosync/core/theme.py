"""Console color theme for isosync.

Colors come from the bundled ``data/theme.toml``; any subset of keys can
be overridden in ``~/.config/isosync/theme.toml``. The merged palette is
validated and turned into a Rich theme whose style names (``added``,
``removed``, ``hunk``...) are used by the console helpers and the diff
renderer.
"""

import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from isosync.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)


class ThemeColors(BaseModel):
    """Palette used for console output. Values are #RGB or #RRGGBB."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Diff markers
    added: str = "#c1ff62"
    removed: str = "#f53263"
    hunk: str = "#0ec1c8"
    label: str = "#ffffff"
    flagged: str = "#faf870"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        """Accept only hex color strings."""
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        digits = color[1:]
        if not color.startswith("#"):
            msg = f"{info.field_name}: color must start with '#'"
            raise ValueError(msg)
        if len(digits) not in (3, 6):
            msg = f"{info.field_name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        if any(c not in "0123456789abcdefABCDEF" for c in digits):
            msg = f"{info.field_name}: invalid hex color '{color}'"
            raise ValueError(msg)
        return color


# Rich style name -> (palette key, style prefix)
STYLE_MAP: dict[str, tuple[str, str]] = {
    "text": ("text", ""),
    "muted": ("muted", ""),
    "header": ("header", ""),
    "bold_header": ("header", "bold "),
    "border": ("border", ""),
    "success": ("success", ""),
    "warning": ("warning", ""),
    "error": ("error", "bold "),
    "info": ("info", ""),
    "added": ("added", ""),
    "removed": ("removed", ""),
    "hunk": ("hunk", ""),
    "label": ("label", "bold "),
    "flagged": ("flagged", "bold "),
}


def get_bundled_theme_path() -> Path:
    """Path of the theme file shipped with the package."""
    return Path(str(resources.files("isosync.data").joinpath("theme.toml")))


def _read_colors(path: Path) -> dict[str, str]:
    """Read the [colors] table of a theme file.

    Missing or unreadable files yield an empty mapping; problems other
    than a missing file are logged.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as e:
        logger.warning("Ignoring theme file %s: invalid TOML: %s", path, e)
        return {}
    except OSError as e:
        logger.warning("Cannot read theme file %s: %s", path, e)
        return {}

    section = data.get("colors", {})
    if not isinstance(section, dict):
        logger.warning("Ignoring theme file %s: 'colors' is not a table", path)
        return {}
    return {k: v for k, v in section.items() if isinstance(v, str)}


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Load the palette, applying user overrides on top of the bundled theme.

    Args:
        user_path: Override file. Defaults to ~/.config/isosync/theme.toml.

    Returns:
        Validated colors. Falls back to built-in defaults if the merged
        palette is invalid.
    """
    colors = _read_colors(get_bundled_theme_path())
    if not colors:
        logger.error("Bundled theme is missing or empty; using built-in colors")

    overrides = _read_colors(user_path or get_user_theme_path())
    if overrides:
        logger.debug("Applying %d theme override(s)", len(overrides))
    colors.update(overrides)

    try:
        return ThemeColors(**colors)
    except ValidationError as e:
        logger.warning("Invalid theme colors, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build a Rich theme from a palette (loaded if not given)."""
    palette = colors or load_theme()
    return Theme(
        {name: f"{prefix}{getattr(palette, key)}" for name, (key, prefix) in STYLE_MAP.items()}
    )


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme, loading it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme


def reload_theme() -> Theme:
    """Reload the Rich theme from the theme files."""
    global _cached_theme
    _cached_theme = get_rich_theme()
    return _cached_theme
