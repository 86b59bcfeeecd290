"""Style options, configuration and path management."""

from __future__ import annotations

import json
import math
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import fields as dataclass_fields
from pathlib import Path
from typing import Any

from matplotlib import colors as mcolors


__all__ = [
    "DEFAULT_EXPORT_DPI",
    "OptionsValidationError",
    "StyleOptions",
    "generate_output_filename",
    "get_export_dpi",
    "get_posters_dir",
    "load_options",
    "normalize_color",
]

DEFAULT_EXPORT_DPI = 300

# camelCase names used by the web UI
OPTION_ALIASES: dict[str, str] = {
    "showBuildings": "show_buildings",
    "buildingColor": "building_color",
    "waterColor": "water_color",
    "roadColor": "road_color",
    "parkColor": "park_color",
    "backgroundColor": "background_color",
    "roadWidthScale": "road_width_scale",
}

COLOR_OPTIONS = (
    "building_color",
    "water_color",
    "road_color",
    "park_color",
    "background_color",
)


_CSS_COLOR_FUNCTION = re.compile(r"(rgba?|hsla?)\((.*)\)", re.IGNORECASE)
_CSS_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(%?)")


class OptionsValidationError(ValueError):
    """Raised when style options are out of range or malformed."""

    pass


def _parse_css_number(token: str) -> tuple[float, bool] | None:
    match = _CSS_NUMBER.fullmatch(token)
    if match is None:
        return None
    is_percent = bool(match.group(1))
    return float(token.rstrip("%")), is_percent


def _is_css_color_function(value: str) -> bool:
    """Check ``rgb()``, ``rgba()``, ``hsl()`` and ``hsla()`` notations."""
    match = _CSS_COLOR_FUNCTION.fullmatch(value)
    if match is None:
        return False
    args = [_parse_css_number(arg.strip()) for arg in match.group(2).split(",")]
    if len(args) not in (3, 4) or any(arg is None for arg in args):
        return False

    if len(args) == 4:
        alpha, alpha_percent = args[3]
        if not 0 <= alpha <= (100 if alpha_percent else 1):
            return False

    if match.group(1).lower().startswith("rgb"):
        # All percentages or all numbers 0-255
        channels = args[:3]
        if all(is_percent for _, is_percent in channels):
            return all(0 <= number <= 100 for number, _ in channels)
        return all(not is_percent and 0 <= number <= 255 for number, is_percent in channels)

    (_, hue_percent), saturation, lightness = args[:3]
    return (
        not hue_percent
        and all(is_percent and 0 <= number <= 100 for number, is_percent in (saturation, lightness))
    )


def normalize_color(value: Any) -> str:
    """Return ``value`` as a colour string a map renderer understands.

    CSS functional notations (``rgb()``, ``rgba()``, ``hsl()``, ``hsla()``)
    are kept as written. Anything else matplotlib can parse, including named
    colours and ``#rgb`` shorthand, is converted to ``#rrggbb`` (or
    ``#rrggbbaa`` when translucent).

    Raises:
        ValueError: If ``value`` is not a colour string.
    """
    if not isinstance(value, str):
        raise ValueError(f"Colour must be a string, got {value!r}")
    stripped = value.strip()
    if _is_css_color_function(stripped):
        return stripped
    if not mcolors.is_color_like(stripped):
        raise ValueError(f"Not a valid colour: {value!r}")
    rgba = mcolors.to_rgba(stripped)
    return mcolors.to_hex(rgba, keep_alpha=rgba[3] < 1)


@dataclass(frozen=True)
class StyleOptions:
    """User overrides applied on top of a palette.

    A colour left as ``None`` means "use the palette colour". Colours are
    stored normalized by :func:`normalize_color`.
    """

    show_buildings: bool = True
    building_color: str | None = None
    water_color: str | None = None
    road_color: str | None = None
    park_color: str | None = None
    background_color: str | None = None
    road_width_scale: float = 1.0

    def __post_init__(self) -> None:
        """Validate and normalize colours, then check the road width scale."""
        for name in COLOR_OPTIONS:
            value = getattr(self, name)
            if value is None:
                continue
            try:
                object.__setattr__(self, name, normalize_color(value))
            except ValueError as exc:
                raise OptionsValidationError(f"Option '{name}' is not a valid colour: {value!r}") from exc

        scale = self.road_width_scale
        if isinstance(scale, bool) or not isinstance(scale, (int, float)):
            raise OptionsValidationError(f"Option 'road_width_scale' must be a number, got {scale!r}")
        if not math.isfinite(scale) or scale <= 0:
            raise OptionsValidationError(f"Option 'road_width_scale' must be positive, got {scale!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> StyleOptions:
        """Build options from snake_case or camelCase keys.

        Raises:
            OptionsValidationError: On unknown keys or invalid values.
        """
        allowed_keys = {field.name for field in dataclass_fields(cls)}
        values: dict[str, Any] = {}
        unknown: list[str] = []
        for key, value in data.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in allowed_keys:
                unknown.append(key)
                continue
            values[name] = value
        if unknown:
            raise OptionsValidationError(f"Unknown style option keys: {sorted(unknown)}")
        return cls(**values)


def load_options(path: str | Path) -> StyleOptions:
    """Load StyleOptions from a JSON file."""
    with Path(path).open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise OptionsValidationError("Options file must be a JSON object.")
    return StyleOptions.from_mapping(data)


def get_export_dpi() -> int:
    """Get the export DPI from ``POSTERSTUDIO_EXPORT_DPI`` or the default."""
    raw = os.environ.get("POSTERSTUDIO_EXPORT_DPI")
    if not raw:
        return DEFAULT_EXPORT_DPI
    try:
        dpi = int(raw)
    except ValueError as exc:
        raise ValueError(f"POSTERSTUDIO_EXPORT_DPI must be an integer, got {raw!r}") from exc
    if dpi <= 0:
        raise ValueError(f"POSTERSTUDIO_EXPORT_DPI must be positive, got {dpi}")
    return dpi


def get_posters_dir() -> Path:
    """Get the posters output directory, creating it if necessary."""
    posters_dir = Path(os.environ.get("POSTERSTUDIO_POSTERS_DIR", "posters"))
    posters_dir.mkdir(parents=True, exist_ok=True)
    return posters_dir


def _sanitize_filename(name: str) -> str:
    """Sanitize string for use in filenames across platforms.

    Replaces invalid characters and handles Windows reserved names.
    """
    # Windows: < > : " / \ | ? *, plus spaces and commas
    sanitized = re.sub(r'[<>:"/\\|?*\s,\']', "_", name)

    # Remove leading/trailing dots and spaces (Windows issue)
    sanitized = sanitized.strip(". ")

    sanitized = re.sub(r"_+", "_", sanitized)

    reserved = {"CON", "PRN", "AUX", "NUL"}
    reserved.update(f"COM{i}" for i in range(1, 10))
    reserved.update(f"LPT{i}" for i in range(1, 10))

    if sanitized.upper() in reserved:
        sanitized = f"_{sanitized}"

    return sanitized or "unnamed"


def generate_output_filename(city: str | None, palette_name: str) -> Path:
    """Return the poster file path for a city and palette.

    An empty city name falls back to ``Map``.
    """
    city_slug = _sanitize_filename(city or "Map")
    palette_slug = _sanitize_filename(palette_name)
    return get_posters_dir() / f"MapPoster_{city_slug}_{palette_slug}.png"
