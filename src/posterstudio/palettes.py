"""Palette registry and palette file loading."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from dataclasses import fields as dataclass_fields
from types import MappingProxyType
from typing import Any

from .config import normalize_color
from .roads import RoadWidthFunction
from .style_constants import (
    ROAD_OPACITY_DEFAULT,
    ROAD_WIDTHS_BLUEPRINT,
    ROAD_WIDTHS_BOTANICAL,
    ROAD_WIDTHS_CLASSIC,
    ROAD_WIDTHS_MIDNIGHT,
    ROAD_WIDTHS_SWISS,
    ROAD_WIDTHS_VINTAGE,
    TRANSPARENT,
)


__all__ = [
    "PALETTES",
    "Palette",
    "PaletteNotFoundError",
    "PosterFrame",
    "get_available_palettes",
    "get_palette",
    "get_palette_description",
    "load_palette_file",
]


class PaletteNotFoundError(KeyError):
    """Raised when a palette name is not in the registry."""

    pass


@dataclass(frozen=True)
class PosterFrame:
    """Colours of the poster surround drawn around the map."""

    border: str = "#000000"
    text: str = "#000000"
    background: str = "#ffffff"


@dataclass(frozen=True)
class Palette:
    """Canonical colours for one poster aesthetic.

    ``road_minor``, ``park`` and ``aviation`` may be left as ``None``; the
    resolver then falls back to the major road colour or the built-in
    defaults.
    """

    name: str
    background: str
    water: str
    road_major: str
    building: str
    road_minor: str | None = None
    park: str | None = None
    aviation: str | None = None
    description: str = ""
    building_outline: str = TRANSPARENT
    road_opacity: float = ROAD_OPACITY_DEFAULT
    hide_ground_cover: bool = False
    road_widths: RoadWidthFunction = field(
        default_factory=lambda: RoadWidthFunction(ROAD_WIDTHS_CLASSIC)
    )
    frame: PosterFrame = field(default_factory=PosterFrame)


_PALETTE_LIST = (
    Palette(
        name="classic",
        description="Black roads on light grey with white water",
        background="#eeeeee",
        water="#ffffff",
        road_major="#000000",
        road_minor="#555555",
        building="#dcdcdc",
        park="#e5e5e5",
        road_widths=RoadWidthFunction(ROAD_WIDTHS_CLASSIC),
        frame=PosterFrame(border="#000000", text="#000000", background="#ffffff"),
    ),
    Palette(
        name="vintage",
        description="Sepia land, coffee roads and muted water; minor roads fade out",
        background="#e0d8c8",
        water="#b8c5cc",
        road_major="#4a3c31",
        building="#d4c5b0",
        park="#d1c7b8",
        building_outline="#b0a090",
        road_opacity=0.85,
        road_widths=RoadWidthFunction(ROAD_WIDTHS_VINTAGE),
        frame=PosterFrame(border="#8b7355", text="#5c4a3a", background="#e0d8c8"),
    ),
    Palette(
        # Technical drawing: vegetation is omitted unless explicitly coloured
        name="blueprint",
        description="Cobalt linework on white, no vegetation",
        background="#ffffff",
        water="#e6eaf0",
        road_major="#294380",
        building="#e6eaf0",
        hide_ground_cover=True,
        road_widths=RoadWidthFunction(ROAD_WIDTHS_BLUEPRINT),
        frame=PosterFrame(border="#294380", text="#294380", background="#ffffff"),
    ),
    Palette(
        name="midnight",
        description="Pale streets glowing on a deep navy night",
        background="#0b1026",
        water="#1b2a4a",
        road_major="#e8e6d9",
        road_minor="#8a8fa3",
        building="#1f2740",
        park="#141d33",
        aviation="#2a3352",
        road_opacity=0.95,
        road_widths=RoadWidthFunction(ROAD_WIDTHS_MIDNIGHT),
        frame=PosterFrame(border="#e8e6d9", text="#e8e6d9", background="#0b1026"),
    ),
    Palette(
        name="swiss",
        description="International style: red arterials over warm paper",
        background="#f5f1e8",
        water="#9cc3d5",
        road_major="#d7262b",
        road_minor="#3a3a3a",
        building="#d9d3c7",
        park="#cfdcc0",
        aviation="#e3ddd0",
        road_widths=RoadWidthFunction(ROAD_WIDTHS_SWISS),
        frame=PosterFrame(border="#d7262b", text="#1a1a1a", background="#f5f1e8"),
    ),
    Palette(
        name="botanical",
        description="Forest green roads through sage parkland",
        background="#eef2e6",
        water="#a9c7c1",
        road_major="#2f4a2f",
        building="#d7dccb",
        park="#b5cc9a",
        aviation="#dfe4d4",
        building_outline="#c4cab5",
        road_opacity=0.9,
        road_widths=RoadWidthFunction(ROAD_WIDTHS_BOTANICAL),
        frame=PosterFrame(border="#2f4a2f", text="#2f4a2f", background="#eef2e6"),
    ),
)

PALETTES: MappingProxyType[str, Palette] = MappingProxyType(
    {palette.name: palette for palette in _PALETTE_LIST}
)


def get_available_palettes() -> list[str]:
    """Return available palette names."""
    return sorted(PALETTES.keys())


def get_palette(name: str) -> Palette:
    """Return the palette registered under ``name``."""
    if name not in PALETTES:
        raise PaletteNotFoundError(f"Unknown palette '{name}'.")
    return PALETTES[name]


def get_palette_description(name: str) -> str:
    """Return the description for a palette name."""
    return get_palette(name).description


_COLOR_FIELDS = ("background", "water", "road_major", "building", "building_outline")
_OPTIONAL_COLOR_FIELDS = ("road_minor", "park", "aviation")


def _validate_palette_values(values: dict[str, Any]) -> dict[str, Any]:
    """Type-check palette file values and normalize their colours."""
    for key in ("name", "description"):
        if key in values and not isinstance(values[key], str):
            raise ValueError(f"Palette '{key}' must be a string, got {values[key]!r}")

    for key in _COLOR_FIELDS + _OPTIONAL_COLOR_FIELDS:
        if key not in values or (values[key] is None and key in _OPTIONAL_COLOR_FIELDS):
            continue
        try:
            values[key] = normalize_color(values[key])
        except ValueError as exc:
            raise ValueError(f"Palette '{key}' is not a valid colour: {values[key]!r}") from exc

    if "road_opacity" in values:
        opacity = values["road_opacity"]
        if isinstance(opacity, bool) or not isinstance(opacity, (int, float)):
            raise ValueError(f"Palette 'road_opacity' must be a number, got {opacity!r}")
        if not 0 <= opacity <= 1:
            raise ValueError(f"Palette 'road_opacity' must be between 0 and 1, got {opacity!r}")

    if "hide_ground_cover" in values and not isinstance(values["hide_ground_cover"], bool):
        raise ValueError(
            f"Palette 'hide_ground_cover' must be true or false, got {values['hide_ground_cover']!r}"
        )

    if "frame" in values:
        frame = values["frame"]
        if not isinstance(frame, dict):
            raise ValueError("Palette 'frame' must be a JSON object.")
        normalized_frame = dict(frame)
        for key, colour in frame.items():
            try:
                normalized_frame[key] = normalize_color(colour)
            except ValueError as exc:
                raise ValueError(f"Palette frame '{key}' is not a valid colour: {colour!r}") from exc
        values["frame"] = normalized_frame
    return values


def load_palette_file(path: str) -> Palette:
    """Load a custom Palette from a JSON file.

    The object uses the Palette field names. ``road_widths`` is a list of
    ``[zoom, motorway, primary, other]`` stops and ``frame`` an object with
    ``border``/``text``/``background``. The palette is returned, not
    registered.
    """
    with open(path, encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError("Palette file must be a JSON object.")
    allowed_keys = {field.name for field in dataclass_fields(Palette)}
    unknown_keys = set(data) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown palette keys: {sorted(unknown_keys)}")

    values = _validate_palette_values(dict(data))
    try:
        if "road_widths" in values:
            values["road_widths"] = RoadWidthFunction(tuple(values["road_widths"]))
        if "frame" in values:
            values["frame"] = PosterFrame(**values["frame"])
        return Palette(**values)
    except TypeError as exc:
        raise ValueError(f"Invalid palette file '{path}': {exc}") from exc
