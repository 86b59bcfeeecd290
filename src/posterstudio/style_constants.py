"""Shared style constants."""

from __future__ import annotations


__all__ = [
    "CASING_MARKER",
    "DEFAULT_AVIATION_COLOR",
    "DEFAULT_BUILDING_COLOR",
    "DEFAULT_PARK_COLOR",
    "GROUND_COVER_SOURCE_LAYERS",
    "MAJOR_ROAD_CLASSES",
    "ROAD_OPACITY_DEFAULT",
    "ROAD_WIDTHS_BLUEPRINT",
    "ROAD_WIDTHS_BOTANICAL",
    "ROAD_WIDTHS_CLASSIC",
    "ROAD_WIDTHS_MIDNIGHT",
    "ROAD_WIDTHS_SWISS",
    "ROAD_WIDTHS_VINTAGE",
    "TRANSPARENT",
]

# Paint value used to hide outline seams
TRANSPARENT = "rgba(0,0,0,0)"

# Built-in fallbacks for roles a palette leaves unset
DEFAULT_BUILDING_COLOR = "#dcdcdc"
DEFAULT_PARK_COLOR = "#e5e5e5"
DEFAULT_AVIATION_COLOR = "#d8d8d8"

ROAD_OPACITY_DEFAULT = 1.0

# Layer ids containing this marker draw road halos
CASING_MARKER = "casing"

GROUND_COVER_SOURCE_LAYERS = frozenset({"park", "landuse", "landcover"})

# Feature classes that take the major road tint
MAJOR_ROAD_CLASSES = ("motorway", "trunk", "primary", "secondary")

# Road width stops: (zoom, motorway/trunk, primary/secondary, other) in px
ROAD_WIDTHS_CLASSIC = (
    (10, 2.5, 1.0, 0.5),
    (12, 6.0, 2.5, 0.8),
    (14, 13.0, 5.0, 1.5),
    (16, 22.0, 10.0, 4.0),
)
# Minor roads fade out entirely
ROAD_WIDTHS_VINTAGE = (
    (10, 3.0, 1.5, 0.0),
    (12, 7.0, 3.0, 0.0),
    (14, 14.0, 5.0, 0.0),
    (16, 24.0, 10.0, 0.0),
)
ROAD_WIDTHS_BLUEPRINT = (
    (10, 2.0, 1.0, 0.5),
    (12, 5.0, 2.0, 0.5),
    (14, 10.0, 4.0, 1.0),
    (16, 18.0, 8.0, 2.0),
)
ROAD_WIDTHS_MIDNIGHT = (
    (10, 3.0, 1.5, 0.5),
    (12, 6.0, 3.0, 1.0),
    (14, 12.0, 6.0, 2.0),
    (16, 20.0, 10.0, 4.0),
)
ROAD_WIDTHS_SWISS = (
    (10, 3.0, 1.5, 0.5),
    (12, 6.0, 2.5, 1.0),
    (14, 12.0, 5.0, 2.0),
    (16, 21.0, 9.0, 3.5),
)
ROAD_WIDTHS_BOTANICAL = (
    (10, 2.5, 1.0, 0.0),
    (12, 5.0, 2.0, 0.5),
    (14, 10.0, 4.0, 1.5),
    (16, 18.0, 8.0, 3.0),
)
