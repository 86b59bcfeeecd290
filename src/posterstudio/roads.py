"""Road tiers and zoom-dependent road widths."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .style_constants import MAJOR_ROAD_CLASSES


__all__ = [
    "RoadClass",
    "RoadWidthFunction",
    "road_color_expression",
]


class RoadClass(Enum):
    """Width tiers, widest first."""

    MOTORWAY = "motorway"
    PRIMARY = "primary"
    OTHER = "other"

    @property
    def feature_classes(self) -> tuple[str, ...]:
        """Feature ``class`` values that fall into this tier."""
        return _FEATURE_CLASSES[self]

    @classmethod
    def from_feature_class(cls, value: str | None) -> RoadClass:
        """Classify a road feature by its ``class`` attribute."""
        for road_class, feature_classes in _FEATURE_CLASSES.items():
            if value in feature_classes:
                return road_class
        return cls.OTHER


_FEATURE_CLASSES: dict[RoadClass, tuple[str, ...]] = {
    RoadClass.MOTORWAY: ("motorway", "trunk"),
    RoadClass.PRIMARY: ("primary", "secondary"),
    RoadClass.OTHER: (),
}

_TIER_INDEX: dict[RoadClass, int] = {
    RoadClass.MOTORWAY: 1,
    RoadClass.PRIMARY: 2,
    RoadClass.OTHER: 3,
}

WidthStop = tuple[float, float, float, float]


@dataclass(frozen=True)
class RoadWidthFunction:
    """Zoom-interpolated, class-tiered road width.

    Each stop is ``(zoom, motorway, primary, other)``. Widths between stops
    are interpolated linearly and clamped to the first/last stop outside the
    covered zoom range. Every width is multiplied by ``scale``.
    """

    stops: tuple[WidthStop, ...]
    scale: float = 1.0

    def __post_init__(self) -> None:
        """Normalize stops and check tier ordering."""
        stops = tuple(tuple(stop) for stop in self.stops)
        object.__setattr__(self, "stops", stops)

        if not stops:
            raise ValueError("Road width function needs at least one stop.")
        if not math.isfinite(self.scale) or self.scale <= 0:
            raise ValueError(f"Road width scale must be positive, got {self.scale!r}.")

        previous: Sequence[float] | None = None
        for stop in stops:
            if len(stop) != 4:
                raise ValueError(f"Road width stop must have 4 values, got {stop!r}.")
            zoom, motorway, primary, other = stop
            if min(motorway, primary, other) < 0:
                raise ValueError(f"Negative road width at zoom {zoom}.")
            if not motorway >= primary >= other:
                raise ValueError(f"Road widths at zoom {zoom} must be tiered motorway >= primary >= other.")
            if previous is not None:
                if zoom <= previous[0]:
                    raise ValueError("Road width stops must have strictly increasing zooms.")
                if any(current < before for current, before in zip(stop[1:], previous[1:])):
                    raise ValueError(f"Road widths must not shrink with zoom (at zoom {zoom}).")
            previous = stop

    @property
    def zooms(self) -> tuple[float, ...]:
        return tuple(stop[0] for stop in self.stops)

    def scaled(self, factor: float) -> RoadWidthFunction:
        """Return a copy with every width multiplied by ``factor``."""
        return replace(self, scale=self.scale * factor)

    def width(self, road_class: RoadClass, zoom: float) -> float:
        """Width in pixels for a road tier at a zoom level."""
        return self.scale * self._base_width(_TIER_INDEX[road_class], zoom)

    def _base_width(self, tier: int, zoom: float) -> float:
        first, last = self.stops[0], self.stops[-1]
        if zoom <= first[0]:
            return first[tier]
        if zoom >= last[0]:
            return last[tier]
        for lower, upper in zip(self.stops, self.stops[1:]):
            if zoom == lower[0]:
                return lower[tier]
            if zoom < upper[0]:
                t = (zoom - lower[0]) / (upper[0] - lower[0])
                return lower[tier] + t * (upper[tier] - lower[tier])
        return last[tier]  # pragma: no cover

    def to_expression(self) -> list[Any]:
        """Render as a MapLibre ``interpolate`` expression over ``match`` tiers."""
        expression: list[Any] = ["interpolate", ["linear"], ["zoom"]]
        for zoom, motorway, primary, other in self.stops:
            expression.append(zoom)
            expression.append(
                [
                    "match",
                    ["get", "class"],
                    list(RoadClass.MOTORWAY.feature_classes),
                    motorway * self.scale,
                    list(RoadClass.PRIMARY.feature_classes),
                    primary * self.scale,
                    other * self.scale,
                ]
            )
        return expression


def road_color_expression(major: str, minor: str | None) -> str | list[Any]:
    """Return a line colour, tinting minor roads per feature when they differ."""
    if minor is None or minor == major:
        return major
    return ["match", ["get", "class"], list(MAJOR_ROAD_CLASSES), major, minor]
