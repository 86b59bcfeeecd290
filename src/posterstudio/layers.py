"""Render layer descriptors and semantic classification."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .style_constants import GROUND_COVER_SOURCE_LAYERS


__all__ = [
    "Category",
    "LayerDescriptor",
    "LayerKind",
    "classify",
]

logger = logging.getLogger(__name__)


class LayerKind(Enum):
    """Visual kind of a render layer."""

    BACKGROUND = "background"
    FILL = "fill"
    LINE = "line"
    SYMBOL = "symbol"
    OTHER = "other"

    @classmethod
    def from_type(cls, layer_type: str | None) -> LayerKind:
        """Map a MapLibre layer ``type`` onto a kind; unknown types are OTHER."""
        try:
            return cls(layer_type)
        except ValueError:
            return cls.OTHER


class Category(Enum):
    """Semantic role of a layer on the poster."""

    BACKGROUND = "background"
    WATER = "water"
    BUILDING = "building"
    GROUND_COVER = "ground_cover"
    ROAD = "road"
    AVIATION = "aviation"
    LABEL = "label"
    IGNORED = "ignored"


@dataclass(frozen=True)
class LayerDescriptor:
    """Read-only view of one layer in the live scene."""

    id: str
    kind: LayerKind
    source_layer: str = ""

    @classmethod
    def from_style_layer(cls, layer: Mapping[str, Any]) -> LayerDescriptor:
        """Build a descriptor from a style document layer object."""
        return cls(
            id=str(layer["id"]),
            kind=LayerKind.from_type(layer.get("type")),
            source_layer=layer.get("source-layer") or "",
        )


def classify(descriptor: LayerDescriptor) -> Category:
    """Determine the semantic category of a layer.

    Rules are checked in order; the first match wins:

    1. symbol layers are labels,
    2. water fills, building fills, park/landuse/landcover fills,
    3. transportation lines are roads,
    4. aeroway fills and lines are aviation,
    5. background layers,
    6. anything else is ignored.
    """
    kind = descriptor.kind
    source_layer = descriptor.source_layer

    if kind is LayerKind.SYMBOL:
        category = Category.LABEL
    elif kind is LayerKind.FILL and source_layer == "water":
        category = Category.WATER
    elif kind is LayerKind.FILL and source_layer == "building":
        category = Category.BUILDING
    elif kind is LayerKind.FILL and source_layer in GROUND_COVER_SOURCE_LAYERS:
        category = Category.GROUND_COVER
    elif kind is LayerKind.LINE and source_layer == "transportation":
        category = Category.ROAD
    elif kind in (LayerKind.FILL, LayerKind.LINE) and source_layer == "aeroway":
        category = Category.AVIATION
    elif kind is LayerKind.BACKGROUND:
        category = Category.BACKGROUND
    else:
        category = Category.IGNORED

    logger.debug("Classified layer %s as %s", descriptor.id, category.value)
    return category
