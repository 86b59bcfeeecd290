"""Style resolution: palettes and options to per-layer paint instructions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from .config import StyleOptions
from .layers import Category, LayerDescriptor, LayerKind, classify
from .palettes import Palette, get_palette
from .roads import road_color_expression
from .style_constants import (
    CASING_MARKER,
    DEFAULT_AVIATION_COLOR,
    DEFAULT_BUILDING_COLOR,
    DEFAULT_PARK_COLOR,
    TRANSPARENT,
)


__all__ = [
    "PaintInstruction",
    "Scene",
    "SceneNotReadyError",
    "StyleReport",
    "apply_instruction",
    "apply_style",
    "resolve",
    "resolve_layer",
]

logger = logging.getLogger(__name__)


class SceneNotReadyError(RuntimeError):
    """Raised when styling is attempted before the scene has loaded."""

    pass


class Scene(Protocol):
    """Capability the resolver needs from a live map scene."""

    def is_style_loaded(self) -> bool:
        """Whether the scene finished its initial load."""
        ...

    def get_layers(self) -> list[LayerDescriptor]:
        """Current layers with kind and source-layer."""
        ...

    def set_visibility(self, layer_id: str, visible: bool) -> None:
        """Show or hide a layer."""
        ...

    def get_paint_property(self, layer_id: str, name: str) -> Any:
        """Current value of a paint property, or None when unset."""
        ...

    def set_paint_property(self, layer_id: str, name: str, value: Any) -> None:
        """Set a paint property on a layer."""
        ...

    def trigger_repaint(self) -> None:
        """Ask the scene to redraw."""
        ...


@dataclass(frozen=True)
class PaintInstruction:
    """Resolved visibility and paint values for one layer.

    ``paint_if_present`` values are only written when the layer already
    carries the property, so styles without outlines or gap widths are not
    given new ones.
    """

    layer_id: str
    category: Category
    visible: bool
    paint: dict[str, Any] = field(default_factory=dict)
    paint_if_present: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StyleReport:
    """Outcome of one styling pass over a scene."""

    palette: str
    applied: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    failed: tuple[tuple[str, str], ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failed


def _role(override: str | None, palette_value: str | None, default: str | None = None) -> str:
    if override is not None:
        return override
    if palette_value is not None:
        return palette_value
    if default is None:
        raise ValueError("Palette leaves a required colour unset.")
    return default


def _lookup_palette(palette: str | Palette) -> Palette:
    if isinstance(palette, Palette):
        return palette
    return get_palette(palette)


def _coerce_options(options: StyleOptions | Mapping[str, Any] | None) -> StyleOptions:
    if options is None:
        return StyleOptions()
    if isinstance(options, StyleOptions):
        return options
    return StyleOptions.from_mapping(options)


def _resolve_label(palette: Palette, descriptor: LayerDescriptor, options: StyleOptions) -> PaintInstruction:
    # Posters draw their own typography
    return PaintInstruction(descriptor.id, Category.LABEL, visible=False)


def _resolve_background(
    palette: Palette, descriptor: LayerDescriptor, options: StyleOptions
) -> PaintInstruction:
    color = _role(options.background_color, palette.background)
    return PaintInstruction(descriptor.id, Category.BACKGROUND, True, {"background-color": color})


def _resolve_water(palette: Palette, descriptor: LayerDescriptor, options: StyleOptions) -> PaintInstruction:
    color = _role(options.water_color, palette.water)
    return PaintInstruction(descriptor.id, Category.WATER, True, {"fill-color": color})


def _resolve_building(
    palette: Palette, descriptor: LayerDescriptor, options: StyleOptions
) -> PaintInstruction:
    paint: dict[str, Any] = {}
    if options.show_buildings:
        paint["fill-color"] = _role(options.building_color, palette.building, DEFAULT_BUILDING_COLOR)
    return PaintInstruction(
        descriptor.id,
        Category.BUILDING,
        visible=options.show_buildings,
        paint=paint,
        paint_if_present={"fill-outline-color": palette.building_outline},
    )


def _resolve_ground_cover(
    palette: Palette, descriptor: LayerDescriptor, options: StyleOptions
) -> PaintInstruction:
    if palette.hide_ground_cover and options.park_color is None:
        return PaintInstruction(descriptor.id, Category.GROUND_COVER, visible=False)
    return PaintInstruction(
        descriptor.id,
        Category.GROUND_COVER,
        visible=True,
        paint={"fill-color": _role(options.park_color, palette.park, DEFAULT_PARK_COLOR)},
        paint_if_present={"fill-outline-color": TRANSPARENT},
    )


def _resolve_road(palette: Palette, descriptor: LayerDescriptor, options: StyleOptions) -> PaintInstruction:
    if CASING_MARKER in descriptor.id.lower():
        return PaintInstruction(descriptor.id, Category.ROAD, visible=False)

    if options.road_color is not None:
        line_color: Any = options.road_color
    else:
        # One transportation layer carries features of every class
        line_color = road_color_expression(palette.road_major, palette.road_minor)

    widths = palette.road_widths.scaled(options.road_width_scale)
    return PaintInstruction(
        descriptor.id,
        Category.ROAD,
        visible=True,
        paint={
            "line-color": line_color,
            "line-width": widths.to_expression(),
            "line-opacity": palette.road_opacity,
        },
        paint_if_present={"line-gap-width": 0},
    )


def _resolve_aviation(
    palette: Palette, descriptor: LayerDescriptor, options: StyleOptions
) -> PaintInstruction:
    color = palette.aviation or DEFAULT_AVIATION_COLOR
    prop = "fill-color" if descriptor.kind is LayerKind.FILL else "line-color"
    return PaintInstruction(descriptor.id, Category.AVIATION, True, {prop: color})


_Resolver = Callable[[Palette, LayerDescriptor, StyleOptions], PaintInstruction]

_RESOLVERS: dict[Category, _Resolver] = {
    Category.LABEL: _resolve_label,
    Category.BACKGROUND: _resolve_background,
    Category.WATER: _resolve_water,
    Category.BUILDING: _resolve_building,
    Category.GROUND_COVER: _resolve_ground_cover,
    Category.ROAD: _resolve_road,
    Category.AVIATION: _resolve_aviation,
}


def resolve(
    palette: str | Palette,
    category: Category,
    descriptor: LayerDescriptor,
    options: StyleOptions | Mapping[str, Any] | None = None,
) -> PaintInstruction | None:
    """Compute the paint instruction for one classified layer.

    Role colours resolve as option override, then palette colour, then the
    built-in default.

    Args:
        palette: Palette name or a Palette instance.
        category: Category from :func:`classify`.
        descriptor: The layer being styled.
        options: User overrides; a mapping may use the camelCase names.

    Returns:
        The instruction, or None for ignored layers.

    Raises:
        PaletteNotFoundError: If ``palette`` names no registered palette.
    """
    resolved_palette = _lookup_palette(palette)
    handler = _RESOLVERS.get(category)
    if handler is None:
        return None
    return handler(resolved_palette, descriptor, _coerce_options(options))


def resolve_layer(
    palette: str | Palette,
    descriptor: LayerDescriptor,
    options: StyleOptions | Mapping[str, Any] | None = None,
) -> PaintInstruction | None:
    """Classify a layer and resolve its paint instruction."""
    return resolve(palette, classify(descriptor), descriptor, options)


def apply_instruction(scene: Scene, instruction: PaintInstruction) -> None:
    """Write an instruction to the scene. Applying it twice is a no-op."""
    layer_id = instruction.layer_id
    scene.set_visibility(layer_id, instruction.visible)
    for name, value in instruction.paint.items():
        scene.set_paint_property(layer_id, name, value)
    for name, value in instruction.paint_if_present.items():
        if scene.get_paint_property(layer_id, name):
            scene.set_paint_property(layer_id, name, value)


def apply_style(
    scene: Scene,
    palette: str | Palette,
    options: StyleOptions | Mapping[str, Any] | None = None,
) -> StyleReport:
    """Restyle every layer in a loaded scene.

    Each layer is resolved and applied independently; a failure on one layer
    is logged and reported without stopping the others. Call again whenever
    the palette or any option changes.

    Raises:
        PaletteNotFoundError: If the palette name is unknown.
        SceneNotReadyError: If the scene has not finished loading.
    """
    resolved_palette = _lookup_palette(palette)
    resolved_options = _coerce_options(options)
    if not scene.is_style_loaded():
        raise SceneNotReadyError("Scene has not finished loading; apply the style once it is ready.")

    applied: list[str] = []
    skipped: list[str] = []
    failed: list[tuple[str, str]] = []

    for descriptor in scene.get_layers():
        try:
            instruction = resolve_layer(resolved_palette, descriptor, resolved_options)
            if instruction is None:
                skipped.append(descriptor.id)
                continue
            apply_instruction(scene, instruction)
        except Exception as e:
            logger.warning("Style error for layer %s: %s", descriptor.id, e, exc_info=True)
            failed.append((descriptor.id, str(e)))
            continue
        applied.append(descriptor.id)

    scene.trigger_repaint()
    logger.info(
        "Applied palette %s: %d layers styled, %d skipped, %d failed",
        resolved_palette.name,
        len(applied),
        len(skipped),
        len(failed),
    )
    return StyleReport(
        palette=resolved_palette.name,
        applied=tuple(applied),
        skipped=tuple(skipped),
        failed=tuple(failed),
    )
