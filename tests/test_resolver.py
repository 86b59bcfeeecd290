"""Tests for style resolution."""

from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Any, ClassVar

import pytest

from posterstudio.config import StyleOptions
from posterstudio.layers import Category, LayerDescriptor, LayerKind, classify
from posterstudio.palettes import PALETTES, PaletteNotFoundError, get_palette
from posterstudio.resolver import PaintInstruction, apply_instruction, resolve, resolve_layer
from posterstudio.style_constants import (
    DEFAULT_AVIATION_COLOR,
    DEFAULT_PARK_COLOR,
    TRANSPARENT,
)


BACKGROUND = LayerDescriptor("background", LayerKind.BACKGROUND)
WATER = LayerDescriptor("water", LayerKind.FILL, "water")
BUILDING = LayerDescriptor("building", LayerKind.FILL, "building")
PARK = LayerDescriptor("park", LayerKind.FILL, "park")
ROAD = LayerDescriptor("highway_major", LayerKind.LINE, "transportation")
ROAD_CASING = LayerDescriptor("highway_major_casing", LayerKind.LINE, "transportation")
RUNWAY = LayerDescriptor("aeroway_runway", LayerKind.LINE, "aeroway")
APRON = LayerDescriptor("aeroway_fill", LayerKind.FILL, "aeroway")
LABEL = LayerDescriptor("place_label", LayerKind.SYMBOL, "place")

OPTION_VARIANTS = [
    StyleOptions(),
    StyleOptions(show_buildings=False),
    StyleOptions(
        building_color="#111111",
        water_color="#222222",
        road_color="#333333",
        park_color="#444444",
        background_color="#555555",
        road_width_scale=2.5,
    ),
]


class TestLabels:
    """Label layers are never shown."""

    @pytest.mark.parametrize(
        ("palette_name", "options"), list(itertools.product(sorted(PALETTES), OPTION_VARIANTS))
    )
    def test_label_always_hidden(self, palette_name: str, options: StyleOptions) -> None:
        """Labels resolve to hidden with no paint for any palette and options."""
        instruction = resolve_layer(palette_name, LABEL, options)
        assert instruction is not None
        assert instruction.visible is False
        assert instruction.paint == {}
        assert instruction.category is Category.LABEL


class TestColourRoles:
    """Override precedence for background and water."""

    def test_palette_water(self) -> None:
        """Without overrides the palette's water colour is used."""
        instruction = resolve("classic", Category.WATER, WATER, StyleOptions())
        assert instruction is not None
        assert instruction.paint == {"fill-color": "#ffffff"}
        assert instruction.visible is True

    def test_water_override(self) -> None:
        """A water override beats the palette colour."""
        instruction = resolve("classic", Category.WATER, WATER, StyleOptions(water_color="#123456"))
        assert instruction is not None
        assert instruction.paint["fill-color"] == "#123456"

    @pytest.mark.parametrize("colour", ["rgb(18,52,86)", "rgba(18, 52, 86, 0.5)", "hsl(210, 65%, 20%)"])
    def test_css_function_override(self, colour: str) -> None:
        """CSS functional colours reach the paint property as written."""
        instruction = resolve("classic", Category.WATER, WATER, {"waterColor": colour})
        assert instruction is not None
        assert instruction.paint["fill-color"] == colour

    def test_mapping_options(self) -> None:
        """Options may be given as a camelCase mapping."""
        overridden = resolve("classic", Category.WATER, WATER, {"waterColor": "#123456"})
        default = resolve("classic", Category.WATER, WATER, {})
        assert overridden is not None and default is not None
        assert overridden.paint["fill-color"] == "#123456"
        assert default.paint["fill-color"] == get_palette("classic").water

    @pytest.mark.parametrize("palette_name", sorted(PALETTES))
    def test_background(self, palette_name: str) -> None:
        """Backgrounds take the palette background or the override."""
        palette = get_palette(palette_name)
        plain = resolve(palette_name, Category.BACKGROUND, BACKGROUND)
        overridden = resolve(
            palette_name, Category.BACKGROUND, BACKGROUND, StyleOptions(background_color="#010203")
        )
        assert plain is not None and overridden is not None
        assert plain.paint == {"background-color": palette.background}
        assert overridden.paint == {"background-color": "#010203"}


class TestBuildings:
    """Building visibility and colour."""

    def test_hidden_when_disabled(self) -> None:
        """Buildings are hidden and not recoloured when switched off."""
        instruction = resolve("classic", Category.BUILDING, BUILDING, StyleOptions(show_buildings=False))
        assert instruction is not None
        assert instruction.visible is False
        assert "fill-color" not in instruction.paint

    def test_palette_colour(self) -> None:
        """Visible buildings use the palette colour."""
        instruction = resolve("vintage", Category.BUILDING, BUILDING)
        assert instruction is not None
        assert instruction.visible is True
        assert instruction.paint["fill-color"] == "#d4c5b0"

    def test_override_colour(self) -> None:
        """A building colour override wins."""
        instruction = resolve("blueprint", Category.BUILDING, BUILDING, StyleOptions(building_color="#ff0000"))
        assert instruction is not None
        assert instruction.paint["fill-color"] == "#ff0000"

    def test_outline_transparent(self) -> None:
        """Plain palettes hide the outline seam."""
        instruction = resolve("classic", Category.BUILDING, BUILDING)
        assert instruction is not None
        assert instruction.paint_if_present == {"fill-outline-color": TRANSPARENT}

    def test_outline_tint_for_textured_palette(self) -> None:
        """Textured palettes tint the outline instead."""
        instruction = resolve("vintage", Category.BUILDING, BUILDING)
        assert instruction is not None
        assert instruction.paint_if_present == {"fill-outline-color": "#b0a090"}


class TestGroundCover:
    """Parks, landuse and landcover."""

    def test_palette_park(self) -> None:
        """Ground cover uses the palette park colour."""
        instruction = resolve("classic", Category.GROUND_COVER, PARK)
        assert instruction is not None
        assert instruction.visible is True
        assert instruction.paint == {"fill-color": "#e5e5e5"}
        assert instruction.paint_if_present == {"fill-outline-color": TRANSPARENT}

    def test_blueprint_hides_ground_cover(self) -> None:
        """The technical drawing palette omits vegetation by default."""
        instruction = resolve("blueprint", Category.GROUND_COVER, PARK)
        assert instruction is not None
        assert instruction.visible is False
        assert instruction.paint == {}

    def test_blueprint_shows_ground_cover_with_override(self) -> None:
        """An explicit park colour brings vegetation back."""
        instruction = resolve("blueprint", Category.GROUND_COVER, PARK, StyleOptions(park_color="#00aa00"))
        assert instruction is not None
        assert instruction.visible is True
        assert instruction.paint == {"fill-color": "#00aa00"}

    def test_missing_park_uses_default(self) -> None:
        """A palette without a park colour falls back to the built-in default."""
        palette = replace(get_palette("classic"), park=None)
        instruction = resolve(palette, Category.GROUND_COVER, PARK)
        assert instruction is not None
        assert instruction.paint == {"fill-color": DEFAULT_PARK_COLOR}


class TestRoads:
    """Road colour, width and casing."""

    @pytest.mark.parametrize(
        ("palette_name", "options"), list(itertools.product(sorted(PALETTES), OPTION_VARIANTS))
    )
    def test_casing_always_hidden(self, palette_name: str, options: StyleOptions) -> None:
        """Casing layers are suppressed regardless of palette and options."""
        instruction = resolve(palette_name, Category.ROAD, ROAD_CASING, options)
        assert instruction is not None
        assert instruction.visible is False
        assert instruction.paint == {}

    def test_casing_match_is_case_insensitive(self) -> None:
        """Upper-case casing ids are suppressed too."""
        descriptor = LayerDescriptor("Road_Casing_Minor", LayerKind.LINE, "transportation")
        instruction = resolve("classic", Category.ROAD, descriptor)
        assert instruction is not None
        assert instruction.visible is False

    def test_minor_tint_by_feature_class(self) -> None:
        """Palettes with a minor tint colour roads per feature class."""
        instruction = resolve("classic", Category.ROAD, ROAD)
        assert instruction is not None
        assert instruction.visible is True
        assert instruction.paint["line-color"] == [
            "match",
            ["get", "class"],
            ["motorway", "trunk", "primary", "secondary"],
            "#000000",
            "#555555",
        ]

    def test_single_road_colour(self) -> None:
        """Palettes without a minor tint use one road colour."""
        instruction = resolve("vintage", Category.ROAD, ROAD)
        assert instruction is not None
        assert instruction.paint["line-color"] == "#4a3c31"
        assert instruction.paint["line-opacity"] == 0.85

    def test_road_colour_override_replaces_tint(self) -> None:
        """A road colour override applies to every class."""
        instruction = resolve("classic", Category.ROAD, ROAD, StyleOptions(road_color="#abcdef"))
        assert instruction is not None
        assert instruction.paint["line-color"] == "#abcdef"

    def test_road_override_emitted_as_hex(self) -> None:
        """Matplotlib-only colour names are written as hex."""
        instruction = resolve("classic", Category.ROAD, ROAD, {"roadColor": "tab:blue"})
        assert instruction is not None
        assert instruction.paint["line-color"] == "#1f77b4"

    def test_width_expression_is_scaled(self) -> None:
        """The road width scale multiplies every stop width."""
        palette = get_palette("classic")
        instruction = resolve("classic", Category.ROAD, ROAD, StyleOptions(road_width_scale=2.0))
        assert instruction is not None
        assert instruction.paint["line-width"] == palette.road_widths.scaled(2.0).to_expression()

    def test_default_width_unscaled(self) -> None:
        """Without options the palette widths are used as-is."""
        palette = get_palette("blueprint")
        instruction = resolve("blueprint", Category.ROAD, ROAD)
        assert instruction is not None
        assert instruction.paint["line-width"] == palette.road_widths.to_expression()

    def test_gap_width_reset_when_present(self) -> None:
        """Gap widths are zeroed only where the style uses them."""
        instruction = resolve("classic", Category.ROAD, ROAD)
        assert instruction is not None
        assert instruction.paint_if_present == {"line-gap-width": 0}


class TestAviation:
    """Aeroway layers."""

    def test_line_kind_sets_line_colour(self) -> None:
        """Runway lines take a flat line colour."""
        instruction = resolve("midnight", Category.AVIATION, RUNWAY)
        assert instruction is not None
        assert instruction.paint == {"line-color": "#2a3352"}

    def test_fill_kind_sets_fill_colour(self) -> None:
        """Aeroway areas take a flat fill colour."""
        instruction = resolve("swiss", Category.AVIATION, APRON)
        assert instruction is not None
        assert instruction.paint == {"fill-color": "#e3ddd0"}

    def test_palette_without_aviation_uses_default(self) -> None:
        """Palettes that leave aviation unset use the default."""
        instruction = resolve("classic", Category.AVIATION, APRON)
        assert instruction is not None
        assert instruction.paint == {"fill-color": DEFAULT_AVIATION_COLOR}

    def test_options_do_not_affect_aviation(self) -> None:
        """Aviation has no override path."""
        plain = resolve("botanical", Category.AVIATION, APRON)
        overridden = resolve("botanical", Category.AVIATION, APRON, OPTION_VARIANTS[2])
        assert plain == overridden


class TestResolveGeneral:
    """Dispatch, errors and determinism."""

    def test_ignored_is_skipped(self) -> None:
        """Ignored layers resolve to nothing."""
        descriptor = LayerDescriptor("boundary", LayerKind.LINE, "boundary")
        assert resolve("classic", Category.IGNORED, descriptor) is None
        assert resolve_layer("classic", descriptor) is None

    def test_unknown_palette_raises(self) -> None:
        """Unknown palette names fail with PaletteNotFoundError."""
        with pytest.raises(PaletteNotFoundError):
            resolve("not-a-style", Category.WATER, WATER)

    def test_accepts_palette_instance(self) -> None:
        """A Palette object can be passed in place of a name."""
        instruction = resolve(get_palette("swiss"), Category.WATER, WATER)
        assert instruction is not None
        assert instruction.paint == {"fill-color": "#9cc3d5"}

    @pytest.mark.parametrize(
        ("palette_name", "descriptor", "options"),
        list(
            itertools.product(
                sorted(PALETTES),
                [BACKGROUND, WATER, BUILDING, PARK, ROAD, ROAD_CASING, RUNWAY, LABEL],
                OPTION_VARIANTS,
            )
        ),
    )
    def test_resolution_is_deterministic(
        self, palette_name: str, descriptor: LayerDescriptor, options: StyleOptions
    ) -> None:
        """Resolving twice with identical inputs gives equal instructions."""
        first = resolve(palette_name, classify(descriptor), descriptor, options)
        second = resolve(palette_name, classify(descriptor), descriptor, options)
        assert first == second


class RecordingScene:
    """Minimal scene recording property writes."""

    layers: ClassVar[list[LayerDescriptor]] = []

    def __init__(self, paint: dict[str, dict[str, Any]] | None = None) -> None:
        self.visibility: dict[str, bool] = {}
        self.paint: dict[str, dict[str, Any]] = paint or {}

    def is_style_loaded(self) -> bool:
        return True

    def get_layers(self) -> list[LayerDescriptor]:
        return list(self.layers)

    def set_visibility(self, layer_id: str, visible: bool) -> None:
        self.visibility[layer_id] = visible

    def get_paint_property(self, layer_id: str, name: str) -> Any:
        return self.paint.get(layer_id, {}).get(name)

    def set_paint_property(self, layer_id: str, name: str, value: Any) -> None:
        self.paint.setdefault(layer_id, {})[name] = value

    def trigger_repaint(self) -> None:
        pass


class TestApplyInstruction:
    """Tests for apply_instruction."""

    def test_writes_visibility_and_paint(self) -> None:
        """Visibility and paint values reach the scene."""
        scene = RecordingScene()
        apply_instruction(scene, PaintInstruction("water", Category.WATER, True, {"fill-color": "#123456"}))
        assert scene.visibility == {"water": True}
        assert scene.paint == {"water": {"fill-color": "#123456"}}

    def test_conditional_paint_skipped_when_absent(self) -> None:
        """Properties the layer does not carry are not added."""
        scene = RecordingScene()
        instruction = resolve("classic", Category.BUILDING, BUILDING)
        assert instruction is not None
        apply_instruction(scene, instruction)
        assert "fill-outline-color" not in scene.paint["building"]

    def test_conditional_paint_written_when_present(self) -> None:
        """Existing outlines are replaced."""
        scene = RecordingScene({"building": {"fill-outline-color": "#999999"}})
        instruction = resolve("vintage", Category.BUILDING, BUILDING)
        assert instruction is not None
        apply_instruction(scene, instruction)
        assert scene.paint["building"]["fill-outline-color"] == "#b0a090"

    def test_applying_twice_is_idempotent(self) -> None:
        """A second application leaves the same state."""
        scene = RecordingScene({"highway_major": {"line-gap-width": 2}})
        instruction = resolve("classic", Category.ROAD, ROAD)
        assert instruction is not None

        apply_instruction(scene, instruction)
        once = (dict(scene.visibility), {k: dict(v) for k, v in scene.paint.items()})
        apply_instruction(scene, instruction)
        twice = (dict(scene.visibility), {k: dict(v) for k, v in scene.paint.items()})

        assert once == twice
        assert scene.paint["highway_major"]["line-gap-width"] == 0
