"""In-memory scene over a MapLibre style document.

The live map widget is outside this package; this scene lets the resolver
restyle a ``style.json`` document directly, for offline rendering or for
shipping a pre-styled document to the browser.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .layers import LayerDescriptor


__all__ = [
    "StyleDocumentScene",
    "StyleLoadError",
]

logger = logging.getLogger(__name__)


class StyleLoadError(Exception):
    """Raised when the style document cannot be read or parsed."""


class StyleDocumentScene:
    """Scene backed by a style document's ``layers`` array.

    The document is copied on construction; the caller's mapping is never
    modified. Layer order is preserved.
    """

    def __init__(self, document: Mapping[str, Any], loaded: bool = True) -> None:
        self._document: dict[str, Any] = copy.deepcopy(dict(document))
        layers = self._document.setdefault("layers", [])
        if not isinstance(layers, list):
            raise StyleLoadError("Style document 'layers' must be a list.")
        self._layers: dict[str, dict[str, Any]] = {}
        for layer in layers:
            if isinstance(layer, dict) and isinstance(layer.get("id"), str):
                self._layers[layer["id"]] = layer
        self._loaded = loaded
        self.repaint_count = 0

    @classmethod
    def from_file(cls, style_path: Path | str) -> StyleDocumentScene:
        """Load a scene from a ``style.json`` file."""
        path = Path(style_path)
        try:
            raw_data = path.read_text(encoding="utf8")
        except OSError as exc:
            raise StyleLoadError(f"Unable to read style file '{path}'") from exc

        try:
            document = json.loads(raw_data)
        except json.JSONDecodeError as exc:
            raise StyleLoadError(f"Style file '{path}' is not valid JSON") from exc

        if not isinstance(document, dict):
            raise StyleLoadError(f"Style file '{path}' is not a JSON object")
        logger.debug("Loaded style document %s with %d layers", path, len(document.get("layers", [])))
        return cls(document)

    def mark_loaded(self) -> None:
        self._loaded = True

    # ------------------------------------------------------------------
    def is_style_loaded(self) -> bool:
        return self._loaded

    def get_layers(self) -> list[LayerDescriptor]:
        return [LayerDescriptor.from_style_layer(layer) for layer in self._layers.values()]

    def _layer(self, layer_id: str) -> dict[str, Any]:
        try:
            return self._layers[layer_id]
        except KeyError:
            raise KeyError(f"Layer '{layer_id}' does not exist in the style.") from None

    def set_visibility(self, layer_id: str, visible: bool) -> None:
        layout = self._layer(layer_id).setdefault("layout", {})
        layout["visibility"] = "visible" if visible else "none"

    def is_visible(self, layer_id: str) -> bool:
        return self._layer(layer_id).get("layout", {}).get("visibility", "visible") != "none"

    def get_paint_property(self, layer_id: str, name: str) -> Any:
        return copy.deepcopy(self._layer(layer_id).get("paint", {}).get(name))

    def set_paint_property(self, layer_id: str, name: str, value: Any) -> None:
        paint = self._layer(layer_id).setdefault("paint", {})
        paint[name] = copy.deepcopy(value)

    def trigger_repaint(self) -> None:
        self.repaint_count += 1

    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        """Return a copy of the current style document."""
        return copy.deepcopy(self._document)

    def save(self, path: Path | str) -> Path:
        """Write the current style document as JSON."""
        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(self._document, indent=2), encoding="utf-8")
        logger.info("Saved style document to %s", output)
        return output
