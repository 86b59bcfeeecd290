"""PosterStudio - Restyle vector maps for posters and export print-ready PNGs.

This package resolves named poster palettes and user overrides into paint
instructions for map render layers, and tags exported PNG images with their
print density.
"""

from importlib.metadata import PackageNotFoundError, version

from .config import StyleOptions
from .layers import Category, LayerDescriptor, LayerKind, classify
from .palettes import PaletteNotFoundError, get_available_palettes, get_palette
from .png import MalformedPngError, inject_density
from .resolver import PaintInstruction, SceneNotReadyError, apply_style, resolve, resolve_layer


try:
    __version__ = version("posterstudio")
except PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "Category",
    "LayerDescriptor",
    "LayerKind",
    "MalformedPngError",
    "PaintInstruction",
    "PaletteNotFoundError",
    "SceneNotReadyError",
    "StyleOptions",
    "__version__",
    "apply_style",
    "classify",
    "get_available_palettes",
    "get_palette",
    "inject_density",
    "resolve",
    "resolve_layer",
]
