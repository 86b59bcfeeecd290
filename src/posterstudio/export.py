"""Poster export: Pillow images to print-ready PNG files."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image

from .config import get_export_dpi
from .png import inject_density

__all__ = ["encode_png", "export_poster"]

logger = logging.getLogger(__name__)


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as PNG bytes without density metadata."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def export_poster(image: Image.Image, output_file: Path | str, dpi: float | None = None) -> Path:
    """Write ``image`` as a PNG tagged with a print density.

    Args:
        image: The rasterized poster.
        output_file: Destination path; parent directories are created.
        dpi: Print density; defaults to :func:`get_export_dpi`.

    Returns:
        The path written.
    """
    target_dpi = dpi if dpi is not None else get_export_dpi()
    output = Path(output_file)
    output.parent.mkdir(parents=True, exist_ok=True)

    png_bytes = inject_density(encode_png(image), target_dpi)
    output.write_bytes(png_bytes)
    logger.info("Saved %dx%d poster at %s DPI to %s", image.width, image.height, target_dpi, output)
    return output
