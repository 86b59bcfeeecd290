"""PNG physical density (pHYs) injection.

Only the chunk framing needed to place a ``pHYs`` chunk is handled here;
pixel data is never decoded.
"""

from __future__ import annotations

import logging
import math
import struct
from dataclasses import dataclass

from .crc import crc32


__all__ = [
    "HEADER_CHUNK_END",
    "METERS_PER_INCH",
    "PNG_SIGNATURE",
    "MalformedPngError",
    "PngChunk",
    "build_phys_chunk",
    "dpi_to_pixels_per_meter",
    "inject_density",
    "read_density",
]

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
METERS_PER_INCH = 0.0254
PHYS_UNIT_METER = 1
IHDR_DATA_LENGTH = 13

# Signature (8) + IHDR length (4) + type (4) + payload (13) + CRC (4)
HEADER_CHUNK_END = len(PNG_SIGNATURE) + 4 + 4 + IHDR_DATA_LENGTH + 4

_U32_MAX = 0xFFFFFFFF


class MalformedPngError(ValueError):
    """Raised when input bytes do not start with a PNG signature and IHDR chunk."""

    pass


@dataclass(frozen=True)
class PngChunk:
    """A single PNG chunk: length, 4-byte type, data and CRC."""

    chunk_type: bytes
    data: bytes = b""

    def __post_init__(self) -> None:
        if len(self.chunk_type) != 4:
            raise ValueError(f"Chunk type must be 4 bytes, got {self.chunk_type!r}")

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def crc(self) -> int:
        """CRC-32 over the type tag and data."""
        return crc32(self.chunk_type + self.data)

    def to_bytes(self) -> bytes:
        """Serialize as length, type, data, CRC."""
        return (
            struct.pack(">I", self.length)
            + self.chunk_type
            + self.data
            + struct.pack(">I", self.crc)
        )

    @classmethod
    def parse(cls, buffer: bytes, offset: int) -> tuple[PngChunk, int]:
        """Read the chunk starting at ``offset``.

        Returns:
            The chunk and the offset just past its CRC.

        Raises:
            MalformedPngError: If the chunk runs past the end of ``buffer``.
        """
        if offset + 8 > len(buffer):
            raise MalformedPngError(f"Truncated chunk header at byte {offset}")
        (length,) = struct.unpack_from(">I", buffer, offset)
        chunk_type = bytes(buffer[offset + 4 : offset + 8])
        data_start = offset + 8
        end = data_start + length + 4
        if end > len(buffer):
            raise MalformedPngError(f"Chunk {chunk_type!r} at byte {offset} is truncated")
        return cls(chunk_type, bytes(buffer[data_start : data_start + length])), end


def dpi_to_pixels_per_meter(dpi: float) -> int:
    """Convert dots per inch to pixels per meter, rounding half up."""
    if not (math.isfinite(dpi) and dpi > 0):
        raise ValueError(f"DPI must be a positive finite number, got {dpi!r}")
    ppm = int(dpi / METERS_PER_INCH + 0.5)
    if ppm > _U32_MAX:
        raise ValueError(f"DPI {dpi!r} is too large for a pHYs chunk")
    return ppm


def build_phys_chunk(dpi: float) -> PngChunk:
    """Build a pHYs chunk declaring the same density on both axes."""
    ppm = dpi_to_pixels_per_meter(dpi)
    return PngChunk(b"pHYs", struct.pack(">IIB", ppm, ppm, PHYS_UNIT_METER))


def _check_header(png_bytes: bytes) -> None:
    if not png_bytes.startswith(PNG_SIGNATURE):
        raise MalformedPngError("Input does not start with the PNG signature")
    if len(png_bytes) < HEADER_CHUNK_END:
        raise MalformedPngError(
            f"Input is {len(png_bytes)} bytes, shorter than signature plus IHDR ({HEADER_CHUNK_END})"
        )
    (length,) = struct.unpack_from(">I", png_bytes, len(PNG_SIGNATURE))
    chunk_type = png_bytes[len(PNG_SIGNATURE) + 4 : len(PNG_SIGNATURE) + 8]
    if chunk_type != b"IHDR":
        raise MalformedPngError(f"First chunk is {chunk_type!r}, expected b'IHDR'")
    if length != IHDR_DATA_LENGTH:
        raise MalformedPngError(f"IHDR length is {length}, expected {IHDR_DATA_LENGTH}")


def inject_density(png_bytes: bytes | bytearray | memoryview, dpi: float) -> bytes:
    """Insert a pHYs chunk right after the IHDR chunk.

    Bytes before and after the insertion point are copied unchanged.

    Args:
        png_bytes: An encoded PNG image.
        dpi: Target print density in dots per inch.

    Returns:
        The PNG bytes with the density chunk at offset 33.

    Raises:
        MalformedPngError: If the signature or IHDR chunk shape is wrong.
        ValueError: If ``dpi`` is not positive or too large.
    """
    data = bytes(png_bytes)
    _check_header(data)
    chunk = build_phys_chunk(dpi)

    try:
        existing = read_density(data)
    except MalformedPngError:
        # Chunks past IHDR are passed through unchecked
        existing = None
    if existing is not None:
        logger.warning("PNG already carries a pHYs chunk; inserting another ahead of it")

    logger.debug("Injecting pHYs for %s DPI (%d px/m)", dpi, dpi_to_pixels_per_meter(dpi))
    return data[:HEADER_CHUNK_END] + chunk.to_bytes() + data[HEADER_CHUNK_END:]


def read_density(png_bytes: bytes | bytearray | memoryview) -> tuple[int, int, int] | None:
    """Return ``(x, y, unit)`` of the first pHYs chunk, or None.

    The pHYs chunk must precede image data, so the walk stops at the first
    IDAT or IEND chunk.
    """
    data = bytes(png_bytes)
    _check_header(data)
    offset = len(PNG_SIGNATURE)
    while offset < len(data):
        chunk, offset = PngChunk.parse(data, offset)
        if chunk.chunk_type == b"pHYs" and chunk.length == 9:
            ppu_x, ppu_y, unit = struct.unpack(">IIB", chunk.data)
            return ppu_x, ppu_y, unit
        if chunk.chunk_type in (b"IDAT", b"IEND"):
            break
    return None
