"""Table-driven CRC-32 (IEEE 802.3), as used by PNG chunks."""

from __future__ import annotations

import numpy as np


__all__ = [
    "CRC32_POLYNOMIAL",
    "CRC_TABLE",
    "crc32",
]

# Reflected form of 0x04C11DB7
CRC32_POLYNOMIAL = 0xEDB88320
_MASK = 0xFFFFFFFF


def _build_table() -> tuple[int, ...]:
    table = np.arange(256, dtype=np.uint32)
    polynomial = np.uint32(CRC32_POLYNOMIAL)
    for _ in range(8):
        low_bit = (table & np.uint32(1)).astype(bool)
        table = np.where(low_bit, polynomial ^ (table >> np.uint32(1)), table >> np.uint32(1))
    return tuple(int(value) for value in table)


CRC_TABLE: tuple[int, ...] = _build_table()


def crc32(data: bytes | bytearray | memoryview, offset: int = 0, length: int | None = None) -> int:
    """Compute the CRC-32 of ``data[offset:offset + length]``.

    Args:
        data: Bytes to checksum.
        offset: Start of the range.
        length: Number of bytes; defaults to the rest of ``data``.

    Returns:
        The checksum as an unsigned 32-bit integer.

    Raises:
        ValueError: If the range falls outside ``data``.
    """
    view = memoryview(data).cast("B")
    if length is None:
        length = len(view) - offset
    if offset < 0 or length < 0 or offset + length > len(view):
        raise ValueError(
            f"CRC range [{offset}, {offset + length}) is outside a buffer of {len(view)} bytes"
        )

    crc = _MASK
    table = CRC_TABLE
    for byte in view[offset : offset + length]:
        crc = table[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ _MASK
