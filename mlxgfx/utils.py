"""Pixel packing, colour conversion and string hashing helpers."""

from __future__ import annotations

import struct

BPP = 4
"""Bytes per pixel; only RGBA is supported."""

BATCH_SIZE = 12000
MAX_STRING = 512

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF
_FNV_PRIME = 0x100000001B3
_FNV_OFFSET = 0xCBF29CE484222325


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


_RED_WEIGHT = _f32(0.299)
_GREEN_WEIGHT = _f32(0.587)
_BLUE_WEIGHT = _f32(0.114)


def fnv_hash(data: bytes | str) -> int:
    """Return the 64-bit FNV-1a hash of ``data``.

    Bytes of 128 and above are taken as signed characters, so they are
    sign-extended before being mixed in.
    """
    if isinstance(data, str):
        data = data.encode()
    result = _FNV_OFFSET
    for byte in data:
        signed = byte - 256 if byte >= 128 else byte
        result ^= signed & _MASK64
        result = (result * _FNV_PRIME) & _MASK64
    return result


def _weighted(weight: float, channel: int) -> int:
    return int(_f32(weight * channel)) & 0xFF


def rgba_to_mono(color: int) -> int:
    """Convert an RGBA colour to grayscale, keeping its alpha."""
    color &= _MASK32
    red = _weighted(_RED_WEIGHT, (color >> 24) & 0xFF)
    green = _weighted(_GREEN_WEIGHT, (color >> 16) & 0xFF)
    blue = _weighted(_BLUE_WEIGHT, (color >> 8) & 0xFF)
    gray = (red + green + blue) & 0xFF
    return (gray << 24) | (gray << 16) | (gray << 8) | (color & 0xFF)


def pack_pixel(color: int) -> bytes:
    """Return the four RGBA bytes of a 0xRRGGBBAA colour."""
    return (color & _MASK32).to_bytes(BPP, "big")


def unpack_pixel(data: bytes) -> int:
    """Return the 0xRRGGBBAA colour stored in four RGBA bytes."""
    if len(data) != BPP:
        raise ValueError(f"a pixel is {BPP} bytes, got {len(data)}")
    return int.from_bytes(bytes(data), "big")