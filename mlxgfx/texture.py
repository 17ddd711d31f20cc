"""Textures loaded from disk: PNG files and the XPM42 text format.

XPM42 is a small text format close to XPM2.  A file starts with the line
``!XPM42``, followed by a header line ``<width> <height> <colours> <cpp>
<mode>``, where ``cpp`` is the number of characters per pixel and ``mode``
is ``c`` for colour or ``m`` for monochrome.  Then come the colour lines,
each ``<chars> #RRGGBBAA``, and finally one line of pixel characters per
row.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import IO, AnyStr

from PIL import Image, UnidentifiedImageError

from .errors import MlxErrno, MlxError
from .utils import BPP, fnv_hash, pack_pixel, rgba_to_mono, unpack_pixel

_MAX_DIMENSION = 0x7FFF
_MAX_CPP = 10
_TABLE_SIZE = 0xFFFF
_HEADER_LINE_LIMIT = 63
_MAGIC = b"!XPM42\n"

_C_INT = rb"\s*([+-]?(?:0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*))"
_HEADER = re.compile(_C_INT * 4 + rb"\s*(\S)")
_HEX_PREFIX = re.compile(rb"\s*([+-]?)([0-9a-fA-F]*)")


@dataclass
class Texture:
    """An RGBA pixel buffer with its dimensions."""

    width: int
    height: int
    pixels: bytearray = field(repr=False)
    bytes_per_pixel: int = BPP

    def __post_init__(self) -> None:
        self.pixels = bytearray(self.pixels)
        expected = self.width * self.height * self.bytes_per_pixel
        if len(self.pixels) != expected:
            raise ValueError(
                f"pixel buffer holds {len(self.pixels)} bytes, expected {expected}"
            )

    def get_pixel(self, x: int, y: int) -> int:
        """Return the 0xRRGGBBAA colour at column ``x``, row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is out of bounds")
        start = (y * self.width + x) * self.bytes_per_pixel
        return unpack_pixel(self.pixels[start : start + BPP])


@dataclass
class Xpm:
    """An XPM42 texture together with its header information."""

    texture: Texture
    color_count: int
    cpp: int
    mode: str


def load_png(path: str | os.PathLike[str]) -> Texture:
    """Decode a PNG file into an RGBA texture."""
    try:
        with Image.open(path) as img:
            if img.format != "PNG":
                raise MlxError(MlxErrno.INVPNG)
            img.load()
            rgba = img.convert("RGBA")
            return Texture(rgba.width, rgba.height, bytearray(rgba.tobytes()))
    except (OSError, UnidentifiedImageError, ValueError, SyntaxError) as exc:
        raise MlxError(MlxErrno.INVPNG) from exc


def load_xpm42(path: str | os.PathLike[str]) -> Xpm:
    """Load an XPM42 texture from a file whose name contains ``.xpm42``."""
    if ".xpm42" not in os.fspath(path):
        raise MlxError(MlxErrno.INVEXT)
    try:
        stream = open(path, "rb")
    except OSError as exc:
        raise MlxError(MlxErrno.INVFILE) from exc
    with stream:
        return read_xpm42(stream)


def read_xpm42(stream: IO[AnyStr]) -> Xpm:
    """Parse an XPM42 texture from an open stream."""
    reader = _LineReader(stream)

    if reader.readline(_HEADER_LINE_LIMIT) != _MAGIC:
        raise MlxError(MlxErrno.INVXPM)
    match = _HEADER.match(reader.readline(_HEADER_LINE_LIMIT))
    if match is None:
        raise MlxError(MlxErrno.INVXPM)

    width = _parse_c_int(match.group(1)) & 0xFFFFFFFF
    height = _parse_c_int(match.group(2)) & 0xFFFFFFFF
    color_count = _to_int32(_parse_c_int(match.group(3)))
    cpp = _to_int32(_parse_c_int(match.group(4)))
    mode = match.group(5).decode("latin-1")
    if (
        width > _MAX_DIMENSION
        or height > _MAX_DIMENSION
        or mode not in ("c", "m")
        or not 0 <= cpp <= _MAX_CPP
    ):
        raise MlxError(MlxErrno.INVXPM)

    table: dict[int, int] = {}
    for _ in range(color_count):
        _insert_entry(table, reader.readline(), cpp, mode)

    rows = [_read_row(reader.readline(), table, width, cpp) for _ in range(height)]
    texture = Texture(width, height, bytearray(b"".join(rows)))
    return Xpm(texture=texture, color_count=color_count, cpp=cpp, mode=mode)


class _LineReader:
    """Reads lines as bytes from a binary or text stream."""

    def __init__(self, stream: IO[AnyStr]) -> None:
        self._stream = stream

    def readline(self, limit: int = -1) -> bytes:
        line = self._stream.readline(limit)
        if isinstance(line, str):
            return line.encode("utf-8", "surrogateescape")
        return bytes(line)


def _parse_c_int(text: bytes) -> int:
    sign = -1 if text.startswith(b"-") else 1
    digits = text.lstrip(b"+-")
    if digits[:2] in (b"0x", b"0X"):
        value = int(digits[2:], 16)
    elif len(digits) > 1 and digits.startswith(b"0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    return sign * value


def _to_int32(value: int) -> int:
    return ((value + 0x80000000) & 0xFFFFFFFF) - 0x80000000


def _hex_channel(text: bytes) -> int:
    match = _HEX_PREFIX.match(text)
    digits = match.group(2) if match else b""
    value = int(digits, 16) if digits else 0
    if match and match.group(1) == b"-":
        value = -value
    return value & 0xFF


def _insert_entry(table: dict[int, int], line: bytes, cpp: int, mode: str) -> None:
    if not line or line.rfind(b" ") != cpp:
        raise MlxError(MlxErrno.INVXPM)
    if (
        not line[cpp : cpp + 1].isspace()
        or line[cpp + 1 : cpp + 2] != b"#"
        or not line[cpp + 2 : cpp + 3].isalnum()
    ):
        raise MlxError(MlxErrno.INVXPM)

    start = cpp + 2
    red, green, blue, alpha = (
        _hex_channel(line[offset : offset + 2]) for offset in range(start, start + 8, 2)
    )
    color = (red << 24) | (green << 16) | (blue << 8) | alpha
    table[fnv_hash(line[:cpp]) % _TABLE_SIZE] = (
        rgba_to_mono(color) if mode == "m" else color
    )


def _read_row(line: bytes, table: dict[int, int], width: int, cpp: int) -> bytes:
    if not line:
        raise MlxError(MlxErrno.INVXPM)
    if line.endswith(b"\n"):
        line = line[:-1]
    if len(line) != width * cpp:
        raise MlxError(MlxErrno.INVXPM)
    keys = (
        [line[i : i + cpp] for i in range(0, width * cpp, cpp)] if cpp else [b""] * width
    )
    return b"".join(pack_pixel(table.get(fnv_hash(key) % _TABLE_SIZE, 0)) for key in keys)