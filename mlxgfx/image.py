"""Images, their on-screen instances and the depth-sorted render queue."""

from __future__ import annotations

import struct
from bisect import bisect_left
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import MlxErrno, MlxError
from .utils import BPP, pack_pixel, unpack_pixel

if TYPE_CHECKING:
    from .texture import Texture

_MAX_DIMENSION = 0x7FFF


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def _check_dimensions(width: int, height: int) -> None:
    if not (0 < width <= _MAX_DIMENSION and 0 < height <= _MAX_DIMENSION):
        raise MlxError(MlxErrno.INVDIM)


@dataclass
class Instance:
    """One placement of an image on screen; ``z`` decides what is in front."""

    x: int
    y: int
    z: int = 0
    enabled: bool = True


class Image:
    """An RGBA pixel buffer that can be placed on screen any number of times."""

    def __init__(self, width: int, height: int) -> None:
        _check_dimensions(width, height)
        self._width = width
        self._height = height
        self.pixels = bytearray(width * height * BPP)
        self.instances: list[Instance] = []
        self.enabled = True

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def count(self) -> int:
        """Number of instances of this image."""
        return len(self.instances)

    def __repr__(self) -> str:
        return (
            f"Image(width={self._width}, height={self._height}, "
            f"count={self.count}, enabled={self.enabled})"
        )

    def _offset(self, x: int, y: int) -> int:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"pixel ({x}, {y}) is out of bounds")
        return (y * self._width + x) * BPP

    def put_pixel(self, x: int, y: int, color: int) -> None:
        """Store the 0xRRGGBBAA ``color`` at column ``x``, row ``y``."""
        start = self._offset(x, y)
        self.pixels[start : start + BPP] = pack_pixel(color)

    def get_pixel(self, x: int, y: int) -> int:
        """Return the 0xRRGGBBAA colour at column ``x``, row ``y``."""
        start = self._offset(x, y)
        return unpack_pixel(self.pixels[start : start + BPP])

    def resize(self, width: int, height: int) -> None:
        """Scale the pixel data to a new size by nearest-neighbour sampling."""
        _check_dimensions(width, height)
        if width == self._width and height == self._height:
            return
        wstep = _f32(self._width / width)
        hstep = _f32(self._height / height)
        old = self.pixels
        old_width = self._width
        columns = [int(_f32(i * wstep)) for i in range(width)]
        rows = bytearray()
        for j in range(height):
            row_start = int(_f32(j * hstep)) * old_width
            for src_x in columns:
                start = (row_start + src_x) * BPP
                rows += old[start : start + BPP]
        self.pixels = rows
        self._width = width
        self._height = height

    @classmethod
    def from_texture(cls, texture: Texture) -> Image:
        """Create an image holding a copy of a texture's pixels."""
        image = cls(texture.width, texture.height)
        row_bytes = texture.width * texture.bytes_per_pixel
        for row in range(texture.height):
            src = row * row_bytes
            dst = row * image.width * texture.bytes_per_pixel
            image.pixels[dst : dst + row_bytes] = texture.pixels[src : src + row_bytes]
        return image


@dataclass(eq=False)
class DrawCall:
    """A render queue entry: an image and the index of one of its instances."""

    image: Image
    instance_id: int

    @property
    def instance(self) -> Instance:
        return self.image.instances[self.instance_id]


@dataclass
class RenderQueue:
    """Draw calls kept in ascending depth order once sorted."""

    zdepth: int = 0
    needs_sort: bool = False
    _calls: list[DrawCall] = field(default_factory=list, repr=False)

    def __init__(self) -> None:
        self.zdepth = 0
        self.needs_sort = False
        self._calls = []

    def add(self, image: Image, x: int, y: int) -> int:
        """Place a new instance of ``image`` at (x, y); return its index."""
        index = len(image.instances)
        image.instances.append(Instance(x, y, self.zdepth, True))
        self.zdepth += 1
        self._calls.insert(0, DrawCall(image, index))
        self.needs_sort = True
        return index

    def remove_image(self, image: Image) -> int:
        """Drop every draw call of ``image``; return how many were dropped."""
        kept = [call for call in self._calls if call.image is not image]
        removed = len(self._calls) - len(kept)
        self._calls = kept
        return removed

    def set_instance_depth(self, instance: Instance, zdepth: int) -> None:
        """Change an instance's depth; the queue is re-sorted before drawing."""
        if instance.z == zdepth:
            return
        instance.z = zdepth
        self.needs_sort = True

    def sort(self) -> None:
        """Order draw calls by ascending depth.

        Among calls of equal depth, the one met later in the current order
        ends up first.
        """
        ordered: list[DrawCall] = []
        depths: list[int] = []
        for call in self._calls:
            z = call.instance.z
            pos = bisect_left(depths, z)
            depths.insert(pos, z)
            ordered.insert(pos, call)
        self._calls = ordered
        self.needs_sort = False

    def drawable(self) -> Iterator[DrawCall]:
        """Yield the calls whose image and instance are both enabled."""
        return (
            call
            for call in self._calls
            if call.image.enabled and call.instance.enabled
        )

    def __iter__(self) -> Iterator[DrawCall]:
        return iter(list(self._calls))

    def __len__(self) -> int:
        return len(self._calls)