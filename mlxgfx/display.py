"""System cursors, custom cursors made from textures, and monitor sizes."""

from __future__ import annotations

import os

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from .errors import MlxErrno, MlxError  # noqa: E402
from .keys import CursorType  # noqa: E402
from .texture import Texture  # noqa: E402
from .utils import BPP  # noqa: E402

_SYSTEM_CURSORS = {
    CursorType.ARROW: pygame.SYSTEM_CURSOR_ARROW,
    CursorType.IBEAM: pygame.SYSTEM_CURSOR_IBEAM,
    CursorType.CROSSHAIR: pygame.SYSTEM_CURSOR_CROSSHAIR,
    CursorType.HAND: pygame.SYSTEM_CURSOR_HAND,
    CursorType.HRESIZE: pygame.SYSTEM_CURSOR_SIZEWE,
    CursorType.VRESIZE: pygame.SYSTEM_CURSOR_SIZENS,
}


def create_std_cursor(cursor_type: int) -> pygame.cursors.Cursor:
    """Return one of the system's standard cursor shapes."""
    try:
        kind = CursorType(cursor_type)
    except ValueError:
        raise ValueError(f"invalid standard cursor type: {cursor_type!r}") from None
    try:
        return pygame.cursors.Cursor(_SYSTEM_CURSORS[kind])
    except pygame.error as exc:
        raise MlxError(MlxErrno.MEMFAIL) from exc


def create_cursor(texture: Texture) -> pygame.cursors.Cursor:
    """Build a colour cursor from an RGBA texture, with its hotspot at (0, 0)."""
    if texture is None:
        raise ValueError("texture can't be None")
    if texture.bytes_per_pixel != BPP:
        raise ValueError(
            f"cursor textures need {BPP} bytes per pixel, got {texture.bytes_per_pixel}"
        )
    try:
        surface = pygame.image.frombuffer(
            bytes(texture.pixels), (texture.width, texture.height), "RGBA"
        ).copy()
        return pygame.cursors.Cursor((0, 0), surface)
    except (pygame.error, ValueError) as exc:
        raise MlxError(MlxErrno.MEMFAIL) from exc


def get_monitor_size(index: int) -> tuple[int, int]:
    """Return the (width, height) of monitor ``index``, or (0, 0) if unknown."""
    if index < 0:
        raise ValueError("Index out of bounds")
    try:
        if not pygame.display.get_init():
            pygame.display.init()
        sizes = pygame.display.get_desktop_sizes()
    except pygame.error:
        return (0, 0)
    if not sizes or index >= len(sizes):
        return (0, 0)
    width, height = sizes[index]
    return (int(width), int(height))