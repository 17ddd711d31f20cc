"""The window, its main loop, input hooks and image rendering."""

from __future__ import annotations

import math
import os
import struct
import time
from collections.abc import Callable
from typing import Any

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

try:  # pragma: no cover - depends on the pygame build
    from pygame._sdl2.video import Window as _SdlWindow
except ImportError:  # pragma: no cover
    _SdlWindow = None

from .errors import MlxErrno, MlxError  # noqa: E402
from .image import Image, Instance, RenderQueue  # noqa: E402
from .keys import Action, Key, KeyData, ModifierKey, MouseKey, MouseMode, Setting  # noqa: E402
from .texture import Texture  # noqa: E402

_CLEAR_COLOR = (51, 51, 51)
_KEY_UNKNOWN = -1
_REPEAT_DELAY_MS = 500
_REPEAT_INTERVAL_MS = 33

_settings: dict[Setting, int] = {
    Setting.STRETCH_IMAGE: False,
    Setting.FULLSCREEN: False,
    Setting.MAXIMIZED: False,
    Setting.DECORATED: True,
    Setting.HEADLESS: False,
}


def set_setting(setting: int, value: int) -> None:
    """Change a global setting; most take effect when a window is created."""
    try:
        key = Setting(setting)
    except ValueError:
        raise ValueError(f"Invalid settings value: {setting!r}") from None
    _settings[key] = int(value)


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def _fdiv(numerator: float, denominator: float) -> float:
    """Divide the way IEEE floats do, giving inf or nan instead of raising."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def projection_matrix(width: float, height: float, depth: float) -> tuple[float, ...]:
    """Return the column-major orthographic view projection for a screen size."""
    w = float(width)
    h = float(height)
    d = float(depth)
    return (
        _f32(_fdiv(2.0, w)), 0.0, 0.0, 0.0,
        0.0, _f32(_fdiv(2.0, -h)), 0.0, 0.0,
        0.0, 0.0, _f32(_fdiv(-2.0, d - -d)), 0.0,
        -1.0, _f32(-_fdiv(h, -h)), _f32(-_fdiv(d + -d, d - -d)), 1.0,
    )


def _build_keymap() -> dict[int, Key]:
    entries: list[tuple[Key, tuple[str, ...]]] = [
        (Key.SPACE, ("K_SPACE",)),
        (Key.APOSTROPHE, ("K_QUOTE",)),
        (Key.COMMA, ("K_COMMA",)),
        (Key.MINUS, ("K_MINUS",)),
        (Key.PERIOD, ("K_PERIOD",)),
        (Key.SLASH, ("K_SLASH",)),
        (Key.SEMICOLON, ("K_SEMICOLON",)),
        (Key.EQUAL, ("K_EQUALS",)),
        (Key.LEFT_BRACKET, ("K_LEFTBRACKET",)),
        (Key.BACKSLASH, ("K_BACKSLASH",)),
        (Key.RIGHT_BRACKET, ("K_RIGHTBRACKET",)),
        (Key.GRAVE_ACCENT, ("K_BACKQUOTE",)),
        (Key.ESCAPE, ("K_ESCAPE",)),
        (Key.ENTER, ("K_RETURN",)),
        (Key.TAB, ("K_TAB",)),
        (Key.BACKSPACE, ("K_BACKSPACE",)),
        (Key.INSERT, ("K_INSERT",)),
        (Key.DELETE, ("K_DELETE",)),
        (Key.RIGHT, ("K_RIGHT",)),
        (Key.LEFT, ("K_LEFT",)),
        (Key.DOWN, ("K_DOWN",)),
        (Key.UP, ("K_UP",)),
        (Key.PAGE_UP, ("K_PAGEUP",)),
        (Key.PAGE_DOWN, ("K_PAGEDOWN",)),
        (Key.HOME, ("K_HOME",)),
        (Key.END, ("K_END",)),
        (Key.CAPS_LOCK, ("K_CAPSLOCK",)),
        (Key.SCROLL_LOCK, ("K_SCROLLLOCK", "K_SCROLLOCK")),
        (Key.NUM_LOCK, ("K_NUMLOCKCLEAR", "K_NUMLOCK")),
        (Key.PRINT_SCREEN, ("K_PRINTSCREEN", "K_PRINT")),
        (Key.PAUSE, ("K_PAUSE",)),
        (Key.KP_DECIMAL, ("K_KP_PERIOD",)),
        (Key.KP_DIVIDE, ("K_KP_DIVIDE",)),
        (Key.KP_MULTIPLY, ("K_KP_MULTIPLY",)),
        (Key.KP_SUBTRACT, ("K_KP_MINUS",)),
        (Key.KP_ADD, ("K_KP_PLUS",)),
        (Key.KP_ENTER, ("K_KP_ENTER",)),
        (Key.KP_EQUAL, ("K_KP_EQUALS",)),
        (Key.LEFT_SHIFT, ("K_LSHIFT",)),
        (Key.LEFT_CONTROL, ("K_LCTRL",)),
        (Key.LEFT_ALT, ("K_LALT",)),
        (Key.LEFT_SUPER, ("K_LGUI", "K_LSUPER", "K_LMETA")),
        (Key.RIGHT_SHIFT, ("K_RSHIFT",)),
        (Key.RIGHT_CONTROL, ("K_RCTRL",)),
        (Key.RIGHT_ALT, ("K_RALT",)),
        (Key.RIGHT_SUPER, ("K_RGUI", "K_RSUPER", "K_RMETA")),
        (Key.MENU, ("K_MENU",)),
    ]
    entries += [(Key[f"DIGIT_{d}"], (f"K_{d}",)) for d in range(10)]
    entries += [(Key[f"KP_{d}"], (f"K_KP{d}", f"K_KP_{d}")) for d in range(10)]
    entries += [(Key[f"F{n}"], (f"K_F{n}",)) for n in range(1, 26)]
    entries += [(Key[letter], (f"K_{letter.lower()}",)) for letter in "ABCDEFGHIJKLMNOPQRSTUVWXYZ"]

    mapping: dict[int, Key] = {}
    for key, names in entries:
        for name in names:
            code = getattr(pygame, name, None)
            if code is not None:
                mapping.setdefault(code, key)
                break
    return mapping


_KEYMAP = _build_keymap()

_MODIFIERS = [
    (ModifierKey.SHIFT, ("KMOD_SHIFT",)),
    (ModifierKey.CONTROL, ("KMOD_CTRL",)),
    (ModifierKey.ALT, ("KMOD_ALT",)),
    (ModifierKey.SUPERKEY, ("KMOD_GUI", "KMOD_META")),
    (ModifierKey.CAPSLOCK, ("KMOD_CAPS",)),
    (ModifierKey.NUMLOCK, ("KMOD_NUM",)),
]

# pygame numbers buttons from 1 with the middle button second; 4 and 5 are the wheel.
_BUTTONS: dict[int, int] = {
    1: MouseKey.LEFT,
    3: MouseKey.RIGHT,
    2: MouseKey.MIDDLE,
    6: 3,
    7: 4,
}


def _modifiers(mod: int) -> ModifierKey:
    result = ModifierKey.NONE
    for flag, names in _MODIFIERS:
        for name in names:
            mask = getattr(pygame, name, None)
            if mask is not None:
                if mod & mask:
                    result |= flag
                break
    return result


def _check_callable(func: Any) -> None:
    if not callable(func):
        raise TypeError("hook must be callable")


def _surface_from_pixels(pixels: bytearray, width: int, height: int) -> pygame.Surface:
    return pygame.image.frombuffer(bytes(pixels), (width, height), "RGBA")


class Mlx:
    """A window that draws images and reports input to hooks."""

    def __init__(self, width: int, height: int, title: str, resize: bool = False) -> None:
        if title is None:
            raise TypeError("title can't be None")
        if width <= 0:
            raise ValueError("Window width must be positive")
        if height <= 0:
            raise ValueError("Window height must be positive")

        try:
            pygame.display.init()
        except pygame.error as exc:
            raise MlxError(MlxErrno.GLFWFAIL) from exc
        self._start = time.perf_counter()

        flags = 0
        if resize:
            flags |= pygame.RESIZABLE
        if not _settings[Setting.DECORATED]:
            flags |= pygame.NOFRAME
        if _settings[Setting.HEADLESS]:
            flags |= pygame.HIDDEN
        size = (width, height)
        if _settings[Setting.MAXIMIZED]:
            desktops = pygame.display.get_desktop_sizes()
            if desktops:
                size = tuple(desktops[0])
        elif _settings[Setting.FULLSCREEN]:
            flags |= pygame.FULLSCREEN
        self._flags = flags

        try:
            self.surface = pygame.display.set_mode(size, flags)
        except pygame.error as exc:
            pygame.display.quit()
            raise MlxError(MlxErrno.WINFAIL) from exc
        pygame.display.set_caption(title)
        pygame.key.set_repeat(_REPEAT_DELAY_MS, _REPEAT_INTERVAL_MS)

        self.width = width
        self.height = height
        self.delta_time = 0.0
        self._initial_width = width
        self._initial_height = height
        self._last_frame = 0.0
        self._should_close = False
        self._terminated = False
        self._position = (0, 0)
        self._limits = (-1, -1, -1, -1)

        self.images: list[Image] = []
        self.render_queue = RenderQueue()
        self.projection: tuple[float, ...] | None = None

        self._loop_hooks: list[Callable[[], Any]] = []
        self._key_hook: Callable[[KeyData], Any] | None = None
        self._scroll_hook: Callable[[float, float], Any] | None = None
        self._mouse_hook: Callable[[int, Action, ModifierKey], Any] | None = None
        self._cursor_hook: Callable[[float, float], Any] | None = None
        self._close_hook: Callable[[], Any] | None = None
        self._resize_hook: Callable[[int, int], Any] | None = None
        self._keys_down: set[int] = set()
        self._buttons_down: set[int] = set()

    def __enter__(self) -> Mlx:
        return self

    def __exit__(self, *args: Any) -> None:
        self.terminate()

    @property
    def should_close(self) -> bool:
        """True once the window has been asked to close."""
        return self._should_close

    def _require_open(self) -> None:
        if self._terminated:
            raise RuntimeError("the window has been terminated")

    # Images

    def new_image(self, width: int, height: int) -> Image:
        """Create a blank image owned by this window."""
        image = Image(width, height)
        self.images.insert(0, image)
        return image

    def texture_to_image(self, texture: Texture) -> Image:
        """Create an image owned by this window from a texture's pixels."""
        if texture is None:
            raise ValueError("texture can't be None")
        image = Image.from_texture(texture)
        self.images.insert(0, image)
        return image

    def image_to_window(self, image: Image, x: int, y: int) -> int:
        """Show a new instance of ``image`` at (x, y); return the instance index."""
        if image is None:
            raise ValueError("image can't be None")
        return self.render_queue.add(image, x, y)

    def delete_image(self, image: Image) -> None:
        """Remove an image and every instance of it from the window."""
        if image is None:
            raise ValueError("image can't be None")
        self.render_queue.remove_image(image)
        self.images = [held for held in self.images if held is not image]

    # Hooks

    def loop_hook(self, func: Callable[[], Any]) -> None:
        """Add a function to run once every frame."""
        _check_callable(func)
        self._loop_hooks.append(func)

    def key_hook(self, func: Callable[[KeyData], Any]) -> None:
        """Set the function called with a ``KeyData`` on every key event."""
        _check_callable(func)
        self._key_hook = func

    def scroll_hook(self, func: Callable[[float, float], Any]) -> None:
        """Set the function called with (xdelta, ydelta) when scrolling."""
        _check_callable(func)
        self._scroll_hook = func

    def mouse_hook(self, func: Callable[[int, Action, ModifierKey], Any]) -> None:
        """Set the function called with (button, action, mods) on mouse clicks."""
        _check_callable(func)
        self._mouse_hook = func

    def cursor_hook(self, func: Callable[[float, float], Any]) -> None:
        """Set the function called with (x, y) when the cursor moves."""
        _check_callable(func)
        self._cursor_hook = func

    def close_hook(self, func: Callable[[], Any]) -> None:
        """Set the function called when the user asks to close the window."""
        _check_callable(func)
        self._close_hook = func

    def resize_hook(self, func: Callable[[int, int], Any]) -> None:
        """Set the function called with (width, height) when the window resizes."""
        _check_callable(func)
        self._resize_hook = func

    # Main loop

    def run_frame(self) -> bool:
        """Run hooks, draw one frame and handle input; return True while open."""
        self._require_open()
        now = self.get_time()
        self.delta_time = now - self._last_frame
        self._last_frame = now

        self.surface = pygame.display.get_surface() or self.surface
        self.width, self.height = self.surface.get_size()
        if self.width > 1 or self.height > 1:
            stretch = _settings[Setting.STRETCH_IMAGE]
            self.projection = projection_matrix(
                self._initial_width if stretch else self.width,
                self._initial_height if stretch else self.height,
                self.render_queue.zdepth,
            )

        for hook in list(self._loop_hooks):
            if self._should_close:
                break
            hook()

        self._render()
        pygame.display.flip()
        for event in pygame.event.get():
            self._dispatch(event)
        return not self._should_close

    def loop(self) -> None:
        """Run frames until the window is asked to close."""
        while not self._should_close:
            self.run_frame()

    def close_window(self) -> None:
        """Ask the main loop to stop after the current frame."""
        self._should_close = True

    def terminate(self) -> None:
        """Close the window and release everything it holds."""
        if self._terminated:
            return
        self._terminated = True
        self._should_close = True
        self._loop_hooks.clear()
        self.images.clear()
        self.render_queue = RenderQueue()
        pygame.display.quit()

    def _scale(self) -> tuple[float, float]:
        if self.projection is None:
            return (1.0, 1.0)
        return (
            self.projection[0] * self.width / 2.0,
            -self.projection[5] * self.height / 2.0,
        )

    def _render(self) -> None:
        queue = self.render_queue
        if queue.needs_sort:
            queue.sort()

        sx, sy = self._scale()
        stretched = abs(sx - 1.0) > 1e-6 or abs(sy - 1.0) > 1e-6
        if stretched and sx > 0 and sy > 0:
            target = pygame.Surface(
                (max(1, round(self.width / sx)), max(1, round(self.height / sy)))
            )
        else:
            stretched = False
            target = self.surface
        target.fill(_CLEAR_COLOR)

        uploaded: dict[int, pygame.Surface] = {}
        for call in queue.drawable():
            image = call.image
            surface = uploaded.get(id(image))
            if surface is None:
                surface = _surface_from_pixels(image.pixels, image.width, image.height)
                uploaded[id(image)] = surface
            instance: Instance = call.instance
            target.blit(surface, (instance.x, instance.y))

        if stretched:
            self.surface.blit(
                pygame.transform.scale(target, (self.width, self.height)), (0, 0)
            )

    # Events

    def _dispatch(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self._should_close = True
            if self._close_hook is not None:
                self._close_hook()
        elif event.type in (pygame.KEYDOWN, pygame.KEYUP):
            self._on_key(event)
        elif event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP):
            self._on_button(event)
        elif event.type == pygame.MOUSEWHEEL:
            if self._scroll_hook is not None:
                xdelta = float(getattr(event, "precise_x", event.x))
                ydelta = float(getattr(event, "precise_y", event.y))
                self._scroll_hook(xdelta, ydelta)
        elif event.type == pygame.MOUSEMOTION:
            if self._cursor_hook is not None:
                x, y = event.pos
                self._cursor_hook(float(x), float(y))
        elif event.type == pygame.VIDEORESIZE:
            self._on_resize(event.w, event.h)

    def _on_key(self, event: pygame.event.Event) -> None:
        mapped = _KEYMAP.get(event.key)
        code = int(mapped) if mapped is not None else _KEY_UNKNOWN
        if event.type == pygame.KEYDOWN:
            action = Action.REPEAT if code in self._keys_down else Action.PRESS
            if code != _KEY_UNKNOWN:
                self._keys_down.add(code)
        else:
            action = Action.RELEASE
            self._keys_down.discard(code)
        if self._key_hook is not None:
            self._key_hook(
                KeyData(
                    key=mapped if mapped is not None else _KEY_UNKNOWN,
                    action=action,
                    os_key=int(getattr(event, "scancode", 0)),
                    modifier=_modifiers(int(getattr(event, "mod", 0))),
                )
            )

    def _on_button(self, event: pygame.event.Event) -> None:
        button = _BUTTONS.get(event.button)
        if button is None:
            return
        if event.type == pygame.MOUSEBUTTONDOWN:
            action = Action.PRESS
            self._buttons_down.add(int(button))
        else:
            action = Action.RELEASE
            self._buttons_down.discard(int(button))
        if self._mouse_hook is not None:
            self._mouse_hook(button, action, _modifiers(pygame.key.get_mods()))

    def _on_resize(self, width: int, height: int) -> None:
        clamped = self._clamp(width, height)
        if clamped != (width, height) or clamped != self.surface.get_size():
            self._apply_size(*clamped)
        self.width, self.height = clamped
        if self._resize_hook is not None:
            self._resize_hook(*clamped)

    def _clamp(self, width: int, height: int) -> tuple[int, int]:
        min_w, min_h, max_w, max_h = self._limits
        if min_w >= 0:
            width = max(width, min_w)
        if min_h >= 0:
            height = max(height, min_h)
        if max_w >= 0:
            width = min(width, max_w)
        if max_h >= 0:
            height = min(height, max_h)
        return (width, height)

    def _apply_size(self, width: int, height: int) -> None:
        self.surface = pygame.display.set_mode((width, height), self._flags)

    # Input state

    def is_key_down(self, key: int) -> bool:
        """Return whether ``key`` is held down."""
        return int(key) in self._keys_down

    def is_mouse_down(self, button: int) -> bool:
        """Return whether mouse ``button`` is held down."""
        return int(button) in self._buttons_down

    def get_mouse_pos(self) -> tuple[int, int]:
        """Return the cursor position relative to the window's top left."""
        x, y = pygame.mouse.get_pos()
        return (int(x), int(y))

    def set_mouse_pos(self, x: int, y: int) -> None:
        """Move the cursor to (x, y) within the window."""
        pygame.mouse.set_pos((x, y))

    def set_cursor_mode(self, mode: int) -> None:
        """Show, hide or capture the cursor."""
        try:
            kind = MouseMode(mode)
        except ValueError:
            raise ValueError(f"invalid mouse mode: {mode!r}") from None
        pygame.mouse.set_visible(kind is MouseMode.NORMAL)
        pygame.event.set_grab(kind is MouseMode.DISABLED)

    def set_cursor(self, cursor: Any) -> None:
        """Use ``cursor`` in the window; None restores the default arrow."""
        if cursor is None:
            pygame.mouse.set_cursor(pygame.SYSTEM_CURSOR_ARROW)
        else:
            pygame.mouse.set_cursor(cursor)

    # Window

    def _sdl_window(self) -> Any:
        if _SdlWindow is None:
            return None
        try:
            return _SdlWindow.from_display_module()
        except (pygame.error, AttributeError, RuntimeError):
            return None

    def set_icon(self, texture: Texture) -> None:
        """Use a texture as the window icon."""
        if texture is None:
            raise ValueError("texture can't be None")
        pygame.display.set_icon(
            _surface_from_pixels(texture.pixels, texture.width, texture.height)
        )

    def set_window_pos(self, x: int, y: int) -> None:
        """Move the window to screen position (x, y)."""
        self._position = (x, y)
        window = self._sdl_window()
        if window is not None:
            window.position = (x, y)

    def get_window_pos(self) -> tuple[int, int]:
        """Return the window's screen position."""
        window = self._sdl_window()
        if window is not None:
            x, y = window.position
            return (int(x), int(y))
        return self._position

    def set_window_size(self, width: int, height: int) -> None:
        """Resize the window, keeping within any size limits."""
        self._require_open()
        width, height = self._clamp(width, height)
        self.width, self.height = width, height
        self._apply_size(width, height)

    def set_window_limit(self, min_w: int, min_h: int, max_w: int, max_h: int) -> None:
        """Bound the window size; -1 leaves a bound open."""
        self._limits = (min_w, min_h, max_w, max_h)
        current = self.surface.get_size()
        clamped = self._clamp(*current)
        if clamped != current:
            self.set_window_size(*clamped)

    def set_window_title(self, title: str) -> None:
        """Change the window title."""
        if title is None:
            raise TypeError("title can't be None")
        pygame.display.set_caption(title)

    def get_time(self) -> float:
        """Return the seconds elapsed since the window was created."""
        return time.perf_counter() - self._start

    def focus(self) -> None:
        """Bring the window to the front and give it input focus."""
        window = self._sdl_window()
        if window is not None:
            window.focus()