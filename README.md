# mlxgfx

A small graphics library for opening a window, drawing into RGBA pixel
buffers and putting those buffers on screen. Windows, input and drawing
go through pygame; PNG decoding goes through Pillow.

Colours are 32-bit `0xRRGGBBAA` integers throughout.

## Installation

```
pip install .
```

To install the test tools as well, run `pip install .[test]`.

## Modules

- `mlxgfx.window`: the `Mlx` window handle and main loop, the global
  `set_setting` function and `projection_matrix`
- `mlxgfx.image`: `Image` (a pixel buffer), `Instance` (one placement of
  an image on screen) and `RenderQueue` (draw calls kept in depth order)
- `mlxgfx.texture`: `Texture`, `Xpm`, `load_png`, `load_xpm42` and
  `read_xpm42`
- `mlxgfx.display`: `create_std_cursor`, `create_cursor` and
  `get_monitor_size`
- `mlxgfx.keys`: the enums `Key`, `Action`, `ModifierKey`, `MouseKey`,
  `MouseMode`, `CursorType` and `Setting`, and the `KeyData` record given
  to key hooks
- `mlxgfx.errors`: `MlxError`, `MlxErrno` and `strerror`
- `mlxgfx.utils`: `fnv_hash`, `rgba_to_mono`, `pack_pixel` and
  `unpack_pixel`

## Example

```python
from mlxgfx.window import Mlx
from mlxgfx.keys import Key, Action

with Mlx(640, 480, "demo", True) as mlx:
    img = mlx.new_image(64, 64)
    for x in range(64):
        img.put_pixel(x, x, 0xFF0000FF)
    mlx.image_to_window(img, 10, 10)

    def on_key(data):
        if data.key == Key.ESCAPE and data.action == Action.PRESS:
            mlx.close_window()

    mlx.key_hook(on_key)
    mlx.loop()
```

Leaving the `with` block calls `terminate()`. `loop()` calls
`run_frame()` until the window is asked to close. You can call
`run_frame()` yourself; it returns `True` while the window stays open.

## Images and instances

An `Image` has a `width`, a `height`, a `pixels` bytearray in RGBA order
and a list of `instances`. Use `put_pixel(x, y, color)` to write a pixel
and `get_pixel(x, y)` to read one. Coordinates outside the image raise
`IndexError`. `resize(width, height)` rescales the pixels by
nearest-neighbour sampling. `Image.from_texture(texture)` copies a
texture's pixels into a new image. Width and height must be between 1 and
32767. Any other size raises `MlxError` with `MlxErrno.INVDIM`.

`Mlx.image_to_window(image, x, y)` adds an instance and returns its
index. Each new instance gets the next depth `z`, so later instances draw
in front of earlier ones. To change an instance's depth, call
`mlx.render_queue.set_instance_depth(instance, z)`. The queue is
re-sorted before the next frame is drawn. An instance or image whose
`enabled` flag is false is not drawn. `Mlx.delete_image(image)` removes
the image and every instance of it.

## Hooks

- `loop_hook(func)` adds a function that runs once per frame. You can add
  more than one.
- `key_hook(func)` calls `func` with a `KeyData`.
- `mouse_hook(func)` calls `func` with `(button, action, mods)`.
- `scroll_hook(func)` calls `func` with `(xdelta, ydelta)`.
- `cursor_hook(func)` calls `func` with `(x, y)`.
- `resize_hook(func)` calls `func` with `(width, height)`.
- `close_hook(func)` calls `func` with no arguments.

Each of the last six holds a single function. Setting a new one replaces
the old one. A key that has no `Key` value is reported as `-1`.

`is_key_down`, `is_mouse_down`, `get_mouse_pos`, `set_mouse_pos`,
`set_cursor_mode`, `set_cursor`, `set_icon`, `set_window_pos`,
`get_window_pos`, `set_window_size`, `set_window_limit` (use -1 for a
bound you want to leave open), `set_window_title`, `get_time` and `focus`
work on the open window.

## Global settings

Call `set_setting(Setting.X, value)` before you create an `Mlx`. The
settings are:

- `STRETCH_IMAGE`: scale the drawing to the window size, measured
  against the window's initial size
- `FULLSCREEN`
- `MAXIMIZED`: open at the size of the first desktop
- `DECORATED`: on by default
- `HEADLESS`: open a hidden window

## Textures

`load_png(path)` returns an RGBA `Texture`. A file that is missing or is
not a valid PNG raises `MlxError` with `MlxErrno.INVPNG`.

`load_xpm42(path)` returns an `Xpm`, which holds a `texture`, a
`color_count`, a `cpp` and a `mode`. It raises `MlxErrno.INVEXT` if the
path does not contain `.xpm42`, `MlxErrno.INVFILE` if the file cannot be
opened, and `MlxErrno.INVXPM` if the contents are malformed.
`read_xpm42(stream)` parses an XPM42 file from a stream that is already
open. The stream may be text or binary.

XPM42 is a plain-text image format:

```
!XPM42
2 1 2 1 c
. #FF0000FF
# #00FF00FF
.#
```

The second line holds the width, the height, the colour count, the
characters per pixel (at most 10), and the mode. The mode is `c` for
colour or `m` for monochrome; in `m` mode colours are converted to
grayscale. After that comes one colour entry per colour, then one line of
pixel characters per row.

## Errors

A failure raises `MlxError`. Its `code` is one of the `MlxErrno` values,
and `strerror(code)` returns the English description of that code.
Misuse, such as a non-positive window size, an unknown setting or a
hook that is not callable, raises `ValueError` or `TypeError`.

## What this package does not do

- There is no text drawing and no built-in font. To show text, draw it
  into an image's pixels yourself.
- There are no shaders and no GPU rendering. Images are blitted with
  pygame's software surfaces.
- There is no command-line program. The package is a library only.