import math
import os

os.environ["SDL_VIDEODRIVER"] = "dummy"
os.environ["SDL_AUDIODRIVER"] = "dummy"

import pygame  # noqa: E402
import pytest  # noqa: E402

from mlxgfx.errors import MlxError  # noqa: E402
from mlxgfx.keys import Action, Key, KeyData, MouseKey, Setting  # noqa: E402
from mlxgfx.texture import Texture  # noqa: E402
from mlxgfx.utils import pack_pixel  # noqa: E402
from mlxgfx.window import Mlx, projection_matrix, set_setting  # noqa: E402

RED = 0xFF0000FF
BLUE = 0x0000FFFF


@pytest.fixture
def mlx():
    window = Mlx(64, 48, "test", False)
    yield window
    window.terminate()


def _fill(image, color):
    for y in range(image.height):
        for x in range(image.width):
            image.put_pixel(x, y, color)


def _rgb(window, x, y):
    return tuple(window.surface.get_at((x, y)))[:3]


def test_projection_matrix_values():
    m = projection_matrix(800, 600, 4)
    assert len(m) == 16
    assert m[0] == pytest.approx(2 / 800)
    assert m[5] == pytest.approx(-2 / 600)
    assert m[10] == pytest.approx(-0.25)
    assert m[12] == -1.0
    assert m[13] == 1.0
    assert m[15] == 1.0


def test_projection_matrix_zero_depth_is_not_finite():
    m = projection_matrix(800, 600, 0)
    assert math.isinf(m[10]) and m[10] < 0
    assert math.isnan(m[14])


def test_set_setting_rejects_unknown():
    with pytest.raises(ValueError):
        set_setting(99, 1)


def test_init_rejects_bad_size():
    with pytest.raises(ValueError):
        Mlx(0, 10, "bad")
    with pytest.raises(ValueError):
        Mlx(10, -1, "bad")


def test_image_to_window_indices_and_depth(mlx):
    image = mlx.new_image(4, 4)
    assert mlx.image_to_window(image, 0, 0) == 0
    assert mlx.image_to_window(image, 5, 5) == 1
    assert [inst.z for inst in image.instances] == [0, 1]
    assert len(mlx.render_queue) == 2
    assert image in mlx.images


def test_delete_image(mlx):
    image = mlx.new_image(4, 4)
    mlx.image_to_window(image, 0, 0)
    mlx.delete_image(image)
    assert len(mlx.render_queue) == 0
    assert image not in mlx.images


def test_texture_to_image(mlx):
    texture = Texture(2, 1, pack_pixel(RED) + pack_pixel(BLUE))
    image = mlx.texture_to_image(texture)
    assert image.get_pixel(1, 0) == BLUE
    assert image in mlx.images


def test_render_draws_image_over_background(mlx):
    image = mlx.new_image(4, 4)
    _fill(image, RED)
    mlx.image_to_window(image, 10, 10)
    assert mlx.run_frame() is True
    assert _rgb(mlx, 11, 11) == (255, 0, 0)
    assert _rgb(mlx, 0, 0) == (51, 51, 51)


def test_depth_orders_drawing(mlx):
    first = mlx.new_image(4, 4)
    second = mlx.new_image(4, 4)
    _fill(first, RED)
    _fill(second, BLUE)
    mlx.image_to_window(first, 0, 0)
    mlx.image_to_window(second, 2, 2)
    mlx.run_frame()
    assert _rgb(mlx, 3, 3) == (0, 0, 255)
    mlx.render_queue.set_instance_depth(first.instances[0], 10)
    mlx.run_frame()
    assert _rgb(mlx, 3, 3) == (255, 0, 0)


def test_disabled_image_not_drawn(mlx):
    image = mlx.new_image(4, 4)
    _fill(image, RED)
    mlx.image_to_window(image, 0, 0)
    image.enabled = False
    mlx.run_frame()
    assert _rgb(mlx, 1, 1) == (51, 51, 51)


def test_stretch_setting_scales_images():
    set_setting(Setting.STRETCH_IMAGE, True)
    try:
        window = Mlx(20, 20, "stretch")
        try:
            image = window.new_image(10, 10)
            _fill(image, RED)
            window.image_to_window(image, 0, 0)
            window.set_window_size(40, 40)
            window.run_frame()
            assert _rgb(window, 15, 15) == (255, 0, 0)
            assert _rgb(window, 25, 25) != (255, 0, 0)
        finally:
            window.terminate()
    finally:
        set_setting(Setting.STRETCH_IMAGE, False)


def test_loop_hook_runs_until_closed(mlx):
    calls = []

    def hook():
        calls.append(1)
        if len(calls) == 3:
            mlx.close_window()

    mlx.loop_hook(hook)
    mlx.loop()
    assert len(calls) == 3
    assert mlx.should_close is True


def test_hooks_after_close_are_skipped(mlx):
    seen = []
    mlx.loop_hook(mlx.close_window)
    mlx.loop_hook(lambda: seen.append("second"))
    assert mlx.run_frame() is False
    assert seen == []


def test_key_events(mlx):
    received = []
    mlx.key_hook(received.append)
    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_a, mod=0, scancode=4))
    mlx.run_frame()
    assert mlx.is_key_down(Key.A) is True
    assert received[-1] == KeyData(key=Key.A, action=Action.PRESS, os_key=4)
    pygame.event.post(pygame.event.Event(pygame.KEYUP, key=pygame.K_a, mod=0, scancode=4))
    mlx.run_frame()
    assert mlx.is_key_down(Key.A) is False
    assert received[-1].action == Action.RELEASE


def test_mouse_button_events(mlx):
    received = []
    mlx.mouse_hook(lambda button, action, mods: received.append((button, action)))
    pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=(1, 1)))
    mlx.run_frame()
    assert received == [(MouseKey.RIGHT, Action.PRESS)]
    assert mlx.is_mouse_down(MouseKey.RIGHT) is True
    assert mlx.is_mouse_down(MouseKey.LEFT) is False


def test_scroll_and_cursor_events(mlx):
    scrolls = []
    moves = []
    mlx.scroll_hook(lambda x, y: scrolls.append((x, y)))
    mlx.cursor_hook(lambda x, y: moves.append((x, y)))
    pygame.event.post(pygame.event.Event(pygame.MOUSEWHEEL, x=0, y=1))
    pygame.event.post(pygame.event.Event(pygame.MOUSEMOTION, pos=(3, 4), rel=(0, 0), buttons=(0, 0, 0)))
    mlx.run_frame()
    assert scrolls == [(0.0, 1.0)]
    assert moves == [(3.0, 4.0)]


def test_quit_event_calls_close_hook(mlx):
    closed = []
    mlx.close_hook(lambda: closed.append(True))
    pygame.event.post(pygame.event.Event(pygame.QUIT))
    assert mlx.run_frame() is False
    assert closed == [True]


def test_hooks_require_callables(mlx):
    with pytest.raises(TypeError):
        mlx.key_hook(None)
    with pytest.raises(TypeError):
        mlx.loop_hook(5)


def test_cursor_mode_rejects_unknown(mlx):
    with pytest.raises(ValueError):
        mlx.set_cursor_mode(5)


def test_window_title(mlx):
    mlx.set_window_title("renamed")
    assert mlx.run_frame() is True
    assert pygame.display.get_caption()[0] == "renamed"


def test_window_size_and_limits(mlx):
    mlx.set_window_size(80, 60)
    assert (mlx.width, mlx.height) == (80, 60)
    mlx.set_window_limit(-1, -1, 50, 40)
    assert mlx.surface.get_size() == (50, 40)
    mlx.set_window_size(100, 100)
    assert (mlx.width, mlx.height) == (50, 40)


def test_time_advances(mlx):
    first = mlx.get_time()
    mlx.run_frame()
    second = mlx.get_time()
    assert 0 <= first <= second
    assert mlx.delta_time >= 0


def test_context_manager_terminates():
    with Mlx(16, 16, "ctx") as window:
        assert window.run_frame() is True
    with pytest.raises(RuntimeError):
        window.run_frame()


def test_invalid_image_dimensions_raise(mlx):
    with pytest.raises(MlxError):
        mlx.new_image(0, 4)