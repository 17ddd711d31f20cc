import pytest

from mlxgfx.errors import MlxErrno, MlxError
from mlxgfx.image import Image, Instance, RenderQueue
from mlxgfx.texture import Texture


@pytest.mark.parametrize(
    "width,height", [(0, 5), (5, 0), (0x8000, 1), (1, 0x8000)]
)
def test_new_image_rejects_bad_dimensions(width, height):
    with pytest.raises(MlxError) as info:
        Image(width, height)
    assert info.value.code == MlxErrno.INVDIM


def test_new_image_is_blank_and_enabled():
    img = Image(3, 2)
    assert img.width == 3 and img.height == 2
    assert img.pixels == bytearray(3 * 2 * 4)
    assert img.enabled is True
    assert img.count == 0


def test_put_pixel_writes_rgba_bytes_in_order():
    img = Image(2, 2)
    img.put_pixel(1, 1, 0x11223344)
    assert img.pixels[12:16] == b"\x11\x22\x33\x44"
    assert img.get_pixel(1, 1) == 0x11223344
    assert img.get_pixel(0, 0) == 0


@pytest.mark.parametrize("x,y", [(2, 0), (0, 2), (-1, 0)])
def test_pixel_out_of_bounds(x, y):
    img = Image(2, 2)
    with pytest.raises(IndexError):
        img.put_pixel(x, y, 0xFFFFFFFF)
    with pytest.raises(IndexError):
        img.get_pixel(x, y)


def test_resize_upscale_replicates_pixels():
    img = Image(2, 1)
    img.put_pixel(0, 0, 0xAABBCCDD)
    img.put_pixel(1, 0, 0x01020304)
    img.resize(4, 2)
    assert (img.width, img.height) == (4, 2)
    assert len(img.pixels) == 4 * 2 * 4
    for y in range(2):
        assert [img.get_pixel(x, y) for x in range(4)] == [
            0xAABBCCDD,
            0xAABBCCDD,
            0x01020304,
            0x01020304,
        ]


def test_resize_downscale_samples_top_left():
    img = Image(4, 4)
    for y in range(4):
        for x in range(4):
            img.put_pixel(x, y, (y << 8) | x)
    img.resize(2, 2)
    assert img.get_pixel(0, 0) == (0 << 8) | 0
    assert img.get_pixel(1, 0) == (0 << 8) | 2
    assert img.get_pixel(0, 1) == (2 << 8) | 0
    assert img.get_pixel(1, 1) == (2 << 8) | 2


def test_resize_same_size_keeps_buffer():
    img = Image(2, 2)
    img.put_pixel(0, 1, 0x12345678)
    before = img.pixels
    img.resize(2, 2)
    assert img.pixels is before


def test_resize_rejects_bad_dimensions():
    img = Image(2, 2)
    with pytest.raises(MlxError) as info:
        img.resize(0, 2)
    assert info.value.code == MlxErrno.INVDIM
    assert (img.width, img.height) == (2, 2)


def test_from_texture_copies_pixels():
    data = bytes(range(2 * 3 * 4))
    tex = Texture(2, 3, bytearray(data))
    img = Image.from_texture(tex)
    assert (img.width, img.height) == (2, 3)
    assert bytes(img.pixels) == data
    img.put_pixel(0, 0, 0)
    assert bytes(tex.pixels) == data


def test_add_assigns_indices_and_depths():
    queue = RenderQueue()
    img = Image(1, 1)
    other = Image(1, 1)
    assert queue.add(img, 5, 6) == 0
    assert queue.add(img, 7, 8) == 1
    assert queue.add(other, 0, 0) == 0
    assert img.instances == [Instance(5, 6, 0, True), Instance(7, 8, 1, True)]
    assert other.instances[0].z == 2
    assert len(queue) == 3
    assert queue.needs_sort is True


def test_sort_orders_by_depth():
    queue = RenderQueue()
    a, b, c = Image(1, 1), Image(1, 1), Image(1, 1)
    for img in (a, b, c):
        queue.add(img, 0, 0)
    queue.sort()
    assert [call.image for call in queue] == [a, b, c]
    assert queue.needs_sort is False
    queue.set_instance_depth(a.instances[0], 10)
    assert queue.needs_sort is True
    queue.sort()
    assert [call.image for call in queue] == [b, c, a]
    zs = [call.instance.z for call in queue]
    assert zs == sorted(zs)


def test_sort_ties_put_later_entry_first():
    queue = RenderQueue()
    a, b = Image(1, 1), Image(1, 1)
    queue.add(a, 0, 0)
    queue.add(b, 0, 0)
    queue.set_instance_depth(a.instances[0], 1)
    queue.sort()
    # Before sorting b is at the front, so a (met later) ends up first.
    assert [call.image for call in queue] == [a, b]


def test_set_instance_depth_same_value_does_not_flag():
    queue = RenderQueue()
    img = Image(1, 1)
    queue.add(img, 0, 0)
    queue.sort()
    queue.set_instance_depth(img.instances[0], 0)
    assert queue.needs_sort is False


def test_remove_image_drops_all_its_calls():
    queue = RenderQueue()
    a, b = Image(1, 1), Image(1, 1)
    queue.add(a, 0, 0)
    queue.add(b, 0, 0)
    queue.add(a, 1, 1)
    assert queue.remove_image(a) == 2
    assert [call.image for call in queue] == [b]
    assert queue.remove_image(a) == 0


def test_drawable_skips_disabled():
    queue = RenderQueue()
    a, b, c = Image(1, 1), Image(1, 1), Image(1, 1)
    for img in (a, b, c):
        queue.add(img, 0, 0)
    b.enabled = False
    c.instances[0].enabled = False
    assert [call.image for call in queue.drawable()] == [a]
    assert len(queue) == 3