from __future__ import annotations

from helpers import BLUE, CLEAR, GREEN, RED, solid

from thumbnailer.domain.background import (
    detect_background_color,
    remove_solid_background,
    sample_positions,
)
from thumbnailer.domain.colors import Rgb
from thumbnailer.domain.pixels import PixelBuffer


def _corners(buffer: PixelBuffer, pixel) -> None:
    w, h = buffer.width, buffer.height
    for x, y in ((0, 0), (w - 1, 0), (0, h - 1), (w - 1, h - 1)):
        buffer.set_pixel(x, y, pixel)


def test_sample_positions_corners_then_midpoints() -> None:
    assert sample_positions(5, 4) == [
        (0, 0), (4, 0), (0, 3), (4, 3),
        (2, 0), (2, 3), (0, 2), (4, 2),
    ]


def test_detects_corner_color_with_different_interior() -> None:
    buffer = solid(9, 9, BLUE)
    for x in range(2, 7):
        for y in range(2, 7):
            buffer.set_pixel(x, y, GREEN)
    assert detect_background_color(buffer) == '#0000ff'


def test_falls_back_to_midpoints_when_corners_differ() -> None:
    buffer = solid(7, 7, BLUE)
    buffer.set_pixel(0, 0, RED)
    assert detect_background_color(buffer) == '#0000ff'


def test_midpoints_win_when_subject_touches_corners() -> None:
    buffer = solid(8, 6, GREEN)
    _corners(buffer, RED)
    buffer.set_pixel(7, 5, BLUE)
    assert detect_background_color(buffer) == '#00ff00'


def test_transparent_corner_is_not_a_background() -> None:
    buffer = solid(6, 6, RED)
    buffer.set_pixel(0, 0, (255, 0, 0, 0))
    # midpoints still agree
    assert detect_background_color(buffer) == '#ff0000'

    buffer.set_pixel(3, 0, CLEAR)
    assert detect_background_color(buffer) is None


def test_fully_transparent_image_has_no_background() -> None:
    assert detect_background_color(solid(4, 4, CLEAR)) is None


def test_checkerboard_has_no_background() -> None:
    buffer = solid(4, 4, RED)
    for x, y, _ in list(buffer.iter_pixels()):
        if (x + y) % 2:
            buffer.set_pixel(x, y, BLUE)
    # corners (0,0),(3,0),(0,3),(3,3) alternate red/blue
    assert detect_background_color(buffer) is None
    before = bytes(buffer.data)
    remove_solid_background(buffer, None, 10)
    assert bytes(buffer.data) == before


def test_zero_sized_image_has_no_background() -> None:
    assert detect_background_color(PixelBuffer(0, 0, bytearray())) is None


def test_single_pixel_image() -> None:
    assert detect_background_color(solid(1, 1, GREEN)) == '#00ff00'


def test_all_red_image_end_to_end() -> None:
    buffer = solid(4, 4, RED)
    color = detect_background_color(buffer)
    assert color == '#ff0000'
    remove_solid_background(buffer, color, 10)
    assert all(pixel[3] == 0 for _, _, pixel in buffer.iter_pixels())


def test_remove_zeroes_only_alpha_by_default() -> None:
    buffer = solid(2, 1, (250, 5, 5, 255))
    remove_solid_background(buffer, Rgb(255, 0, 0), 10)
    assert buffer.pixel_at(0, 0) == (250, 5, 5, 0)


def test_remove_clear_rgb_zeroes_all_channels() -> None:
    buffer = solid(2, 1, (250, 5, 5, 255))
    remove_solid_background(buffer, '#ff0000', 10, clear_rgb=True)
    assert buffer.pixel_at(1, 0) == (0, 0, 0, 0)


def test_remove_tolerance_zero_is_exact_match() -> None:
    buffer = solid(3, 1, RED)
    buffer.set_pixel(1, 0, (254, 0, 0, 255))
    remove_solid_background(buffer, '#ff0000', 0)
    assert [pixel[3] for _, _, pixel in buffer.iter_pixels()] == [0, 255, 0]


def test_remove_tolerance_is_per_channel_and_inclusive() -> None:
    buffer = solid(3, 1, RED)
    buffer.set_pixel(1, 0, (245, 10, 10, 255))
    buffer.set_pixel(2, 0, (244, 0, 0, 255))
    remove_solid_background(buffer, '#ff0000', 10)
    assert [pixel[3] for _, _, pixel in buffer.iter_pixels()] == [0, 0, 255]


def test_remove_is_monotonic_in_tolerance() -> None:
    shades = [(255 - step * 7, step * 3, 0, 255) for step in range(12)]
    base = PixelBuffer(12, 1, bytearray(b''.join(bytes(p) for p in shades)))
    previous: set[int] = set()
    for tolerance in (0, 5, 10, 20, 50):
        buffer = remove_solid_background(base.copy(), '#ff0000', tolerance)
        removed = {x for x, _, pixel in buffer.iter_pixels() if pixel[3] == 0}
        assert previous <= removed
        previous = removed


def test_remove_is_idempotent() -> None:
    buffer = solid(5, 5, BLUE)
    buffer.set_pixel(2, 2, GREEN)
    buffer.set_pixel(1, 1, (5, 5, 250, 255))
    once = bytes(remove_solid_background(buffer, '#0000ff', 10).data)
    twice = bytes(remove_solid_background(buffer, '#0000ff', 10).data)
    assert once == twice
    assert buffer.pixel_at(2, 2) == GREEN
