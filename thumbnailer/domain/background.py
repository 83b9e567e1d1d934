from __future__ import annotations

from thumbnailer.domain.colors import Rgb, parse_hex_color, to_hex
from thumbnailer.domain.pixels import Pixel, PixelBuffer


def sample_positions(width: int, height: int) -> list[tuple[int, int]]:
    """Corners first, then edge midpoints (floor of half, on the edge pixel)."""
    mid_x = width // 2
    mid_y = height // 2
    return [
        (0, 0),
        (width - 1, 0),
        (0, height - 1),
        (width - 1, height - 1),
        (mid_x, 0),
        (mid_x, height - 1),
        (0, mid_y),
        (width - 1, mid_y),
    ]


def _solid_color(samples: list[Pixel]) -> Rgb | None:
    first = samples[0]
    for sample in samples:
        if sample[3] == 0 or sample[:3] != first[:3]:
            return None
    return Rgb(*first[:3])


def detect_background_color(buffer: PixelBuffer) -> str | None:
    """Return the uniform background as ``#rrggbb`` or None.

    The four corners are checked first; when they do not agree the four edge
    midpoints get a chance. Samples must be opaque (alpha != 0) and match
    exactly on RGB.
    """
    if not buffer.width or not buffer.height:
        return None

    try:
        samples = [buffer.pixel_at(x, y) for x, y in sample_positions(buffer.width, buffer.height)]
    except IndexError:
        return None

    for group in (samples[:4], samples[4:]):
        color = _solid_color(group)
        if color is not None:
            return to_hex(color)
    return None


def remove_solid_background(
    buffer: PixelBuffer,
    color: Rgb | str | None,
    tolerance: int,
    clear_rgb: bool = False,
) -> PixelBuffer:
    """Make every pixel within ``tolerance`` (per channel) of ``color`` transparent.

    The buffer is modified in place and returned.
    """
    if color is None:
        return buffer
    red, green, blue = parse_hex_color(color) if isinstance(color, str) else color

    data = buffer.data
    for i in range(0, len(data), 4):
        if (
            abs(data[i] - red) <= tolerance
            and abs(data[i + 1] - green) <= tolerance
            and abs(data[i + 2] - blue) <= tolerance
        ):
            if clear_rgb:
                data[i] = data[i + 1] = data[i + 2] = 0
            data[i + 3] = 0
    return buffer
