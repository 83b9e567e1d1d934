from __future__ import annotations

from typing import NamedTuple

from thumbnailer.domain.pixels import PixelBuffer


class BoundingRect(NamedTuple):
    left: int
    top: int
    width: int
    height: int


def alpha_bounds(buffer: PixelBuffer) -> BoundingRect | None:
    """Tight box around pixels with alpha != 0, or None if there are none."""
    left, top = buffer.width, buffer.height
    right = bottom = -1

    data = buffer.data
    width = buffer.width
    for y in range(buffer.height):
        row = y * width * 4
        for x in range(width):
            if data[row + x * 4 + 3] != 0:
                if x < left:
                    left = x
                if x > right:
                    right = x
                if y < top:
                    top = y
                bottom = y

    if right < 0:
        return None
    return BoundingRect(left, top, right - left + 1, bottom - top + 1)


def square_trim_rect(buffer: PixelBuffer) -> BoundingRect:
    full = BoundingRect(0, 0, max(1, buffer.width), max(1, buffer.height))
    bounds = alpha_bounds(buffer)
    if bounds is None:
        return full

    # right/bottom are inclusive: the last column/row holding content.
    right = bounds.left + bounds.width - 1
    bottom = bounds.top + bounds.height - 1
    inset = min(
        bounds.left,
        bounds.top,
        buffer.width - right - 1,
        buffer.height - bottom - 1,
    )
    inset = max(0, inset)
    return BoundingRect(
        inset,
        inset,
        max(1, buffer.width - inset * 2),
        max(1, buffer.height - inset * 2),
    )


def square_trim(buffer: PixelBuffer) -> PixelBuffer:
    """Crop the same margin off every side, as much as the content allows."""
    rect = square_trim_rect(buffer)
    if rect == (0, 0, buffer.width, buffer.height):
        return buffer
    return buffer.crop(rect)
