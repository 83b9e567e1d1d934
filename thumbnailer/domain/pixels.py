from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from thumbnailer.domain.trim import BoundingRect

Pixel = tuple[int, int, int, int]


def pixel_at(data: bytes | bytearray, width: int, x: int, y: int) -> Pixel:
    offset = (y * width + x) * 4
    if offset < 0 or offset + 4 > len(data):
        raise IndexError(f"pixel ({x}, {y}) is outside the buffer")
    return data[offset], data[offset + 1], data[offset + 2], data[offset + 3]


@dataclass
class PixelBuffer:
    """Decoded image as row-major RGBA bytes."""

    width: int
    height: int
    data: bytearray

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("Image dimensions must not be negative")
        if not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(f"Expected {expected} bytes of RGBA data, got {len(self.data)}")

    @classmethod
    def filled(cls, width: int, height: int, pixel: Pixel) -> PixelBuffer:
        return cls(width, height, bytearray(bytes(pixel) * (width * height)))

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def pixel_at(self, x: int, y: int) -> Pixel:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside a {self.width}x{self.height} image")
        return pixel_at(self.data, self.width, x, y)

    def set_pixel(self, x: int, y: int, pixel: Pixel) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside a {self.width}x{self.height} image")
        offset = (y * self.width + x) * 4
        self.data[offset : offset + 4] = bytes(pixel)

    def iter_pixels(self) -> Iterator[tuple[int, int, Pixel]]:
        data = self.data
        offset = 0
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, (data[offset], data[offset + 1], data[offset + 2], data[offset + 3])
                offset += 4

    def crop(self, rect: BoundingRect) -> PixelBuffer:
        if (
            rect.left < 0
            or rect.top < 0
            or rect.width < 1
            or rect.height < 1
            or rect.left + rect.width > self.width
            or rect.top + rect.height > self.height
        ):
            raise ValueError(f"Crop {rect} does not fit a {self.width}x{self.height} image")

        stride = self.width * 4
        out = bytearray()
        for y in range(rect.top, rect.top + rect.height):
            start = y * stride + rect.left * 4
            out += self.data[start : start + rect.width * 4]
        return PixelBuffer(rect.width, rect.height, out)

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.width, self.height, bytearray(self.data))
