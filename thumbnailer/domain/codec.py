from __future__ import annotations

from abc import ABC, abstractmethod

from thumbnailer.domain.colors import Rgb
from thumbnailer.domain.pixels import PixelBuffer


class ImageCodec(ABC):
    @abstractmethod
    def decode(self, image_bytes: bytes) -> PixelBuffer:
        """Decode encoded image bytes into an RGBA buffer."""

    @abstractmethod
    def resize_contain(self, buffer: PixelBuffer, width: int, height: int, background: Rgb | None) -> PixelBuffer:
        """Fit inside width x height keeping aspect, padding with background (or transparent)."""

    @abstractmethod
    def flatten(self, buffer: PixelBuffer, background: Rgb) -> PixelBuffer:
        """Composite the buffer over an opaque background."""

    @abstractmethod
    def encode(self, buffer: PixelBuffer, palette_size: int | None, compression_level: int) -> bytes:
        """Return PNG bytes."""
