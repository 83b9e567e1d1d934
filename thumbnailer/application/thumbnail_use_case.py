from __future__ import annotations

from dataclasses import dataclass

from thumbnailer.config import settings
from thumbnailer.domain.background import detect_background_color, remove_solid_background
from thumbnailer.domain.codec import ImageCodec
from thumbnailer.domain.colors import parse_hex_color
from thumbnailer.domain.errors import InvalidImageError
from thumbnailer.domain.trim import square_trim


@dataclass
class ThumbnailOptions:
    tolerance: int = 10
    use_trim: bool = True
    palette_size: int | None = 12
    compression_level: int = 9
    size: int = 32
    clear_rgb: bool = False
    flatten: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.tolerance <= 255:
            raise ValueError("tolerance must be between 0 and 255")
        if self.palette_size and not 2 <= self.palette_size <= 256:
            raise ValueError("palette_size must be between 2 and 256")
        if not 0 <= self.compression_level <= 9:
            raise ValueError("compression_level must be between 0 and 9")
        if self.size < 1:
            raise ValueError("size must be at least 1")

    @classmethod
    def from_settings(cls) -> ThumbnailOptions:
        return cls(
            tolerance=settings.bg_tolerance,
            use_trim=settings.trim_enabled,
            palette_size=settings.palette_size,
            compression_level=settings.png_compression_level,
            size=settings.thumbnail_size,
            clear_rgb=settings.clear_rgb,
            flatten=settings.flatten_background,
        )


@dataclass
class ThumbnailResult:
    png: bytes
    background: str | None
    source_size: tuple[int, int]
    trimmed_size: tuple[int, int]


class ThumbnailUseCase:
    def __init__(self, codec: ImageCodec) -> None:
        self._codec = codec

    def execute(self, image_bytes: bytes, options: ThumbnailOptions | None = None) -> ThumbnailResult:
        if not image_bytes:
            raise InvalidImageError("Image data is empty")

        opts = options or ThumbnailOptions()
        buffer = self._codec.decode(image_bytes)
        if not buffer.width or not buffer.height:
            raise InvalidImageError("Invalid image")
        source_size = buffer.size

        background = detect_background_color(buffer)
        rgb = parse_hex_color(background) if background else None
        remove_solid_background(buffer, rgb, opts.tolerance, clear_rgb=opts.clear_rgb)

        if opts.use_trim:
            buffer = square_trim(buffer)
        trimmed_size = buffer.size

        thumbnail = self._codec.resize_contain(buffer, opts.size, opts.size, rgb)
        if rgb is not None and opts.flatten:
            thumbnail = self._codec.flatten(thumbnail, rgb)
        png = self._codec.encode(thumbnail, opts.palette_size, opts.compression_level)

        return ThumbnailResult(
            png=png,
            background=background,
            source_size=source_size,
            trimmed_size=trimmed_size,
        )
