from __future__ import annotations

import io

from PIL import Image, ImageOps, UnidentifiedImageError

from thumbnailer.domain.codec import ImageCodec
from thumbnailer.domain.colors import Rgb
from thumbnailer.domain.errors import InvalidImageError
from thumbnailer.domain.pixels import PixelBuffer


def to_image(buffer: PixelBuffer) -> Image.Image:
    return Image.frombytes("RGBA", buffer.size, bytes(buffer.data))


def from_image(image: Image.Image) -> PixelBuffer:
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    width, height = rgba.size
    return PixelBuffer(width, height, bytearray(rgba.tobytes()))


class PillowImageCodec(ImageCodec):
    def decode(self, image_bytes: bytes) -> PixelBuffer:
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                image.load()
                width, height = image.size
                if not width or not height:
                    raise InvalidImageError("Invalid image")
                return from_image(image.convert("RGBA"))
        except (UnidentifiedImageError, OSError) as exc:
            raise InvalidImageError("Invalid image") from exc

    def resize_contain(self, buffer: PixelBuffer, width: int, height: int, background: Rgb | None) -> PixelBuffer:
        fill = (*background, 255) if background is not None else (0, 0, 0, 0)
        resized = ImageOps.pad(
            to_image(buffer),
            (width, height),
            method=Image.Resampling.LANCZOS,
            color=fill,
        )
        return from_image(resized)

    def flatten(self, buffer: PixelBuffer, background: Rgb) -> PixelBuffer:
        base = Image.new("RGBA", buffer.size, (*background, 255))
        return from_image(Image.alpha_composite(base, to_image(buffer)))

    def encode(self, buffer: PixelBuffer, palette_size: int | None, compression_level: int) -> bytes:
        image = to_image(buffer)
        if palette_size:
            # Median cut cannot handle RGBA; fast octree keeps the alpha channel.
            image = image.quantize(colors=palette_size, method=Image.Quantize.FASTOCTREE)

        output = io.BytesIO()
        image.save(output, format="PNG", compress_level=compression_level)
        return output.getvalue()
