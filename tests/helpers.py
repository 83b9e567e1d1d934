from __future__ import annotations

import base64
import io

from PIL import Image

from thumbnailer.domain.pixels import PixelBuffer

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
GREEN = (0, 255, 0, 255)
CLEAR = (0, 0, 0, 0)


def solid(width: int, height: int, pixel=RED) -> PixelBuffer:
    return PixelBuffer.filled(width, height, pixel)


def png_bytes(image: Image.Image) -> bytes:
    out = io.BytesIO()
    image.save(out, format='PNG')
    return out.getvalue()


def framed_png(size: int = 20, frame=(255, 255, 255, 255), inner=(0, 128, 0, 255), margin: int = 5) -> bytes:
    image = Image.new('RGBA', (size, size), frame)
    image.paste(Image.new('RGBA', (size - margin * 2, size - margin * 2), inner), (margin, margin))
    return png_bytes(image)


def data_uri(data: bytes) -> str:
    return 'data:image/png;base64,' + base64.b64encode(data).decode('ascii')
