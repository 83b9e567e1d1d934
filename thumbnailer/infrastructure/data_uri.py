from __future__ import annotations

import base64
import binascii
import json
import re
from pathlib import Path

from thumbnailer.domain.errors import InvalidImageError

_DATA_URI_PREFIX = re.compile(r"^data:[\w.+-]+/[\w.+-]+;base64,", re.IGNORECASE)


def decode_data_uri(value: str) -> bytes:
    payload = _DATA_URI_PREFIX.sub("", value.strip(), count=1)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImageError("Input is not valid base64 image data") from exc
    if not data:
        raise InvalidImageError("Input decoded to zero bytes")
    return data


def encode_data_uri(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


def load_image_input(item: str | bytes) -> bytes:
    if isinstance(item, (bytes, bytearray)):
        return bytes(item)
    return decode_data_uri(item)


def load_data_uri_file(path: str | Path) -> list[str]:
    with open(path, encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, list) or not all(isinstance(item, str) for item in payload):
        raise ValueError(f"{path} must contain a JSON array of data URI strings")
    return payload
