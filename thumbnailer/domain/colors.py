from __future__ import annotations

from functools import lru_cache
from typing import NamedTuple


class Rgb(NamedTuple):
    r: int
    g: int
    b: int


def to_hex(color: Rgb | tuple[int, ...]) -> str:
    r, g, b = color[:3]
    return f"#{r:02x}{g:02x}{b:02x}"


# No eviction: parsed colors never change.
@lru_cache(maxsize=None)
def parse_hex_color(value: str) -> Rgb:
    text = value.strip()
    if len(text) != 7 or not text.startswith("#"):
        raise ValueError(f"Expected a #rrggbb color, got {value!r}")
    try:
        return Rgb(*(int(text[start : start + 2], 16) for start in (1, 3, 5)))
    except ValueError as exc:
        raise ValueError(f"Expected a #rrggbb color, got {value!r}") from exc
