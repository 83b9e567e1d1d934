from __future__ import annotations


class InvalidImageError(ValueError):
    """Raised when an input cannot be decoded into a usable RGBA image."""
