from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class ThumbnailSink(ABC):
    @abstractmethod
    def write(self, index: int, original: bytes, thumbnail: bytes) -> tuple[Path, Path]:
        """Persist the original and processed images for one batch item."""
