from __future__ import annotations

from pathlib import Path

from thumbnailer.domain.output_sink import ThumbnailSink


class FileSystemOutputWriter(ThumbnailSink):
    def __init__(self, output_dir: str | Path) -> None:
        self._output_dir = Path(output_dir)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def write(self, index: int, original: bytes, thumbnail: bytes) -> tuple[Path, Path]:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        stem = f"img-{index}"
        in_path = self._output_dir / f"{stem}-in.png"
        out_path = self._output_dir / f"{stem}-out.png"
        out_path.write_bytes(thumbnail)
        in_path.write_bytes(original)
        return in_path, out_path
