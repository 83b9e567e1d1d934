from __future__ import annotations

from pathlib import Path

import pytest

from helpers import data_uri, framed_png

from thumbnailer.application.batch import BatchThumbnailer
from thumbnailer.application.thumbnail_use_case import ThumbnailOptions, ThumbnailUseCase
from thumbnailer.domain.output_sink import ThumbnailSink
from thumbnailer.infrastructure.metrics import metrics
from thumbnailer.infrastructure.output_writer import FileSystemOutputWriter
from thumbnailer.infrastructure.pillow_codec import PillowImageCodec


class MemorySink(ThumbnailSink):
    def __init__(self) -> None:
        self.items: dict[int, tuple[bytes, bytes]] = {}

    def write(self, index, original, thumbnail):
        self.items[index] = (original, thumbnail)
        return Path(f'img-{index}-in.png'), Path(f'img-{index}-out.png')


def _use_case() -> ThumbnailUseCase:
    return ThumbnailUseCase(PillowImageCodec())


@pytest.mark.parametrize('concurrency', [1, 4])
def test_bad_item_does_not_stop_batch(concurrency: int) -> None:
    sink = MemorySink()
    items = [data_uri(framed_png()), 'data:image/png;base64,!!!', data_uri(b'not a png'), framed_png(size=12, margin=3)]
    failed_before = metrics.get('images_failed_total')

    report = BatchThumbnailer(_use_case(), sink, concurrency=concurrency).run(items, ThumbnailOptions())

    assert report.total == 4
    assert report.succeeded == [0, 3]
    assert [failure.index for failure in report.failed] == [1, 2]
    assert not report.ok
    assert sorted(sink.items) == [0, 3]
    assert report.backgrounds[0] == '#ffffff'
    assert metrics.get('images_failed_total') == failed_before + 2


def test_progress_callback_reaches_total() -> None:
    seen: list[tuple[int, int]] = []
    items = [framed_png() for _ in range(3)]

    BatchThumbnailer(_use_case(), MemorySink()).run(items, on_progress=lambda done, total: seen.append((done, total)))

    assert seen == [(1, 3), (2, 3), (3, 3)]


def test_writes_in_and_out_files(tmp_path) -> None:
    original = framed_png()
    writer = FileSystemOutputWriter(tmp_path / 'img')

    report = BatchThumbnailer(_use_case(), writer).run([data_uri(original), data_uri(original)])

    assert report.ok
    assert report.to_dict() == {'total': 2, 'succeeded': 2, 'failed': []}
    assert (tmp_path / 'img' / 'img-0-in.png').read_bytes() == original
    assert (tmp_path / 'img' / 'img-1-out.png').read_bytes().startswith(b'\x89PNG')


def test_empty_batch() -> None:
    report = BatchThumbnailer(_use_case(), MemorySink()).run([])
    assert report.total == 0
    assert report.ok
