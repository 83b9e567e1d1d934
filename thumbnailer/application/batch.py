from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from threading import Lock

from thumbnailer.application.thumbnail_use_case import ThumbnailOptions, ThumbnailUseCase
from thumbnailer.domain.output_sink import ThumbnailSink
from thumbnailer.infrastructure.data_uri import load_image_input
from thumbnailer.infrastructure.metrics import metrics

logger = logging.getLogger("thumbnailer.batch")


@dataclass
class BatchItemFailure:
    index: int
    error: str


@dataclass
class BatchReport:
    total: int
    succeeded: list[int] = field(default_factory=list)
    failed: list[BatchItemFailure] = field(default_factory=list)
    backgrounds: dict[int, str | None] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "succeeded": len(self.succeeded),
            "failed": [{"index": item.index, "error": item.error} for item in self.failed],
        }


class BatchThumbnailer:
    """Runs every batch item through the thumbnail pipeline, isolating failures."""

    def __init__(self, use_case: ThumbnailUseCase, sink: ThumbnailSink, concurrency: int = 1) -> None:
        self._use_case = use_case
        self._sink = sink
        self._concurrency = max(1, concurrency)

    def run(
        self,
        items: Sequence[str | bytes],
        options: ThumbnailOptions | None = None,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> BatchReport:
        opts = options or ThumbnailOptions()
        report = BatchReport(total=len(items))
        lock = Lock()
        done = 0

        def record(index: int, background: str | None, error: Exception | None) -> None:
            nonlocal done
            with lock:
                done += 1
                if error is None:
                    report.succeeded.append(index)
                    report.backgrounds[index] = background
                else:
                    report.failed.append(BatchItemFailure(index=index, error=str(error)))
                current = done
            if on_progress is not None:
                on_progress(current, report.total)

        def process(index: int, item: str | bytes) -> None:
            try:
                background = self._process_one(index, item, opts)
            except Exception as exc:  # noqa: BLE001
                logger.exception("image %d failed: %s", index, exc)
                metrics.incr("images_failed_total")
                record(index, None, exc)
            else:
                metrics.incr("images_processed_total")
                record(index, background, None)

        if self._concurrency == 1:
            for index, item in enumerate(items):
                process(index, item)
        else:
            with ThreadPoolExecutor(max_workers=self._concurrency, thread_name_prefix="thumb") as pool:
                futures = [pool.submit(process, index, item) for index, item in enumerate(items)]
                for future in as_completed(futures):
                    future.result()

        report.succeeded.sort()
        report.failed.sort(key=lambda failure: failure.index)
        metrics.incr("batches_total")
        logger.info(
            "batch finished: %d ok, %d failed of %d",
            len(report.succeeded),
            len(report.failed),
            report.total,
        )
        return report

    def _process_one(self, index: int, item: str | bytes, options: ThumbnailOptions) -> str | None:
        original = load_image_input(item)
        with metrics.timed("thumbnail"):
            result = self._use_case.execute(original, options)
        self._sink.write(index, original, result.png)
        logger.debug("image %d done, background=%s", index, result.background or "none")
        return result.background
