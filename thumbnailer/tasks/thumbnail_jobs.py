from __future__ import annotations

import traceback
import uuid
from pathlib import Path

from rq import get_current_job

from thumbnailer.application.batch import BatchThumbnailer
from thumbnailer.application.thumbnail_use_case import ThumbnailOptions, ThumbnailUseCase
from thumbnailer.config import settings
from thumbnailer.infrastructure.output_writer import FileSystemOutputWriter
from thumbnailer.infrastructure.pillow_codec import PillowImageCodec

use_case = ThumbnailUseCase(PillowImageCodec())


def _update_job_meta(**entries: str | int | float) -> None:
    job = get_current_job()
    if not job:
        return
    job.meta.update(entries)
    job.save_meta()


def process_thumbnail_batch_job(
    images: list[str],
    output_dir: str,
    options: dict[str, int | bool | None],
) -> dict:
    job = get_current_job()
    job_id = job.id if job else f"sync-{uuid.uuid4().hex[:12]}"
    job_dir = Path(output_dir) / job_id
    total = max(1, len(images))
    _update_job_meta(progress=3, stage="prepare", total=total, current=0)

    def on_progress(current: int, count: int) -> None:
        _update_job_meta(progress=int((current / max(1, count)) * 95), stage="processing", total=count, current=current)

    try:
        opts = ThumbnailOptions(**options)
        batch = BatchThumbnailer(
            use_case,
            FileSystemOutputWriter(job_dir),
            concurrency=settings.batch_concurrency,
        )
        report = batch.run(images, opts, on_progress=on_progress)
        _update_job_meta(progress=100, stage="done")
    except Exception as exc:  # noqa: BLE001
        _update_job_meta(progress=0, stage="failed", error=str(exc), traceback=traceback.format_exc())
        raise

    return {
        "kind": "batch",
        "job_id": job_id,
        "output_dir": str(job_dir),
        **report.to_dict(),
    }
