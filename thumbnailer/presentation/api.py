from __future__ import annotations

import json
import logging
import time
import uuid
from collections import defaultdict, deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel, Field
from rq.job import Job
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from thumbnailer.application.thumbnail_use_case import ThumbnailOptions, ThumbnailUseCase
from thumbnailer.config import settings
from thumbnailer.domain.errors import InvalidImageError
from thumbnailer.infrastructure.data_uri import decode_data_uri
from thumbnailer.infrastructure.image_validation import ImageValidationError, validate_image_bytes
from thumbnailer.infrastructure.jobs import get_queue, get_redis_connection
from thumbnailer.infrastructure.metrics import metrics
from thumbnailer.infrastructure.pillow_codec import PillowImageCodec

logger = logging.getLogger("thumbnailer.api")
if not logger.handlers:
    logging.basicConfig(level=settings.log_level)

app = FastAPI(title="Solid Background Thumbnailer")

queue = get_queue()
redis_connection = get_redis_connection()
use_case = ThumbnailUseCase(PillowImageCodec())


@dataclass
class SlidingWindow:
    timestamps: deque[float]


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: FastAPI) -> None:
        super().__init__(app)
        self._buckets: dict[str, SlidingWindow] = defaultdict(lambda: SlidingWindow(deque()))

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.perf_counter()

        request.state.request_id = request_id
        metrics.incr("http_requests_total")

        if request.url.path.startswith("/api/"):
            client_ip = request.client.host if request.client else "unknown"
            now = time.time()
            bucket = self._buckets[client_ip]
            window_start = now - 60.0

            while bucket.timestamps and bucket.timestamps[0] < window_start:
                bucket.timestamps.popleft()

            if len(bucket.timestamps) >= settings.rate_limit_per_minute:
                metrics.incr("rate_limited_total")
                return Response(
                    content='{"detail":"Rate limit exceeded. Try again in a minute."}',
                    status_code=429,
                    media_type="application/json",
                    headers={"x-request-id": request_id},
                )

            bucket.timestamps.append(now)

        response = await call_next(request)
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        response.headers["x-request-id"] = request_id
        logger.info(
            json.dumps(
                {
                    "request_id": request_id,
                    "method": request.method,
                    "path": str(request.url.path),
                    "status": response.status_code,
                    "elapsed_ms": elapsed_ms,
                }
            )
        )
        return response


app.add_middleware(RequestContextMiddleware)


class BatchOptionsModel(BaseModel):
    tolerance: int = Field(default_factory=lambda: settings.bg_tolerance, ge=0, le=255)
    use_trim: bool = Field(default_factory=lambda: settings.trim_enabled)
    palette_size: int = Field(default_factory=lambda: settings.palette_size, ge=0, le=256)
    compression_level: int = Field(default_factory=lambda: settings.png_compression_level, ge=0, le=9)
    size: int = Field(default_factory=lambda: settings.thumbnail_size, ge=1, le=1024)
    clear_rgb: bool = Field(default_factory=lambda: settings.clear_rgb)
    flatten: bool = Field(default_factory=lambda: settings.flatten_background)


class BatchRequest(BaseModel):
    images: list[str]
    options: BatchOptionsModel = Field(default_factory=BatchOptionsModel)


def _build_options(**values: int | bool) -> ThumbnailOptions:
    try:
        return ThumbnailOptions(**values)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _ensure_image_content_type(file: UploadFile) -> None:
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail=f"{file.filename or 'file'} is not an image")


def _check_image_bytes(image_bytes: bytes, label: str) -> None:
    if len(image_bytes) > settings.max_image_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"{label} is too large. Max size is {settings.max_image_bytes // (1024 * 1024)} MB",
        )
    try:
        validate_image_bytes(image_bytes, max_pixels=settings.max_image_pixels)
    except ImageValidationError as exc:
        raise HTTPException(status_code=400, detail=f"{label}: {exc}") from exc


def _status_payload(job: Job) -> dict:
    status = job.get_status(refresh=True)
    meta = job.meta or {}

    payload: dict[str, str | int | dict | None] = {
        "job_id": job.id,
        "status": status,
        "progress": int(meta.get("progress", 0)),
        "stage": str(meta.get("stage", "queued")),
        "total": int(meta.get("total", 0)),
        "current": int(meta.get("current", 0)),
        "error": None,
        "result": None,
    }

    if status == "failed":
        payload["error"] = str(meta.get("error") or "Job failed")

    if status == "finished":
        result = job.result
        payload["result"] = result if isinstance(result, dict) else None
        payload["progress"] = 100
        payload["stage"] = "done"

    return payload


@app.post("/api/thumbnails")
async def create_thumbnail(
    file: UploadFile = File(...),
    tolerance: int = Form(settings.bg_tolerance),
    use_trim: bool = Form(settings.trim_enabled),
    palette_size: int = Form(settings.palette_size),
    clear_rgb: bool = Form(settings.clear_rgb),
) -> Response:
    options = _build_options(
        tolerance=tolerance,
        use_trim=use_trim,
        palette_size=palette_size,
        compression_level=settings.png_compression_level,
        size=settings.thumbnail_size,
        clear_rgb=clear_rgb,
        flatten=settings.flatten_background,
    )
    _ensure_image_content_type(file)
    image_bytes = await file.read()
    _check_image_bytes(image_bytes, file.filename or "file")

    try:
        with metrics.timed("thumbnail"):
            result = await run_in_threadpool(use_case.execute, image_bytes, options)
    except InvalidImageError as exc:
        metrics.incr("images_failed_total")
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    metrics.incr("images_processed_total")
    return Response(
        content=result.png,
        media_type="image/png",
        headers={"x-background-color": result.background or "none"},
    )


@app.post("/api/jobs/thumbnail-batch")
def enqueue_thumbnail_batch(body: BatchRequest) -> dict[str, str | int]:
    if not body.images:
        raise HTTPException(status_code=400, detail="No images supplied")
    if len(body.images) > settings.max_batch_files:
        raise HTTPException(status_code=400, detail=f"Max {settings.max_batch_files} images per batch")

    options = _build_options(**body.options.model_dump())
    for index, item in enumerate(body.images):
        try:
            decoded = decode_data_uri(item)
        except InvalidImageError as exc:
            raise HTTPException(status_code=400, detail=f"image-{index}: {exc}") from exc
        if len(decoded) > settings.max_image_bytes:
            raise HTTPException(status_code=413, detail=f"image-{index} is too large")

    job = queue.enqueue(
        "thumbnailer.tasks.thumbnail_jobs.process_thumbnail_batch_job",
        body.images,
        settings.output_dir,
        asdict(options),
        result_ttl=settings.job_result_ttl_seconds,
        failure_ttl=settings.job_failure_ttl_seconds,
    )

    metrics.incr("jobs_submitted_total")
    return {"job_id": job.id, "status": "queued", "total": len(body.images)}


@app.get("/api/jobs/{job_id}")
def get_job_status(job_id: str) -> dict:
    try:
        job = Job.fetch(job_id, connection=redis_connection)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=404, detail="Job not found") from exc

    return _status_payload(job)


@app.get("/api/metrics")
def get_metrics() -> dict:
    snapshot = metrics.snapshot()
    snapshot["timestamp"] = int(datetime.now(timezone.utc).timestamp())
    return snapshot


@app.get("/api/metrics/prometheus")
def get_prometheus_metrics() -> PlainTextResponse:
    return PlainTextResponse(metrics.to_prometheus_text(), media_type="text/plain; version=0.0.4")


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
