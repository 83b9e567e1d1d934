from __future__ import annotations

import os


class Settings:
    output_dir: str = os.getenv("OUTPUT_DIR", "img")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    bg_tolerance: int = int(os.getenv("BG_TOLERANCE", "10"))
    trim_enabled: bool = os.getenv("TRIM_ENABLED", "true").lower() == "true"
    palette_size: int = int(os.getenv("PALETTE_SIZE", "12"))
    png_compression_level: int = int(os.getenv("PNG_COMPRESSION_LEVEL", "9"))
    thumbnail_size: int = int(os.getenv("THUMBNAIL_SIZE", "32"))
    clear_rgb: bool = os.getenv("CLEAR_RGB", "false").lower() == "true"
    flatten_background: bool = os.getenv("FLATTEN_BACKGROUND", "true").lower() == "true"
    batch_concurrency: int = int(os.getenv("BATCH_CONCURRENCY", "1"))

    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    max_image_bytes: int = int(os.getenv("MAX_IMAGE_BYTES", str(12 * 1024 * 1024)))
    max_image_pixels: int = int(os.getenv("MAX_IMAGE_PIXELS", str(20_000_000)))
    max_batch_files: int = int(os.getenv("MAX_BATCH_FILES", "50"))
    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "45"))

    job_result_ttl_seconds: int = int(os.getenv("JOB_RESULT_TTL_SECONDS", "86400"))
    job_failure_ttl_seconds: int = int(os.getenv("JOB_FAILURE_TTL_SECONDS", "86400"))
    worker_concurrency: int = int(os.getenv("WORKER_CONCURRENCY", "1"))


settings = Settings()
