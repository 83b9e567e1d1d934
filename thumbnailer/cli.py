from __future__ import annotations

import argparse
import logging
import sys

from thumbnailer.application.batch import BatchThumbnailer
from thumbnailer.application.thumbnail_use_case import ThumbnailOptions, ThumbnailUseCase
from thumbnailer.config import settings
from thumbnailer.infrastructure.data_uri import load_data_uri_file
from thumbnailer.infrastructure.output_writer import FileSystemOutputWriter
from thumbnailer.infrastructure.pillow_codec import PillowImageCodec

logger = logging.getLogger("thumbnailer.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="thumbnailer",
        description="Strip solid backgrounds from data-URI PNGs and write small thumbnails.",
    )
    parser.add_argument("input", help="JSON file holding an array of data:image/png;base64 URIs")
    parser.add_argument("--output-dir", default=settings.output_dir)
    parser.add_argument("--tolerance", type=int, default=settings.bg_tolerance)
    parser.add_argument(
        "--no-trim",
        dest="use_trim",
        action="store_false",
        default=settings.trim_enabled,
        help="Skip the square trim of transparent margins",
    )
    parser.add_argument("--palette-size", type=int, default=settings.palette_size, help="0 keeps full color")
    parser.add_argument("--compression-level", type=int, default=settings.png_compression_level)
    parser.add_argument("--size", type=int, default=settings.thumbnail_size)
    parser.add_argument(
        "--clear-rgb",
        action="store_true",
        default=settings.clear_rgb,
        help="Zero the color channels of removed pixels as well as alpha",
    )
    parser.add_argument(
        "--no-flatten",
        dest="flatten",
        action="store_false",
        default=settings.flatten_background,
        help="Keep the thumbnail transparent instead of compositing over the background",
    )
    parser.add_argument("--concurrency", type=int, default=settings.batch_concurrency)
    parser.add_argument("--log-level", default=settings.log_level)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), stream=sys.stderr)

    try:
        options = ThumbnailOptions(
            tolerance=args.tolerance,
            use_trim=args.use_trim,
            palette_size=args.palette_size,
            compression_level=args.compression_level,
            size=args.size,
            clear_rgb=args.clear_rgb,
            flatten=args.flatten,
        )
    except ValueError as exc:
        parser.error(str(exc))

    try:
        images = load_data_uri_file(args.input)
    except (OSError, ValueError) as exc:
        logger.error("cannot read %s: %s", args.input, exc)
        return 2

    writer = FileSystemOutputWriter(args.output_dir)
    batch = BatchThumbnailer(ThumbnailUseCase(PillowImageCodec()), writer, concurrency=args.concurrency)
    report = batch.run(images, options)

    for failure in report.failed:
        logger.error("img-%d: %s", failure.index, failure.error)
    logger.info("wrote %d of %d thumbnails to %s", len(report.succeeded), report.total, writer.output_dir)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
