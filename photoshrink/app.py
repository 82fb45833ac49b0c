from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from photoshrink.config import Settings
from photoshrink.controllers.app_controller import AppController
from photoshrink.errors import InvalidConfigError, PhotoShrinkError
from photoshrink.models.spec_model import CompressionSpec, PageLayout, ResizeSpec, parse_size
from photoshrink.services.compress_service import SizeConstrainedEncoder
from photoshrink.services.encoder import PillowEncoder

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photoshrink",
        description="Resize images and re-encode them to fit a size budget, or pack them into a PDF.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    resize = sub.add_parser("resize", help="Resize and compress images")
    resize.add_argument("images", nargs="+", type=Path)
    resize.add_argument("-W", "--width", type=int, default=None, help="Target width, px")
    resize.add_argument("-H", "--height", type=int, default=None, help="Target height, px")
    resize.add_argument("-s", "--size", default=None, help="Byte budget, e.g. 2048, 150kb, 1.5mb")
    resize.add_argument("-q", "--quality", type=float, default=settings.initial_quality, help="Initial quality (0, 1]")
    resize.add_argument("--step", type=float, default=settings.quality_step, help="Quality step")
    resize.add_argument("--min-quality", type=float, default=settings.min_quality, help="Quality floor (0, 1]")
    resize.add_argument(
        "-f", "--format", default=settings.output_format, type=str.upper, choices=["JPEG", "JPG", "WEBP", "PNG"]
    )
    resize.add_argument("-o", "--out-dir", type=Path, default=None, help="Output directory (default: next to source)")
    resize.add_argument("-j", "--workers", type=int, default=settings.workers)

    pdf = sub.add_parser("pdf", help="Pack images into a PDF, one per page")
    pdf.add_argument("images", nargs="+", type=Path)
    pdf.add_argument("-o", "--output", type=Path, required=True)
    pdf.add_argument("--margin", type=float, default=PageLayout.margin)
    pdf.add_argument("--no-fit", dest="fit", action="store_false", help="Keep native size instead of fitting the page")
    pdf.add_argument("-q", "--quality", type=float, default=PageLayout.quality)
    return parser


class PhotoShrinkApp:
    """Командная строка поверх `AppController`."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        try:
            settings = self._settings if self._settings is not None else Settings.from_env()
        except InvalidConfigError as exc:
            logging.basicConfig(format=LOG_FORMAT)
            logger.error("%s", exc)
            return EXIT_USAGE

        args = build_parser(settings).parse_args(argv)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else settings.log_level,
            format=LOG_FORMAT,
            stream=sys.stderr,
        )

        try:
            if args.command == "resize":
                return self._resize(args)
            return self._pdf(args)
        except InvalidConfigError as exc:
            logger.error("%s", exc)
            return EXIT_USAGE
        except (PhotoShrinkError, OSError) as exc:
            logger.error("%s", exc)
            return EXIT_FAILED

    def _resize(self, args: argparse.Namespace) -> int:
        resize_spec = ResizeSpec(target_width=args.width, target_height=args.height)
        compression_spec = CompressionSpec(
            target_size_bytes=parse_size(args.size) if args.size else None,
            initial_quality=args.quality,
            quality_step=args.step,
            min_quality=args.min_quality,
        )
        controller = AppController(encoder=SizeConstrainedEncoder(PillowEncoder(args.format)))
        report = controller.process_batch(
            args.images, resize_spec, compression_spec, out_dir=args.out_dir, workers=args.workers
        )
        for src, result in sorted(report.results.items()):
            print(f"{src}: {result.width}x{result.height} {result.size / 1024:.1f} KB q={result.quality:.2f}")
        return EXIT_OK if report.ok else EXIT_FAILED

    def _pdf(self, args: argparse.Namespace) -> int:
        layout = PageLayout(fit_to_page=args.fit, margin=args.margin, quality=args.quality,
                            min_quality=min(PageLayout.min_quality, args.quality))
        dest = AppController().make_pdf(args.images, args.output, layout)
        print(dest)
        return EXIT_OK

