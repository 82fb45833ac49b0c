"""Упаковка нескольких изображений в один PDF (по странице на изображение).

Раскладка: изображение вписывается в область страницы за вычетом полей
(если `fit_to_page`) и центрируется. Каждое изображение предварительно
сжимается в JPEG через `SizeConstrainedEncoder`; контейнер PDF собирает
img2pdf, который встраивает байты JPEG как есть, без перекодирования.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import img2pdf

from photoshrink.errors import InvalidConfigError, InvalidImageError
from photoshrink.models.image_model import RasterImage
from photoshrink.models.spec_model import CompressionSpec, PageLayout, ResizeSpec
from photoshrink.services.compress_service import SizeConstrainedEncoder
from photoshrink.services.encoder import PillowEncoder
from photoshrink.services.resize_service import require_image, round_half_up

logger = logging.getLogger(__name__)

POINTS_PER_INCH = 72.0


@dataclass(frozen=True)
class Placement:
    """Положение изображения на странице, в пунктах (начало в левом верхнем углу)."""
    x: float
    y: float
    width: float
    height: float


def compute_placement(width: int, height: int, layout: PageLayout) -> Placement:
    if width <= 0 or height <= 0:
        raise InvalidImageError(f"Изображение нулевого размера: {width}x{height}")
    draw_w, draw_h = float(width), float(height)
    if layout.fit_to_page:
        avail_w = layout.page_width - layout.margin * 2
        avail_h = layout.page_height - layout.margin * 2
        ratio = min(avail_w / draw_w, avail_h / draw_h)
        draw_w *= ratio
        draw_h *= ratio
    x = (layout.page_width - draw_w) / 2
    y = (layout.page_height - draw_h) / 2
    return Placement(x=x, y=y, width=draw_w, height=draw_h)


class PdfService:
    def __init__(self, encoder: Optional[SizeConstrainedEncoder] = None, dpi: float = 150.0) -> None:
        self._encoder = encoder if encoder is not None else SizeConstrainedEncoder(PillowEncoder("JPEG"))
        if self._encoder.encoder.format != "JPEG":
            raise InvalidConfigError(f"Для PDF нужен JPEG, получено {self._encoder.encoder.format}")
        self._dpi = dpi

    def images_to_pdf(self, images: Sequence[RasterImage], layout: Optional[PageLayout] = None) -> bytes:
        """Собирает PDF из изображений и возвращает его байты.

        Raises:
            InvalidImageError: если список пуст или одно из изображений пустое.
        """
        if not images:
            raise InvalidImageError("Не передано ни одного изображения")
        layout = layout if layout is not None else PageLayout()
        pages = [self._encode_page(require_image(img), layout) for img in images]

        data = img2pdf.convert(pages, layout_fun=self._layout_fun(layout), engine=img2pdf.Engine.internal)
        logger.info("PDF собран: %d стр., %d байт", len(pages), len(data))
        return data

    # ---- Helpers ----
    def _encode_page(self, image: RasterImage, layout: PageLayout) -> bytes:
        if layout.fit_to_page:
            placement = compute_placement(image.width, image.height, layout)
            resize = ResizeSpec(target_width=max(1, round_half_up(placement.width * self._dpi / POINTS_PER_INCH)))
        else:
            # native size: 1 px per point, never upscaled
            resize = ResizeSpec()

        compression = CompressionSpec(initial_quality=layout.quality, min_quality=layout.min_quality)
        result = self._encoder.resize_and_encode(image, resize, compression)
        logger.debug("Страница: %dx%d, %d байт, quality=%.2f", result.width, result.height, result.size, result.quality)
        return result.data

    @staticmethod
    def _layout_fun(layout: PageLayout):
        # img2pdf centres the image on the page itself
        def layout_fun(imgwidthpx, imgheightpx, ndpi):
            placement = compute_placement(imgwidthpx, imgheightpx, layout)
            return layout.page_width, layout.page_height, placement.width, placement.height

        return layout_fun
