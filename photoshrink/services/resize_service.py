"""Вычисление целевых размеров и масштабирование.

Принципы:
- SRP: только геометрия; кодирование в `compress_service`.
- Исходное изображение не мутируется, возвращается новый `RasterImage`.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from PIL import Image

from photoshrink.errors import InvalidImageError
from photoshrink.models.image_model import RasterImage
from photoshrink.models.spec_model import ResizeSpec

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def require_image(image: Optional[RasterImage]) -> RasterImage:
    if image is None:
        raise InvalidImageError("Изображение не задано")
    if image.is_empty:
        raise InvalidImageError(f"Изображение нулевого размера: {image.width}x{image.height}")
    return image


class ResizeService:
    def __init__(self, resample: Image.Resampling = Image.Resampling.LANCZOS) -> None:
        self._resample = resample

    def compute_size(self, width: int, height: int, spec: ResizeSpec) -> Tuple[int, int]:
        """Целевые (ширина, высота) для исходных размеров.

        Если задана только одна сторона, вторая выводится из пропорций
        (округление половины вверх, не меньше 1 px). Если заданы обе,
        используются как есть, пропорции не корректируются.
        """
        if width <= 0 or height <= 0:
            raise InvalidImageError(f"Изображение нулевого размера: {width}x{height}")
        tw, th = spec.target_width, spec.target_height
        if tw is not None and th is not None:
            return tw, th
        if tw is not None:
            return tw, max(1, round_half_up(height * tw / width))
        if th is not None:
            return max(1, round_half_up(width * th / height)), th
        return width, height

    def resize(self, image: Optional[RasterImage], spec: ResizeSpec) -> RasterImage:
        image = require_image(image)
        if spec.is_passthrough:
            return image
        size = self.compute_size(image.width, image.height, spec)
        if size == (image.width, image.height):
            return image
        logger.debug("Масштабирование %dx%d -> %dx%d", image.width, image.height, *size)
        resized = image.pil_image.resize(size, self._resample)
        return RasterImage.from_pil(resized, path=image.path)
