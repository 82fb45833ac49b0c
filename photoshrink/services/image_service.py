"""Загрузка изображений (файл, байты, массив пикселей) в `RasterImage`.

Принципы:
- SRP: класс отвечает только за загрузку и базовое извлечение свойств.
- OCP: новые источники (стрим, URL) можно добавить отдельными методами.
- Нераспознанный вход отклоняется ошибкой декодирования, а не пустым изображением.
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from photoshrink.errors import ImageDecodeError, InvalidImageError
from photoshrink.models.image_model import RasterImage

logger = logging.getLogger(__name__)


class ImageService:
    def load_image(self, file_path: str | Path) -> RasterImage:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `RasterImage` с декодированными пикселями и размером файла.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            ImageDecodeError: если файл не распознан как изображение.
            InvalidImageError: если изображение имеет нулевой размер.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        with path.open("rb") as fh:
            image = self._decode(fh, source=str(path))
        logger.debug("Загружено %s: %dx%d %s", path, image.width, image.height, image.mode)
        return RasterImage.from_pil(image, path=path, size_bytes=size_bytes)

    def load_bytes(self, data: bytes) -> RasterImage:
        """Декодирует изображение из байтов (например, из загруженного файла)."""
        if not data:
            raise ImageDecodeError("Пустой буфер не является изображением")
        image = self._decode(io.BytesIO(data), source="<bytes>")
        return RasterImage.from_pil(image, size_bytes=len(data))

    def from_array(self, pixels: np.ndarray) -> RasterImage:
        shape = np.shape(pixels)
        if len(shape) < 2 or shape[0] == 0 or shape[1] == 0:
            raise InvalidImageError(f"Массив пикселей пустой или не двумерный: {shape}")
        try:
            raster = RasterImage.from_array(pixels)
        except (TypeError, ValueError) as exc:
            raise ImageDecodeError(f"Массив не является изображением: {exc}") from exc
        self._require_dimensions(raster.pil_image, source="<array>")
        return raster

    # ---- Helpers ----
    def _decode(self, stream, source: str) -> Image.Image:
        try:
            image = Image.open(stream)
            image.load()
        except Image.DecompressionBombError as exc:
            raise ImageDecodeError(f"Слишком много пикселей: {source}") from exc
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise ImageDecodeError(f"Файл не является изображением: {source}") from exc
        # apply EXIF orientation so width/height are the displayed ones
        image = ImageOps.exif_transpose(image)
        self._require_dimensions(image, source)
        return image

    @staticmethod
    def _require_dimensions(image: Image.Image, source: str) -> None:
        width, height = image.size
        if width <= 0 or height <= 0:
            raise InvalidImageError(f"Изображение нулевого размера ({width}x{height}): {source}")
