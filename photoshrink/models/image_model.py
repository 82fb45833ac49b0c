"""Модели данных для изображений.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image


@dataclass(frozen=True)
class RasterImage:
    """Неизменяемая модель декодированного изображения.

    Fields:
        pil_image: Пиксели в виде `PIL.Image.Image`.
        width: Ширина, px.
        height: Высота, px.
        mode: Режим PIL, например "RGB" или "RGBA".
        path: Путь к исходному файлу, если изображение загружено с диска.
        size_bytes: Размер исходного файла/буфера, если известен.
    """
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    path: Optional[Path] = None
    size_bytes: Optional[int] = None

    @classmethod
    def from_pil(
        cls,
        pil_image: Image.Image,
        path: Optional[Path] = None,
        size_bytes: Optional[int] = None,
    ) -> "RasterImage":
        width, height = pil_image.size
        return cls(
            pil_image=pil_image,
            width=width,
            height=height,
            mode=pil_image.mode,
            path=path,
            size_bytes=size_bytes,
        )

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> "RasterImage":
        """Строит изображение из сырого буфера пикселей (H×W, H×W×3 или H×W×4, uint8)."""
        arr = np.asarray(pixels)
        if arr.dtype != np.uint8:
            arr = np.clip(np.rint(arr), 0, 255).astype(np.uint8)
        return cls.from_pil(Image.fromarray(arr))

    def to_array(self) -> np.ndarray:
        return np.asarray(self.pil_image)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class EncodedResult:
    """Результат кодирования: байты и параметры, при которых они получены.

    `met`: уложились ли в бюджет (True, если бюджет не задан).
    `attempts`: сколько раз кодировщик был вызван в цикле.
    """
    data: bytes
    size: int
    quality: float
    met: bool
    attempts: int
    width: int
    height: int
    format: str
    mime_type: str

    def save(self, path: str | Path) -> Path:
        out = Path(path)
        out.write_bytes(self.data)
        return out


@dataclass(frozen=True)
class EncodeAttempt:
    """Одна итерация цикла (для колбэка прогресса)."""
    iteration: int
    quality: float
    size: int
    target_size_bytes: Optional[int]
