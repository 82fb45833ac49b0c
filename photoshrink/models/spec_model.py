"""Value-объекты параметров: изменение размера, сжатие, раскладка PDF.

Валидация выполняется в `__post_init__`, поэтому некорректный объект
невозможно создать; сервисы могут полагаться на инварианты.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

from photoshrink.errors import InvalidConfigError

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(b|kb|k|mb|m)?\s*$", re.IGNORECASE)
_UNITS = {None: 1, "b": 1, "k": 1024, "kb": 1024, "m": 1024 * 1024, "mb": 1024 * 1024}


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _in_unit_interval(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value) and 0.0 < value <= 1.0


def parse_size(text: str) -> int:
    """Разбирает размер вида "2048", "150kb", "1.5mb" в байты.

    Raises:
        InvalidConfigError: если строка не распознана.
    """
    match = _SIZE_RE.match(str(text))
    if match is None:
        raise InvalidConfigError(f"Не удалось разобрать размер: {text!r}")
    number, unit = match.groups()
    return int(float(number) * _UNITS[unit.lower() if unit else None])


@dataclass(frozen=True)
class ResizeSpec:
    """Целевые размеры.

    - оба заданы: используются как есть (пропорции НЕ сохраняются);
    - задан один: второй вычисляется по исходным пропорциям;
    - не задан ни один: исходные размеры.
    """
    target_width: Optional[int] = None
    target_height: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("target_width", "target_height"):
            value = getattr(self, name)
            if value is not None and not _is_positive_int(value):
                raise InvalidConfigError(f"{name} должен быть положительным целым, получено {value!r}")

    @property
    def is_passthrough(self) -> bool:
        return self.target_width is None and self.target_height is None


@dataclass(frozen=True)
class CompressionSpec:
    """Параметры поиска качества под бюджет в байтах.

    Fields:
        target_size_bytes: Бюджет; None означает один проход без ограничения.
        initial_quality: Стартовое качество, (0, 1].
        quality_step: Шаг уменьшения качества, > 0.
        min_quality: Пол качества, (0, 1], не больше `initial_quality`.
    """
    target_size_bytes: Optional[int] = None
    initial_quality: float = 0.92
    quality_step: float = 0.05
    min_quality: float = 0.1

    def __post_init__(self) -> None:
        if self.target_size_bytes is not None:
            if isinstance(self.target_size_bytes, bool) or not isinstance(self.target_size_bytes, int):
                raise InvalidConfigError(f"target_size_bytes должен быть целым, получено {self.target_size_bytes!r}")
            if self.target_size_bytes < 0:
                raise InvalidConfigError(f"target_size_bytes не может быть отрицательным: {self.target_size_bytes}")
        if not _in_unit_interval(self.initial_quality):
            raise InvalidConfigError(f"initial_quality вне (0, 1]: {self.initial_quality!r}")
        if not _in_unit_interval(self.min_quality):
            raise InvalidConfigError(f"min_quality вне (0, 1]: {self.min_quality!r}")
        if not isinstance(self.quality_step, (int, float)) or not math.isfinite(self.quality_step) or self.quality_step <= 0:
            raise InvalidConfigError(f"quality_step должен быть > 0: {self.quality_step!r}")
        if self.min_quality > self.initial_quality:
            raise InvalidConfigError(
                f"min_quality ({self.min_quality}) больше initial_quality ({self.initial_quality})"
            )

    @classmethod
    def from_kilobytes(cls, target_kb: Optional[float], **kwargs) -> "CompressionSpec":
        target = None if target_kb is None else int(target_kb * 1024)
        return cls(target_size_bytes=target, **kwargs)

    @property
    def max_iterations(self) -> int:
        """Верхняя граница числа итераций: ceil((initial - min) / step) + 1."""
        span = max(self.initial_quality, self.min_quality) - self.min_quality
        return math.ceil(span / self.quality_step) + 1


@dataclass(frozen=True)
class PageLayout:
    """Раскладка страниц PDF (единицы: пункты, A4 по умолчанию)."""
    page_width: float = 595
    page_height: float = 842
    fit_to_page: bool = True
    margin: float = 30
    quality: float = 0.85
    min_quality: float = 0.5

    def __post_init__(self) -> None:
        if self.page_width <= 0 or self.page_height <= 0:
            raise InvalidConfigError(f"Размер страницы должен быть положительным: {self.page_width}x{self.page_height}")
        if self.margin < 0 or 2 * self.margin >= min(self.page_width, self.page_height):
            raise InvalidConfigError(f"Недопустимое поле страницы: {self.margin}")
        if not _in_unit_interval(self.quality) or not _in_unit_interval(self.min_quality):
            raise InvalidConfigError(f"Качество вне (0, 1]: {self.quality}, {self.min_quality}")
        if self.min_quality > self.quality:
            raise InvalidConfigError(f"min_quality ({self.min_quality}) больше quality ({self.quality})")
