"""Иерархия исключений пакета.

Все ошибки сообщаются вызывающему синхронно; единственное локальное
восстановление: одна повторная попытка кодирования (см. `compress_service`).
"""
from __future__ import annotations


class PhotoShrinkError(Exception):
    """Базовый класс для всех ошибок photoshrink."""


class InvalidImageError(PhotoShrinkError):
    """Изображение отсутствует или имеет нулевые/отрицательные размеры."""


class ImageDecodeError(InvalidImageError):
    """Входные байты не распознаны как изображение."""


class InvalidConfigError(PhotoShrinkError, ValueError):
    """Некорректные параметры ResizeSpec / CompressionSpec / Settings."""


class EncodingFailure(PhotoShrinkError):
    """Кодировщик упал или вернул пустой буфер (после повторной попытки)."""


class EncodingCancelled(PhotoShrinkError):
    """Цикл кодирования прерван вызывающим между попытками."""


class EncodingTimeout(EncodingCancelled):
    """Истёк дедлайн, заданный вызывающим."""
