"""Подбор качества кодирования под бюджет в байтах.

Алгоритм:
1) q = max(initial_quality, min_quality)
2) Кодируем; стоп, если бюджета нет или кодировщик без потерь, или size <= бюджет, или q <= min_quality
3) после k-й попытки q = q0 - k * quality_step (не ниже min_quality), повторяем

Качество только убывает, поэтому цикл завершается не более чем за
ceil((initial - min) / step) + 1 итераций; превышение этой границы
считается ошибкой конфигурации.

Если даже на полу качества бюджет не достигнут, возвращается результат на
полу с `met=False`, это не ошибка.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from PIL import Image

from photoshrink.errors import EncodingCancelled, EncodingFailure, EncodingTimeout, InvalidConfigError
from photoshrink.models.image_model import EncodeAttempt, EncodedResult, RasterImage
from photoshrink.models.spec_model import CompressionSpec, ResizeSpec
from photoshrink.services.encoder import MIME_TYPES, Encoder, PillowEncoder
from photoshrink.services.resize_service import ResizeService, require_image

logger = logging.getLogger(__name__)

# max attempts per quality value (the first try plus one retry)
ENCODE_TRIES = 2
_QUALITY_DIGITS = 10
# values this close to the floor count as the floor
_FLOOR_TOLERANCE = 1e-9


class SizeConstrainedEncoder:
    """Изменение размера + повторное кодирование до попадания в бюджет.

    Объект не хранит изменяемого состояния между вызовами, поэтому
    независимые вызовы можно выполнять параллельно.
    """

    def __init__(self, encoder: Optional[Encoder] = None, resize_service: Optional[ResizeService] = None) -> None:
        self.encoder: Encoder = encoder if encoder is not None else PillowEncoder()
        self._resize_service = resize_service if resize_service is not None else ResizeService()

    def resize(self, image: Optional[RasterImage], spec: ResizeSpec) -> RasterImage:
        return self._resize_service.resize(image, spec)

    def encode_to_budget(
        self,
        image: Optional[RasterImage],
        spec: CompressionSpec,
        *,
        is_cancelled: Optional[Callable[[], bool]] = None,
        deadline: Optional[float] = None,
        on_attempt: Optional[Callable[[EncodeAttempt], None]] = None,
    ) -> EncodedResult:
        """Кодирует изображение, понижая качество, пока не уложится в бюджет.

        Args:
            image: Уже отмасштабированное изображение.
            spec: Параметры бюджета и шагов качества.
            is_cancelled: Проверяется перед каждой итерацией, кроме первой.
            deadline: Момент `time.monotonic()`, после которого новая итерация не начинается.
            on_attempt: Вызывается после каждой попытки кодирования.

        Raises:
            InvalidImageError: изображение отсутствует или пустое.
            InvalidConfigError: превышена граница числа итераций.
            EncodingFailure: кодировщик дважды подряд не вернул данных.
            EncodingCancelled / EncodingTimeout: прерывание между попытками.
        """
        image = require_image(image)
        budget = spec.target_size_bytes
        max_iterations = spec.max_iterations
        start = max(spec.initial_quality, spec.min_quality)
        quality = start
        # quality does not change the output of a lossless encoder
        single_pass = budget is None or getattr(self.encoder, "lossless", False)
        iteration = 0

        while True:
            if iteration > 0:
                self._check_abort(is_cancelled, deadline, iteration)
            if iteration >= max_iterations:
                raise InvalidConfigError(
                    f"Превышено число итераций ({max_iterations}) при quality_step={spec.quality_step}"
                )
            iteration += 1

            data = self._encode_once(image.pil_image, quality)
            size = len(data)
            logger.debug("Попытка %d: quality=%.2f size=%d budget=%s", iteration, quality, size, budget)
            if on_attempt is not None:
                on_attempt(EncodeAttempt(iteration=iteration, quality=quality, size=size, target_size_bytes=budget))

            if single_pass or size <= budget or quality - spec.min_quality < _FLOOR_TOLERANCE:
                break

            # from the start value, not the previous one: float error does not accumulate
            quality = round(start - iteration * spec.quality_step, _QUALITY_DIGITS)
            if quality - spec.min_quality < _FLOOR_TOLERANCE:
                quality = spec.min_quality

        met = budget is None or size <= budget
        if not met:
            logger.warning(
                "Бюджет %d байт не достигнут: %d байт при качестве %.2f", budget, size, quality
            )
        fmt = getattr(self.encoder, "format", "JPEG")
        return EncodedResult(
            data=data,
            size=size,
            quality=quality,
            met=met,
            attempts=iteration,
            width=image.width,
            height=image.height,
            format=fmt,
            mime_type=MIME_TYPES.get(fmt, "application/octet-stream"),
        )

    def resize_and_encode(
        self,
        image: Optional[RasterImage],
        resize_spec: ResizeSpec,
        compression_spec: CompressionSpec,
        **kwargs,
    ) -> EncodedResult:
        resized = self.resize(image, resize_spec)
        return self.encode_to_budget(resized, compression_spec, **kwargs)

    # ---- Helpers ----
    def _encode_once(self, image: Image.Image, quality: float) -> bytes:
        """Одна попытка кодирования с одной повторной попыткой при сбое."""
        last_error: Optional[Exception] = None
        for attempt in range(1, ENCODE_TRIES + 1):
            try:
                data = self.encoder.encode(image, quality)
            except (OSError, ValueError) as exc:
                last_error = exc
                data = b""
            if data:
                return bytes(data)
            if attempt < ENCODE_TRIES:
                logger.warning("Кодировщик не вернул данных (quality=%.2f), повтор", quality)

        message = f"Кодирование не удалось при quality={quality:.2f}"
        if last_error is not None:
            raise EncodingFailure(f"{message}: {last_error}") from last_error
        raise EncodingFailure(f"{message}: пустой результат")

    @staticmethod
    def _check_abort(
        is_cancelled: Optional[Callable[[], bool]],
        deadline: Optional[float],
        iteration: int,
    ) -> None:
        if is_cancelled is not None and is_cancelled():
            raise EncodingCancelled(f"Кодирование отменено после {iteration} попыток")
        if deadline is not None and time.monotonic() >= deadline:
            raise EncodingTimeout(f"Истёк дедлайн после {iteration} попыток")
