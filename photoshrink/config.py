"""Настройки по умолчанию с переопределением через окружение (PHOTOSHRINK_*)."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from photoshrink.errors import InvalidConfigError

ENV_PREFIX = "PHOTOSHRINK_"
SUPPORTED_FORMATS = ("JPEG", "WEBP", "PNG")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidConfigError(f"{ENV_PREFIX}{name}={raw!r} не является числом") from exc


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidConfigError(f"{ENV_PREFIX}{name}={raw!r} не является целым") from exc


@dataclass(frozen=True)
class Settings:
    initial_quality: float = 0.92
    quality_step: float = 0.05
    min_quality: float = 0.1
    output_format: str = "JPEG"
    workers: int = 4
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.output_format not in SUPPORTED_FORMATS:
            raise InvalidConfigError(f"Неподдерживаемый формат: {self.output_format}")
        if self.workers < 1:
            raise InvalidConfigError(f"workers должен быть >= 1: {self.workers}")
        if self.log_level not in LOG_LEVELS:
            raise InvalidConfigError(f"Неизвестный уровень логирования: {self.log_level}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        defaults = cls()
        fmt = env.get(ENV_PREFIX + "FORMAT", defaults.output_format).strip().upper()
        return cls(
            initial_quality=_env_float(env, "INITIAL_QUALITY", defaults.initial_quality),
            quality_step=_env_float(env, "QUALITY_STEP", defaults.quality_step),
            min_quality=_env_float(env, "MIN_QUALITY", defaults.min_quality),
            output_format="JPEG" if fmt == "JPG" else fmt,
            workers=_env_int(env, "WORKERS", defaults.workers),
            log_level=env.get(ENV_PREFIX + "LOG_LEVEL", defaults.log_level).strip().upper(),
        )
