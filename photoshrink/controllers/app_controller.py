"""Контроллер приложения: оркестрация сервисов загрузки, сжатия и сохранения.

SOLID:
- SRP: класс связывает источники/приёмники файлов с сервисами (без логики обработки изображений).
- DIP: зависит от сервисов как от ролей; конкретные реализации подставляются снаружи.
Clean Code:
- Методы компактны; тяжёлая логика вынесена в сервисы.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence, Tuple

from photoshrink.errors import PhotoShrinkError
from photoshrink.models.image_model import EncodeAttempt, EncodedResult
from photoshrink.models.spec_model import CompressionSpec, PageLayout, ResizeSpec
from photoshrink.services.compress_service import SizeConstrainedEncoder
from photoshrink.services.encoder import EXTENSIONS
from photoshrink.services.image_service import ImageService
from photoshrink.services.pdf_service import PdfService

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """Итог пакетной обработки: успешные результаты и ошибки по файлам."""
    results: Dict[Path, EncodedResult] = field(default_factory=dict)
    failures: Dict[Path, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class AppController:
    """Связывает файловую систему с прикладной логикой.

    Ответственности:
    - Загрузка изображений через `ImageService`.
    - Масштабирование и сжатие через `SizeConstrainedEncoder`.
    - Сборка PDF через `PdfService`.
    - Запись результатов на диск.
    """
    encoder: SizeConstrainedEncoder = field(default_factory=SizeConstrainedEncoder)
    image_service: ImageService = field(default_factory=ImageService)
    pdf_service: PdfService = field(default_factory=PdfService)
    on_progress: Optional[Callable[[Path, EncodeAttempt], None]] = None

    def output_path(self, src: Path, out_dir: Optional[Path] = None) -> Path:
        ext = EXTENSIONS.get(self.encoder.encoder.format, "bin")
        target_dir = out_dir if out_dir is not None else src.parent
        return target_dir / f"{src.stem}_resized.{ext}"

    def process_file(
        self,
        path: str | Path,
        resize_spec: ResizeSpec,
        compression_spec: CompressionSpec,
        out_dir: Optional[Path] = None,
    ) -> Tuple[Path, EncodedResult]:
        """Загружает, масштабирует, сжимает и записывает один файл."""
        src = Path(path)
        image = self.image_service.load_image(src)
        on_attempt = None
        if self.on_progress is not None:
            on_attempt = lambda attempt: self.on_progress(src, attempt)  # noqa: E731

        result = self.encoder.resize_and_encode(image, resize_spec, compression_spec, on_attempt=on_attempt)
        dest = self.output_path(src, out_dir)
        dest.parent.mkdir(parents=True, exist_ok=True)
        result.save(dest)
        logger.info(
            "%s -> %s: %dx%d, %d байт, quality=%.2f%s",
            src.name,
            dest.name,
            result.width,
            result.height,
            result.size,
            result.quality,
            "" if result.met else " (бюджет не достигнут)",
        )
        return dest, result

    def process_batch(
        self,
        paths: Sequence[str | Path],
        resize_spec: ResizeSpec,
        compression_spec: CompressionSpec,
        out_dir: Optional[Path] = None,
        workers: int = 4,
    ) -> BatchReport:
        """Обрабатывает файлы параллельно; ошибка одного файла не прерывает остальные."""
        report = BatchReport()
        with ThreadPoolExecutor(max_workers=max(1, workers)) as ex:
            futs = {
                ex.submit(self.process_file, p, resize_spec, compression_spec, out_dir): Path(p) for p in paths
            }
            for fut in as_completed(futs):
                src = futs[fut]
                try:
                    _dest, result = fut.result()
                except (PhotoShrinkError, OSError) as exc:
                    logger.error("%s: %s", src, exc)
                    report.failures[src] = str(exc)
                else:
                    report.results[src] = result
        return report

    def make_pdf(self, paths: Sequence[str | Path], out_path: str | Path, layout: Optional[PageLayout] = None) -> Path:
        images = [self.image_service.load_image(p) for p in paths]
        data = self.pdf_service.images_to_pdf(images, layout)
        dest = Path(out_path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)
        return dest
