from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from PIL import Image

from photoshrink.config import SUPPORTED_FORMATS
from photoshrink.errors import InvalidConfigError

MIME_TYPES = {"JPEG": "image/jpeg", "WEBP": "image/webp", "PNG": "image/png"}
EXTENSIONS = {"JPEG": "jpg", "WEBP": "webp", "PNG": "png"}
PNG_MODES = ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA")


class Encoder(Protocol):
    """Растровое изображение -> байты при заданном качестве (0, 1]."""
    format: str

    def encode(self, image: Image.Image, quality: float) -> bytes: ...


def to_pillow_quality(quality: float) -> int:
    """Качество (0, 1] -> целая шкала Pillow 1..100."""
    return max(1, min(100, int(round(quality * 100))))


@dataclass(frozen=True)
class PillowEncoder:
    """Кодировщик на Pillow. Детерминирован при фиксированном качестве.

    PNG кодируется без потерь, качество игнорируется (`lossless`), поэтому
    цикл подбора качества делает для него один проход.
    """
    format: str = "JPEG"
    optimize: bool = True
    progressive: bool = False
    subsampling: Optional[int] = None  # 0 - 4:4:4, 1 - 4:2:2, 2 - 4:2:0
    background: Tuple[int, int, int] = (255, 255, 255)

    def __post_init__(self) -> None:
        fmt = self.format.upper()
        if fmt == "JPG":
            fmt = "JPEG"
        if fmt not in SUPPORTED_FORMATS:
            raise InvalidConfigError(f"Неподдерживаемый формат: {self.format}")
        object.__setattr__(self, "format", fmt)

    @property
    def lossless(self) -> bool:
        return self.format == "PNG"

    @property
    def mime_type(self) -> str:
        return MIME_TYPES[self.format]

    @property
    def extension(self) -> str:
        return EXTENSIONS[self.format]

    def encode(self, image: Image.Image, quality: float) -> bytes:
        buf = io.BytesIO()
        if self.format == "JPEG":
            params = {"quality": to_pillow_quality(quality), "optimize": self.optimize, "progressive": self.progressive}
            if self.subsampling is not None:
                params["subsampling"] = self.subsampling
            self._flatten(image).save(buf, format="JPEG", **params)
        elif self.format == "WEBP":
            image.save(buf, format="WEBP", quality=to_pillow_quality(quality), method=4)
        else:
            self._png_mode(image).save(buf, format="PNG", optimize=self.optimize)
        return buf.getvalue()

    @staticmethod
    def _png_mode(image: Image.Image) -> Image.Image:
        # PNG cannot store CMYK, YCbCr, LAB, HSV or float modes
        if image.mode in PNG_MODES:
            return image
        return image.convert("RGBA" if image.has_transparency_data else "RGB")

    def _flatten(self, image: Image.Image) -> Image.Image:
        # JPEG has no alpha channel
        if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
            rgba = image.convert("RGBA")
            base = Image.new("RGB", rgba.size, self.background)
            base.paste(rgba, mask=rgba.split()[-1])
            return base
        if image.mode not in ("RGB", "L"):
            return image.convert("RGB")
        return image
