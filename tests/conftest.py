from __future__ import annotations

from typing import Callable, List

import numpy as np
import pytest
from PIL import Image

from photoshrink.models.image_model import RasterImage


class ScriptedEncoder:
    """Fake encoder: output size is a function of quality; records every call."""
    format = "JPEG"

    def __init__(self, size_for: Callable[[float], int]) -> None:
        self._size_for = size_for
        self.calls: List[float] = []

    def encode(self, image: Image.Image, quality: float) -> bytes:
        self.calls.append(quality)
        return b"x" * self._size_for(quality)


def noisy_image(width: int = 256, height: int = 192, seed: int = 7) -> Image.Image:
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    return Image.fromarray(pixels)


@pytest.fixture(name="noisy_image")
def noisy_image_factory() -> Callable[..., Image.Image]:
    return noisy_image


@pytest.fixture
def scripted_encoder() -> Callable[[Callable[[float], int]], ScriptedEncoder]:
    return ScriptedEncoder


@pytest.fixture
def raster() -> RasterImage:
    return RasterImage.from_pil(noisy_image())


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "photo.png"
    noisy_image(320, 240).save(path, format="PNG")
    return path
