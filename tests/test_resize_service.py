import pytest
from PIL import Image

from photoshrink.errors import InvalidConfigError, InvalidImageError
from photoshrink.models.image_model import RasterImage
from photoshrink.models.spec_model import ResizeSpec
from photoshrink.services.compress_service import SizeConstrainedEncoder
from photoshrink.services.resize_service import ResizeService


def _blank(width, height):
    return RasterImage.from_pil(Image.new("RGB", (width, height), color=(40, 90, 160)))


def test_width_only_preserves_aspect_ratio():
    resized = SizeConstrainedEncoder().resize(_blank(800, 600), ResizeSpec(target_width=400))
    assert (resized.width, resized.height) == (400, 300)
    assert resized.pil_image.size == (400, 300)


def test_height_only_preserves_aspect_ratio():
    resized = ResizeService().resize(_blank(800, 600), ResizeSpec(target_height=150))
    assert (resized.width, resized.height) == (200, 150)


def test_both_dimensions_are_applied_as_given():
    resized = ResizeService().resize(_blank(800, 600), ResizeSpec(target_width=100, target_height=100))
    assert (resized.width, resized.height) == (100, 100)


def test_no_targets_is_passthrough():
    image = _blank(64, 48)
    assert ResizeService().resize(image, ResizeSpec()) is image


@pytest.mark.parametrize(
    "size,target_width",
    [((800, 600), 333), ((1920, 1080), 1280), ((1000, 3), 7), ((37, 91), 500), ((4032, 3024), 1)],
)
def test_width_only_ratio_within_one_pixel(size, target_width):
    width, height = size
    new_w, new_h = ResizeService().compute_size(width, height, ResizeSpec(target_width=target_width))
    assert new_w == target_width
    assert abs(new_h - height * target_width / width) <= 1


def test_rounding_is_half_up():
    assert ResizeService().compute_size(10, 5, ResizeSpec(target_width=5)) == (5, 3)


def test_derived_dimension_is_at_least_one_pixel():
    assert ResizeService().compute_size(1000, 1, ResizeSpec(target_width=10)) == (10, 1)


def test_source_image_is_not_mutated():
    image = _blank(80, 60)
    ResizeService().resize(image, ResizeSpec(target_width=40))
    assert image.pil_image.size == (80, 60)


def test_zero_dimension_image_is_rejected():
    empty = RasterImage(pil_image=Image.new("RGB", (1, 1)), width=0, height=10, mode="RGB")
    with pytest.raises(InvalidImageError):
        ResizeService().resize(empty, ResizeSpec(target_width=10))
    with pytest.raises(InvalidImageError):
        ResizeService().compute_size(10, 0, ResizeSpec(target_width=10))


def test_none_image_is_rejected():
    with pytest.raises(InvalidImageError):
        ResizeService().resize(None, ResizeSpec())


@pytest.mark.parametrize("kwargs", [{"target_width": 0}, {"target_height": -5}, {"target_width": 10.5}, {"target_width": True}])
def test_invalid_targets(kwargs):
    with pytest.raises(InvalidConfigError):
        ResizeSpec(**kwargs)
