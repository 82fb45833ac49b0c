from PIL import Image

from photoshrink.controllers.app_controller import AppController
from photoshrink.models.spec_model import CompressionSpec, ResizeSpec
from photoshrink.services.compress_service import SizeConstrainedEncoder
from photoshrink.services.encoder import PillowEncoder


def test_process_file_writes_resized_output(image_file, tmp_path):
    out_dir = tmp_path / "out"
    seen = []
    controller = AppController(on_progress=lambda src, attempt: seen.append((src, attempt.quality)))
    dest, result = controller.process_file(
        image_file, ResizeSpec(target_width=160), CompressionSpec(target_size_bytes=30 * 1024), out_dir=out_dir
    )
    assert dest == out_dir / "photo_resized.jpg"
    assert dest.read_bytes() == result.data
    with Image.open(dest) as img:
        assert img.size == (160, 120)
    assert seen and all(src == image_file for src, _ in seen)
    assert len(seen) == result.attempts


def test_output_extension_follows_format(image_file):
    controller = AppController(encoder=SizeConstrainedEncoder(PillowEncoder("PNG")))
    dest, _ = controller.process_file(image_file, ResizeSpec(), CompressionSpec())
    assert dest == image_file.parent / "photo_resized.png"
    assert dest.exists()


def test_batch_collects_failures(image_file, tmp_path):
    broken = tmp_path / "broken.jpg"
    broken.write_bytes(b"not an image")
    missing = tmp_path / "missing.png"

    report = AppController().process_batch(
        [image_file, broken, missing], ResizeSpec(target_height=60), CompressionSpec(), out_dir=tmp_path / "out", workers=2
    )
    assert not report.ok
    assert set(report.failures) == {broken, missing}
    assert report.results[image_file].height == 60


def test_make_pdf(image_file, tmp_path):
    dest = AppController().make_pdf([image_file, image_file], tmp_path / "pdf" / "album.pdf")
    assert dest.read_bytes().startswith(b"%PDF")


def test_batch_records_oversized_image_as_failure(image_file, tmp_path, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    report = AppController().process_batch([image_file], ResizeSpec(), CompressionSpec(), out_dir=tmp_path, workers=1)
    assert list(report.failures) == [image_file]
    assert not report.results
