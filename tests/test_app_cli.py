from PIL import Image

from photoshrink.app import EXIT_FAILED, EXIT_OK, EXIT_USAGE, PhotoShrinkApp
from photoshrink.config import Settings


def _run(*argv):
    return PhotoShrinkApp(Settings()).run(list(argv))


def test_resize_command(image_file, tmp_path, capsys):
    out_dir = tmp_path / "out"
    code = _run("resize", str(image_file), "-W", "100", "-s", "20kb", "-o", str(out_dir))
    assert code == EXIT_OK
    with Image.open(out_dir / "photo_resized.jpg") as img:
        assert img.size == (100, 75)
    assert "100x75" in capsys.readouterr().out


def test_resize_webp(image_file, tmp_path):
    code = _run("resize", str(image_file), "-f", "webp", "-o", str(tmp_path))
    assert code == EXIT_OK
    assert (tmp_path / "photo_resized.webp").exists()


def test_invalid_width_is_usage_error(image_file):
    assert _run("resize", str(image_file), "-W", "0") == EXIT_USAGE


def test_bad_size_is_usage_error(image_file):
    assert _run("resize", str(image_file), "-s", "lots") == EXIT_USAGE


def test_missing_file_fails(tmp_path):
    assert _run("resize", str(tmp_path / "nope.png")) == EXIT_FAILED


def test_pdf_command(image_file, tmp_path):
    out = tmp_path / "photos.pdf"
    assert _run("pdf", str(image_file), "-o", str(out), "--margin", "10") == EXIT_OK
    assert out.read_bytes().startswith(b"%PDF")


def test_bad_environment_is_usage_error(monkeypatch):
    monkeypatch.setenv("PHOTOSHRINK_WORKERS", "many")
    assert PhotoShrinkApp().run(["resize", "x.png"]) == EXIT_USAGE
