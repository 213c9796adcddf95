import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image


REPO_ROOT = Path(__file__).resolve().parent.parent
SRC_ROOT = REPO_ROOT / "src"
sys.path.insert(0, str(SRC_ROOT))

from core.image_handler import ImageHandler, fit_to_width  # noqa: E402


def _create_test_image(path: Path, size=(64, 48), color=(120, 200, 80), mode="RGB") -> Path:
    image = Image.new(mode, size, color)
    image.save(path, format="PNG")
    return path


def test_is_supported_image(tmp_path):
    handler = ImageHandler()
    image_path = _create_test_image(tmp_path / "sample.png")

    assert handler.is_supported_image(str(image_path)) is True
    assert handler.is_supported_image(str(tmp_path / "PHOTO.JPG")) is True
    assert handler.is_supported_image(str(tmp_path / "notes.txt")) is False


def test_load_image_drops_alpha(tmp_path):
    handler = ImageHandler()
    image_path = _create_test_image(
        tmp_path / "alpha.png", size=(30, 20), color=(10, 20, 30, 0), mode="RGBA")

    image = handler.load_image(str(image_path))

    assert image is not None
    assert image.mode == "RGB"
    assert image.size == (30, 20)
    assert image.getpixel((0, 0)) == (10, 20, 30)


def test_load_image_converts_grayscale(tmp_path):
    handler = ImageHandler()
    image_path = _create_test_image(tmp_path / "gray.png", color=77, mode="L")

    image = handler.load_image(str(image_path))

    assert image is not None
    assert image.mode == "RGB"
    assert image.getpixel((5, 5)) == (77, 77, 77)


def test_load_image_failures_return_none(tmp_path):
    handler = ImageHandler()
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"definitely not a png")

    assert handler.load_image(str(broken)) is None
    assert handler.load_image(str(tmp_path / "missing.png")) is None
    assert handler.load_image(str(tmp_path / "notes.txt")) is None


def test_get_image_info(tmp_path):
    handler = ImageHandler()
    image_path = _create_test_image(tmp_path / "meta.png", size=(80, 60))

    info = handler.get_image_info(str(image_path))

    assert info is not None
    assert info["filename"] == "meta.png"
    assert info["width"] == 80
    assert info["height"] == 60
    assert info["format"] == "PNG"
    assert info["file_size"] > 0


def test_to_tensor_shape_and_range():
    handler = ImageHandler()
    rng = np.random.default_rng(0)
    pixels = rng.integers(0, 256, size=(180, 300, 3), dtype=np.uint8)
    image = Image.fromarray(pixels, "RGB")

    tensor = handler.to_tensor(image)

    assert tensor.shape == (1, 3, 224, 224)
    assert tensor.dtype == np.float32
    assert tensor.min() >= 0.0
    assert tensor.max() <= 1.0


def test_to_tensor_divides_samples_by_255():
    handler = ImageHandler(resample="nearest")
    image = Image.new("RGB", (500, 100), (255, 128, 0))

    tensor = handler.to_tensor(image)

    assert np.allclose(tensor[0, 0], 1.0)
    assert np.allclose(tensor[0, 1], 128 / 255.0)
    assert np.allclose(tensor[0, 2], 0.0)


def test_to_tensor_is_channel_major():
    handler = ImageHandler(resample="nearest")
    image = Image.new("RGB", (224, 224), (0, 0, 0))
    # Left half red, top half green
    image.paste((255, 0, 0), (0, 0, 112, 224))
    image.paste((255, 255, 0), (0, 0, 112, 112))
    image.paste((0, 255, 0), (112, 0, 224, 112))

    tensor = handler.to_tensor(image)

    red, green, blue = tensor[0]
    assert np.all(red[:, :112] == 1.0)
    assert np.all(red[:, 112:] == 0.0)
    assert np.all(green[:112, :] == 1.0)
    assert np.all(green[112:, :] == 0.0)
    assert np.all(blue == 0.0)


def test_to_tensor_honours_input_size():
    handler = ImageHandler(input_size=32)
    tensor = handler.to_tensor(Image.new("RGB", (64, 10), (1, 2, 3)))
    assert tensor.shape == (1, 3, 32, 32)


def test_to_tensor_mean_std():
    handler = ImageHandler(resample="nearest", mean=[0.5, 0.5, 0.5], std=[0.25, 0.5, 0.5])
    tensor = handler.to_tensor(Image.new("RGB", (10, 10), (255, 0, 255)))

    assert np.allclose(tensor[0, 0], 2.0)
    assert np.allclose(tensor[0, 1], -1.0)
    assert np.allclose(tensor[0, 2], 1.0)


def test_invalid_options_raise():
    with pytest.raises(ValueError):
        ImageHandler(resample="sinc")
    with pytest.raises(ValueError):
        ImageHandler(mean=[0.5, 0.5, 0.5])
    with pytest.raises(ValueError):
        ImageHandler(mean=[0.5, 0.5], std=[0.2, 0.2])
    with pytest.raises(ValueError):
        ImageHandler(input_size=0)


def test_fit_to_width():
    assert fit_to_width((400, 200), 800) == (800, 400)
    assert fit_to_width((400, 200), 200) == (200, 100)
    assert fit_to_width((100, 400), 300, max_height=600) == (150, 600)
    assert fit_to_width((0, 10), 300) == (1, 1)
    assert fit_to_width((10, 10), 0) == (1, 1)


def test_create_preview(tmp_path):
    handler = ImageHandler()
    image = Image.new("RGB", (120, 90), (5, 5, 5))

    preview = handler.create_preview(image, 240)

    assert preview.size == (240, 180)
    assert image.size == (120, 90)


def test_dialog_filetypes_lists_formats():
    handler = ImageHandler(supported_formats=[".png", ".JPG"])
    filetypes = handler.dialog_filetypes()

    assert filetypes[0] == ("Image files", "*.jpg *.JPG *.png *.PNG")
    assert filetypes[-1] == ("All files", "*.*")


def test_dialog_filetypes_match_uppercase_extensions():
    filetypes = ImageHandler().dialog_filetypes()
    patterns = filetypes[0][1].split()

    assert "*.jpg" in patterns
    assert "*.JPG" in patterns
    assert "*.JPEG" in patterns
