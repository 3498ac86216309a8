"""Shared fixtures for the emmm_core test suite."""

import io

import pytest
from PIL import Image


def image_bytes(image: Image.Image, fmt: str) -> bytes:
    out = io.BytesIO()
    image.save(out, format=fmt)
    return out.getvalue()


def noise_image(width: int, height: int) -> Image.Image:
    """RGB noise; compresses badly, so JPEG size tracks pixel count."""
    channels = [Image.effect_noise((width, height), 64) for _ in range(3)]
    return Image.merge("RGB", channels)


@pytest.fixture
def small_png() -> bytes:
    return image_bytes(Image.new("RGB", (32, 24), (200, 30, 30)), "PNG")


@pytest.fixture
def noise_png() -> bytes:
    return image_bytes(noise_image(400, 300), "PNG")


@pytest.fixture
def make_file(tmp_path):
    """Create a file under tmp_path and return its absolute path."""
    def _make(relative: str, content: bytes) -> str:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return str(path)
    return _make
