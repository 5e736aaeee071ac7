"""Shared fixtures: in-memory test images and a FastAPI test client."""

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from meme_captioner.main import app


def make_image(width=1200, height=800, color=(0, 0, 0), fmt="PNG", mode="RGB"):
    """Encode a solid-color image with Pillow and return its bytes."""
    fill = color if mode == "RGB" else color + (0,)
    buffer = BytesIO()
    Image.new(mode, (width, height), fill).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_image(fmt="PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image(640, 480, color=(40, 90, 160), fmt="JPEG")


@pytest.fixture
def client():
    app.dependency_overrides.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
