"""
API test suite.

Covers the health endpoint, the generate endpoint's happy path and every
rejection path of the upload contract.
"""

from io import BytesIO

import pytest
from PIL import Image

from meme_captioner.config import Settings
from meme_captioner.main import app
from meme_captioner.services.compositor import CompositionError, get_compositor
from meme_captioner.services.uploads import UploadValidator, format_size, get_upload_validator

from conftest import make_image


class RecordingCompositor:
    """Stands in for the compositor and records whether it was reached."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def compose_request(self, request):
        self.calls.append(request)
        if self.error:
            raise self.error
        return b"\xff\xd8fake-jpeg\xff\xd9"


@pytest.fixture
def recording_compositor():
    compositor = RecordingCompositor()
    app.dependency_overrides[get_compositor] = lambda: compositor
    return compositor


def upload(data, content_type="image/png", name="cat.png"):
    return {"image": (name, data, content_type)}


class TestHealthEndpoints:
    def test_health_check(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "OK", "message": "Meme Generator API is running"}

    def test_root_endpoint(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["health"] == "/api/health"

    def test_unknown_route_uses_error_shape(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert "error" in response.json()


class TestGenerateMeme:
    def test_returns_captioned_jpeg(self, client, png_bytes):
        response = client.post(
            "/api/generate-meme",
            files=upload(png_bytes),
            data={"topText": "hello", "bottomText": "world"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        image = Image.open(BytesIO(response.content))
        assert image.format == "JPEG"
        assert image.size == (1200, 800)

    @pytest.mark.parametrize("content_type", ["image/jpeg", "image/jpg", "image/webp", "image/png"])
    def test_accepts_allowed_types(self, client, recording_compositor, jpeg_bytes, content_type):
        response = client.post(
            "/api/generate-meme",
            files=upload(jpeg_bytes, content_type=content_type),
            data={"topText": "hello"},
        )

        assert response.status_code == 200
        assert len(recording_compositor.calls) == 1

    def test_single_caption_is_enough(self, client, recording_compositor, jpeg_bytes):
        response = client.post(
            "/api/generate-meme",
            files=upload(jpeg_bytes, "image/jpeg", "cat.jpg"),
            data={"bottomText": "only bottom"},
        )

        assert response.status_code == 200
        request = recording_compositor.calls[0]
        assert request.top_text == ""
        assert request.bottom_text == "only bottom"
        assert request.image == jpeg_bytes

    def test_special_characters_in_captions(self, client, jpeg_bytes):
        response = client.post(
            "/api/generate-meme",
            files=upload(jpeg_bytes, "image/jpeg", "cat.jpg"),
            data={"topText": "<svg onload=x>", "bottomText": "\"Q&A\" isn't </text>"},
        )

        assert response.status_code == 200
        assert Image.open(BytesIO(response.content)).size == (640, 480)


class TestGenerateMemeErrors:
    def test_missing_image(self, client, recording_compositor):
        response = client.post("/api/generate-meme", data={"topText": "hello"})

        assert response.status_code == 400
        assert response.json() == {"error": "No image file provided"}
        assert recording_compositor.calls == []

    def test_image_sent_as_text_field(self, client, recording_compositor):
        response = client.post(
            "/api/generate-meme",
            data={"image": "cat.png", "topText": "hello"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "No image file provided"}
        assert recording_compositor.calls == []

    def test_both_captions_empty(self, client, recording_compositor, png_bytes):
        response = client.post(
            "/api/generate-meme",
            files=upload(png_bytes),
            data={"topText": "", "bottomText": ""},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Please provide at least one text field"}
        assert recording_compositor.calls == []

    def test_captions_omitted(self, client, png_bytes):
        response = client.post("/api/generate-meme", files=upload(png_bytes))

        assert response.status_code == 400
        assert response.json() == {"error": "Please provide at least one text field"}

    def test_gif_rejected_before_compositor(self, client, recording_compositor):
        gif = make_image(50, 50, fmt="GIF")
        response = client.post(
            "/api/generate-meme",
            files=upload(gif, "image/gif", "cat.gif"),
            data={"topText": "hello"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid file type. Only JPEG, PNG, and WebP are allowed."}
        assert recording_compositor.calls == []

    def test_oversized_upload(self, client, recording_compositor, png_bytes):
        app.dependency_overrides[get_upload_validator] = lambda: UploadValidator(
            Settings(MAX_UPLOAD_BYTES=1024)
        )
        response = client.post(
            "/api/generate-meme",
            files=upload(b"\x89PNG" + b"\x00" * 2048),
            data={"topText": "hello"},
        )

        assert response.status_code == 413
        assert response.json() == {"error": "File too large. Maximum size is 1024 bytes."}
        assert recording_compositor.calls == []

    def test_caption_too_long(self, client, recording_compositor, png_bytes):
        response = client.post(
            "/api/generate-meme",
            files=upload(png_bytes),
            data={"topText": "x" * 101},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Text fields must be at most 100 characters"}

    def test_caption_at_limit_accepted(self, client, recording_compositor, png_bytes):
        response = client.post(
            "/api/generate-meme",
            files=upload(png_bytes),
            data={"topText": "x" * 100},
        )

        assert response.status_code == 200

    def test_corrupt_image_is_opaque_500(self, client):
        response = client.post(
            "/api/generate-meme",
            files=upload(b"not really a png"),
            data={"topText": "hello"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate meme"}

    def test_composition_error_detail_not_leaked(self, client):
        compositor = RecordingCompositor(error=CompositionError("libjpeg exploded at 0xdeadbeef"))
        app.dependency_overrides[get_compositor] = lambda: compositor

        response = client.post(
            "/api/generate-meme",
            files=upload(make_image(10, 10)),
            data={"topText": "hello"},
        )

        assert response.status_code == 500
        assert "deadbeef" not in response.text


class TestUploadLimits:
    @pytest.mark.parametrize(
        "limit, expected",
        [
            (10 * 1024 * 1024, "10MB"),
            (1024 * 1024, "1MB"),
            (1024, "1024 bytes"),
            (1536 * 1024, "1572864 bytes"),
        ],
    )
    def test_format_size(self, limit, expected):
        assert format_size(limit) == expected
