"""Tests for request/response schemas."""

import pytest
from pydantic import ValidationError

from meme_captioner.schemas.meme import HealthResponse, MemeRequest


def test_meme_request_requires_a_caption():
    with pytest.raises(ValidationError, match="Please provide at least one text field"):
        MemeRequest(image=b"\xff\xd8", top_text="", bottom_text="")


def test_meme_request_requires_image_bytes():
    with pytest.raises(ValidationError):
        MemeRequest(image=b"", top_text="hello")


def test_health_response_defaults():
    assert HealthResponse().model_dump() == {
        "status": "OK",
        "message": "Meme Generator API is running",
    }
