"""
Meme Generator API client.

This module handles all communication between the upload form and the
backend's generate endpoint. It sends the image and captions as a multipart
request and returns the JPEG bytes of the finished meme.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

import httpx
from pydantic import BaseModel, Field

from meme_captioner.config import Settings, get_settings

# Configure logging
logger = logging.getLogger(__name__)

RETRY_MESSAGE = "Failed to generate meme. Please try again."


class MemeClientError(Exception):
    """Base exception for upload form client errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormValidationError(MemeClientError):
    """Raised when the form is submitted without an image or captions."""
    pass


class GenerationError(MemeClientError):
    """Raised when the API answers with a non-success status."""
    pass


class NetworkError(MemeClientError):
    """Raised when the API cannot be reached."""
    pass


class SelectedImage(BaseModel):
    """An image file picked by the user, held in memory."""

    name: str = Field(..., description="Original file name")
    content_type: str = Field("application/octet-stream", description="MIME type")
    data: bytes = Field(..., description="File contents")

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SelectedImage":
        """Load an image file from disk, guessing its MIME type from the name."""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            content_type=content_type or "application/octet-stream",
            data=path.read_bytes(),
        )


class MemeApiClient:
    """
    Client for the backend's meme generation endpoint.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the API client.

        Args:
            settings: Optional settings instance. If not provided, uses default settings.
            base_url: Overrides API_BASE_URL
            transport: Optional httpx transport, used by tests
        """
        self.settings = settings or get_settings()
        self.base_url = (base_url or self.settings.API_BASE_URL).rstrip("/")
        self._transport = transport

    @property
    def generate_url(self) -> str:
        return f"{self.base_url}/api/generate-meme"

    async def generate_meme(self, image: SelectedImage, top_text: str, bottom_text: str) -> bytes:
        """
        Send an image and captions to the backend.

        Args:
            image: The selected image file
            top_text: Caption for the top of the image
            bottom_text: Caption for the bottom of the image

        Returns:
            JPEG bytes of the generated meme

        Raises:
            NetworkError: If the backend cannot be reached
            GenerationError: If the backend answers with a non-success status
        """
        files = {"image": (image.name, image.data, image.content_type)}
        data = {"topText": top_text, "bottomText": bottom_text}

        logger.info(f"Calling meme API at {self.generate_url}")

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.CLIENT_TIMEOUT,
                transport=self._transport,
            ) as client:
                response = await client.post(self.generate_url, files=files, data=data)

        except httpx.TimeoutException as e:
            logger.error(f"Meme API request timed out: {e}")
            raise NetworkError(RETRY_MESSAGE) from e

        except httpx.HTTPError as e:
            logger.error(f"Failed to connect to meme API: {e}")
            raise NetworkError(RETRY_MESSAGE) from e

        if not response.is_success:
            logger.error(
                f"Meme API returned status {response.status_code}: "
                f"{response.text[:200]}"
            )
            raise GenerationError(RETRY_MESSAGE)

        return response.content
