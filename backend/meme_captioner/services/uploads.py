"""
Upload validation service.

Checks the multipart upload before anything reaches the compositor:
MIME type, size and caption presence/length. Every failure carries the
HTTP status and the user-facing message the route returns.
"""

import logging
from typing import Any, Optional

from fastapi import status
from starlette.datastructures import UploadFile

from meme_captioner.config import Settings, get_settings

# Configure logging
logger = logging.getLogger(__name__)

MISSING_IMAGE_MESSAGE = "No image file provided"
MISSING_TEXT_MESSAGE = "Please provide at least one text field"
INVALID_TYPE_MESSAGE = "Invalid file type. Only JPEG, PNG, and WebP are allowed."


def format_size(limit: int) -> str:
    """Describe a byte limit, in whole megabytes when it is a multiple of 1MB."""
    megabyte = 1024 * 1024
    if limit >= megabyte and limit % megabyte == 0:
        return f"{limit // megabyte}MB"
    return f"{limit} bytes"


class UploadError(Exception):
    """Base exception for upload handling errors."""
    pass


class UploadValidationError(UploadError):
    """Raised when the upload or captions fail validation."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UploadValidator:
    """
    Validates uploaded images and captions against the configured limits.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def check_content_type(self, content_type: Optional[str]) -> None:
        """
        Reject anything outside the allowed image MIME types.

        Raises:
            UploadValidationError: If the type is missing or not allowed
        """
        mime = (content_type or "").split(";", 1)[0].strip().lower()
        if mime not in self.settings.allowed_image_types_list:
            logger.warning(f"Rejected upload with content type {content_type!r}")
            raise UploadValidationError(INVALID_TYPE_MESSAGE)

    async def read_image(self, upload: Any) -> bytes:
        """
        Validate and read an uploaded image into memory.

        The multipart parser has already spooled the whole part by the time
        this runs; the read is bounded at one byte over the limit so only that
        much is copied into memory before an oversized upload is rejected.

        Args:
            upload: The multipart "image" field. Anything other than a file
                part (absent, or sent as a plain text field) counts as missing.

        Returns:
            The raw image bytes

        Raises:
            UploadValidationError: If the image is missing, of the wrong type, or too large
        """
        if not isinstance(upload, UploadFile) or not upload.filename:
            raise UploadValidationError(MISSING_IMAGE_MESSAGE)

        self.check_content_type(upload.content_type)

        limit = self.settings.MAX_UPLOAD_BYTES
        data = await upload.read(limit + 1)
        if len(data) > limit:
            logger.warning(f"Rejected upload {upload.filename!r}: larger than {limit} bytes")
            raise UploadValidationError(
                f"File too large. Maximum size is {format_size(limit)}.",
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            )
        if not data:
            raise UploadValidationError(MISSING_IMAGE_MESSAGE)

        logger.info(f"Accepted upload {upload.filename!r} ({upload.content_type}, {len(data)} bytes)")
        return data

    def check_captions(self, top_text: str, bottom_text: str) -> None:
        """
        Require at least one caption and cap their length.

        Raises:
            UploadValidationError: If both captions are empty or one is too long
        """
        if not top_text and not bottom_text:
            raise UploadValidationError(MISSING_TEXT_MESSAGE)

        max_length = self.settings.MAX_TEXT_LENGTH
        if len(top_text) > max_length or len(bottom_text) > max_length:
            raise UploadValidationError(f"Text fields must be at most {max_length} characters")


# Convenience function for dependency injection
def get_upload_validator() -> UploadValidator:
    """Get an UploadValidator instance for dependency injection."""
    return UploadValidator()
