"""
Upload form controller.

Holds the state of the meme form (selected image, captions, preview and
result references, loading flag, error message) and exposes explicit
setters for each user action. Any field change clears the previous error;
picking a new image also drops the previous result.
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Dict, Literal, Optional, Union

from pydantic import BaseModel

from meme_captioner.client.api import (
    FormValidationError,
    MemeApiClient,
    MemeClientError,
    SelectedImage,
)

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "Please select an image"
NO_TEXT_MESSAGE = "Please enter at least one text field"

CaptionField = Literal["top_text", "bottom_text"]


class ObjectURLStore:
    """
    In-memory registry of blob URLs.

    Each URL points at a byte buffer until it is revoked.
    """

    def __init__(self):
        self._blobs: Dict[str, bytes] = {}

    def create(self, data: bytes) -> str:
        url = f"blob:{uuid.uuid4()}"
        self._blobs[url] = data
        return url

    def resolve(self, url: str) -> Optional[bytes]:
        return self._blobs.get(url)

    def revoke(self, url: Optional[str]) -> None:
        if url:
            self._blobs.pop(url, None)

    def __len__(self) -> int:
        return len(self._blobs)


class MemeFormState(BaseModel):
    """Mutable state of the upload form."""

    image: Optional[SelectedImage] = None
    top_text: str = ""
    bottom_text: str = ""
    preview_url: str = ""
    generated_meme_url: str = ""
    is_loading: bool = False
    error: str = ""


class MemeForm:
    """
    Controller for the meme upload form.

    Only one generate request may be in flight; submitting while loading
    is refused, mirroring a disabled submit button.
    """

    def __init__(
        self,
        api_client: Optional[MemeApiClient] = None,
        urls: Optional[ObjectURLStore] = None,
    ):
        self.api_client = api_client or MemeApiClient()
        self.urls = urls or ObjectURLStore()
        self.state = MemeFormState()

    @property
    def can_submit(self) -> bool:
        return self.state.image is not None and not self.state.is_loading

    @property
    def displayed_url(self) -> str:
        """The generated meme once available, otherwise the local preview."""
        return self.state.generated_meme_url or self.state.preview_url

    def select_image(self, image: Optional[SelectedImage]) -> None:
        """Hold a newly picked image and show its local preview."""
        if image is None:
            return
        self.urls.revoke(self.state.preview_url)
        self.urls.revoke(self.state.generated_meme_url)
        self.state.image = image
        self.state.preview_url = self.urls.create(image.data)
        self.state.generated_meme_url = ""
        self.state.error = ""

    def set_text(self, field: CaptionField, value: str) -> None:
        """Update one caption field."""
        if field not in ("top_text", "bottom_text"):
            raise ValueError(f"Unknown caption field: {field}")
        setattr(self.state, field, value)
        self.state.error = ""

    async def submit(self) -> Optional[str]:
        """
        Validate the form and ask the backend for the meme.

        Returns:
            The object URL of the generated meme, or None if the submit
            failed or was refused. Failures are reported through
            ``state.error``.
        """
        if self.state.is_loading:
            logger.debug("Submit ignored: a request is already in flight")
            return None

        try:
            self._validate()
        except FormValidationError as e:
            self.state.error = e.message
            return None

        self.state.is_loading = True
        self.state.error = ""
        result_url = None

        try:
            meme = await self.api_client.generate_meme(
                self.state.image,
                self.state.top_text,
                self.state.bottom_text,
            )
            self.urls.revoke(self.state.generated_meme_url)
            result_url = self.urls.create(meme)
            self.state.generated_meme_url = result_url
        except MemeClientError as e:
            logger.error(f"Error: {e}")
            self.state.error = e.message
        finally:
            self.state.is_loading = False

        return result_url

    def _validate(self) -> None:
        if self.state.image is None:
            raise FormValidationError(NO_IMAGE_MESSAGE)
        if not self.state.top_text and not self.state.bottom_text:
            raise FormValidationError(NO_TEXT_MESSAGE)

    def reset(self) -> None:
        """Clear the form and release both object URLs."""
        self.urls.revoke(self.state.preview_url)
        self.urls.revoke(self.state.generated_meme_url)
        self.state = MemeFormState()

    def download(self, directory: Union[str, Path] = ".") -> Optional[Path]:
        """
        Save the generated meme as meme-<timestamp>.jpg.

        Returns:
            The written path, or None when nothing has been generated yet
        """
        data = self.urls.resolve(self.state.generated_meme_url) if self.state.generated_meme_url else None
        if data is None:
            return None

        path = Path(directory) / f"meme-{int(time.time() * 1000)}.jpg"
        path.write_bytes(data)
        logger.info(f"Saved meme to {path}")
        return path
