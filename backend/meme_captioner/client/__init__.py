# Client package - upload form controller and API client
from meme_captioner.client.api import (
    MemeApiClient,
    MemeClientError,
    FormValidationError,
    GenerationError,
    NetworkError,
    SelectedImage,
)
from meme_captioner.client.form import MemeForm, MemeFormState, ObjectURLStore

__all__ = [
    "MemeApiClient",
    "MemeClientError",
    "FormValidationError",
    "GenerationError",
    "NetworkError",
    "SelectedImage",
    "MemeForm",
    "MemeFormState",
    "ObjectURLStore",
]
