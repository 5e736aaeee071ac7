# Schemas package - Pydantic models for request/response validation
from meme_captioner.schemas.meme import (
    MemeRequest,
    HealthResponse,
    ErrorResponse,
)

__all__ = [
    "MemeRequest",
    "HealthResponse",
    "ErrorResponse",
]
