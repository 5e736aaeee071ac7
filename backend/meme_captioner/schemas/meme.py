"""
Meme generation schemas.

This module contains the Pydantic models for request/response validation
of the meme captioning endpoints.
"""

from pydantic import BaseModel, Field, model_validator


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class MemeRequest(BaseModel):
    """
    A validated meme generation request.

    Built by the route once the multipart upload has passed type and size
    checks. Lives only for the duration of one request.
    """

    image: bytes = Field(
        ...,
        min_length=1,
        description="Raw bytes of the uploaded JPEG/PNG/WebP image",
    )

    top_text: str = Field(
        "",
        description="Caption rendered at the top of the image",
    )

    bottom_text: str = Field(
        "",
        description="Caption rendered at the bottom of the image",
    )

    @model_validator(mode="after")
    def require_caption(self) -> "MemeRequest":
        """Ensure at least one caption is present."""
        if not self.top_text and not self.bottom_text:
            raise ValueError("Please provide at least one text field")
        return self


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class HealthResponse(BaseModel):
    """Liveness response returned by the health endpoint."""

    status: str = Field("OK", description="Service status")
    message: str = Field(
        "Meme Generator API is running",
        description="Human-readable status message",
    )


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str = Field(..., description="Human-readable error message")
