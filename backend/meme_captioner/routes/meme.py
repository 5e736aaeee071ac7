"""
Meme generation API routes.

This module defines the REST API endpoints:
1. POST /api/generate-meme - upload an image, receive it back captioned as JPEG
2. GET /api/health - liveness check
"""

import logging
from typing import Annotated, Union

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile

from meme_captioner.schemas.meme import ErrorResponse, HealthResponse, MemeRequest
from meme_captioner.services.compositor import (
    CompositionError,
    MemeCompositor,
    get_compositor,
)
from meme_captioner.services.uploads import (
    UploadValidationError,
    UploadValidator,
    get_upload_validator,
)

# Configure logging
logger = logging.getLogger(__name__)

# Create router with prefix and tags
router = APIRouter(
    prefix="/api",
    tags=["meme"],
)

GENERATION_FAILED_MESSAGE = "Failed to generate meme"


@router.post(
    "/generate-meme",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    responses={
        200: {
            "description": "The captioned meme as a JPEG image",
            "content": {"image/jpeg": {}},
        },
        400: {
            "description": "Missing image, wrong file type, or no caption",
            "model": ErrorResponse,
        },
        413: {
            "description": "Uploaded image exceeds the size limit",
            "model": ErrorResponse,
        },
        500: {
            "description": "The image could not be processed",
            "model": ErrorResponse,
        },
    },
    summary="Generate a meme",
    description="""
    Overlay top and bottom captions on an uploaded image.

    Accepts a multipart form with an `image` (JPEG, PNG or WebP, up to 10MB)
    and optional `topText` / `bottomText` fields. At least one caption is
    required. Captions are rendered uppercase, centered, white with a black
    outline, and the result is returned as a JPEG.
    """,
)
async def generate_meme(
    validator: Annotated[UploadValidator, Depends(get_upload_validator)],
    compositor: Annotated[MemeCompositor, Depends(get_compositor)],
    image: Annotated[Union[UploadFile, str, None], File()] = None,
    top_text: Annotated[str, Form(alias="topText")] = "",
    bottom_text: Annotated[str, Form(alias="bottomText")] = "",
) -> Response:
    """
    Generate a captioned meme from an uploaded image.

    Args:
        validator: Injected upload validator
        compositor: Injected meme compositor
        image: The uploaded image file (a plain text part is treated as missing)
        top_text: Caption for the top of the image
        bottom_text: Caption for the bottom of the image

    Returns:
        Response: Raw JPEG bytes with Content-Type image/jpeg

    Raises:
        HTTPException: On validation or composition errors
    """
    # ==========================================================================
    # STEP 1: Validate the upload and captions
    # ==========================================================================
    try:
        image_bytes = await validator.read_image(image)
        validator.check_captions(top_text, bottom_text)
    except UploadValidationError as e:
        logger.info(f"Rejected meme request: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    finally:
        if isinstance(image, StarletteUploadFile):
            await image.close()

    request = MemeRequest(image=image_bytes, top_text=top_text, bottom_text=bottom_text)
    logger.info(
        f"Received meme generation request. "
        f"Image: {len(request.image)} bytes, "
        f"top: {len(request.top_text)} chars, bottom: {len(request.bottom_text)} chars"
    )

    # ==========================================================================
    # STEP 2: Composite captions off the event loop
    # ==========================================================================
    try:
        meme = await run_in_threadpool(compositor.compose_request, request)
    except CompositionError as e:
        logger.error(f"Error generating meme: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERATION_FAILED_MESSAGE,
        )

    return Response(content=meme, media_type="image/jpeg")


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Check if the backend service is running.",
)
async def health_check() -> HealthResponse:
    """
    Simple health check endpoint.

    Returns:
        HealthResponse: Health status
    """
    return HealthResponse()
