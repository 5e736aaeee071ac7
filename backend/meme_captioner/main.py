"""
Meme Captioner Backend - Main Application Entry Point.

This FastAPI application burns top/bottom captions into uploaded images.
It coordinates between:
1. Upload form client - sends an image and two captions
2. Upload validator - enforces file type, size and caption rules
3. Meme compositor - renders the captions with Pillow and returns a JPEG

Nothing is stored: every image lives only for the request that carried it.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from meme_captioner.config import get_settings
from meme_captioner.routes.meme import router as meme_router
from meme_captioner.services.uploads import MISSING_IMAGE_MESSAGE

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

# Configure logging format
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    # Startup
    settings = get_settings()
    logger.info(f"🚀 Starting {settings.APP_NAME} v{settings.APP_VERSION} on port {settings.PORT}")
    logger.info(f"📝 Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"Max upload size: {settings.MAX_UPLOAD_BYTES} bytes")
    logger.info(f"Allowed image types: {settings.allowed_image_types_list}")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Application shutdown")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

# Get settings for app configuration
settings = get_settings()

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
## Meme Generator API

Upload an image, add top and bottom captions, get a JPEG meme back.

### Key Endpoints

- `POST /api/generate-meme` - Caption an uploaded image
- `GET /api/health` - Health check
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE
# =============================================================================

# Add CORS middleware to allow frontend requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as {"error": "<message>"}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as {"error": "<message>"}."""
    errors = exc.errors()
    if any(tuple(error.get("loc", ()))[-1:] == ("image",) for error in errors):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": MISSING_IMAGE_MESSAGE},
        )

    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    logger.info(f"Rejected invalid request to {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": f"Invalid request: {message}"},
    )


# =============================================================================
# ROUTES
# =============================================================================

# Include the meme router
app.include_router(meme_router)


# Root endpoint
@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint - points at the API documentation."""
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/api/health",
    }


# Serve static assets (e.g. a built upload form) when the directory exists
if os.path.isdir(settings.STATIC_DIR):
    app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def run() -> None:
    """Run the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "meme_captioner.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
