"""
Configuration module for the Meme Captioner.

This module handles all environment variable loading and configuration settings.
Server limits, rendering constants and client endpoints are configured here.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every value can be overridden via environment variables or a .env file.
    """

    # ==========================================================================
    # APPLICATION SETTINGS
    # ==========================================================================

    APP_NAME: str = "Meme Generator API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # ==========================================================================
    # SERVER SETTINGS
    # ==========================================================================

    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Directory served under /static when it exists
    STATIC_DIR: str = "public"

    # ==========================================================================
    # UPLOAD LIMITS
    # ==========================================================================

    # Uploads are buffered in memory, so this cap also bounds memory per request
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    MAX_TEXT_LENGTH: int = 100

    # Comma-separated MIME types accepted for the "image" field
    ALLOWED_IMAGE_TYPES: str = "image/jpeg,image/png,image/jpg,image/webp"

    # ==========================================================================
    # RENDERING SETTINGS
    # ==========================================================================

    JPEG_QUALITY: int = 90

    # Used when the source image metadata does not report a size
    DEFAULT_IMAGE_WIDTH: int = 800
    DEFAULT_IMAGE_HEIGHT: int = 600

    # Comma-separated TrueType candidates, first existing one wins.
    # Pillow's bundled scalable font is used when none is found.
    FONT_PATHS: str = ",".join([
        "/usr/share/fonts/truetype/msttcorefonts/Impact.ttf",
        "C:\\Windows\\Fonts\\impact.ttf",
        "/System/Library/Fonts/Supplemental/Impact.ttf",
        "/System/Library/Fonts/Supplemental/Arial Black.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    ])

    # ==========================================================================
    # CLIENT SETTINGS
    # ==========================================================================

    API_BASE_URL: str = "http://localhost:5000"

    # Timeout for the upload form's generate call (in seconds)
    CLIENT_TIMEOUT: int = 60

    HEALTHCHECK_URL: str = "http://localhost:5000/api/health"
    HEALTHCHECK_TIMEOUT: int = 5

    # ==========================================================================
    # CORS SETTINGS
    # ==========================================================================

    # Example: "https://your-frontend.com,https://www.your-frontend.com"
    CORS_ORIGINS: Optional[str] = "*"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS string into a list."""
        return _split_csv(self.CORS_ORIGINS)

    @property
    def allowed_image_types_list(self) -> list[str]:
        """Parse ALLOWED_IMAGE_TYPES string into a list of lowercase MIME types."""
        return [t.lower() for t in _split_csv(self.ALLOWED_IMAGE_TYPES)]

    @property
    def font_paths_list(self) -> list[str]:
        """Parse FONT_PATHS string into an ordered list of candidates."""
        return _split_csv(self.FONT_PATHS)

    class Config:
        # Load settings from .env file if it exists
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


def _split_csv(value: Optional[str]) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once
    and reused across the application.

    Returns:
        Settings: The application settings instance
    """
    return Settings()
