"""
Palette Service Configuration
Manages environment variables and defaults for the palette extraction service.
"""
import os
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from a local .env file, if present
load_dotenv()


class Config:
    """Configuration class for the palette extraction service."""

    # Upload limits
    MAX_FILE_MB: int = int(os.environ.get("PALETTE_MAX_FILE_MB", "10"))

    # Downscale ceiling for the longer image edge before sampling
    MAX_EDGE: int = int(os.environ.get("PALETTE_MAX_EDGE", "250"))

    # Requested palette size
    MIN_COLORS: int = 3
    MAX_COLORS: int = 12
    DEFAULT_COLORS: int = int(os.environ.get("PALETTE_DEFAULT_COLORS", "6"))

    # Pixel filter thresholds
    ALPHA_THRESHOLD: int = int(os.environ.get("PALETTE_ALPHA_THRESHOLD", "128"))
    MIN_BRIGHTNESS: float = float(os.environ.get("PALETTE_MIN_BRIGHTNESS", "5"))
    MAX_BRIGHTNESS: float = float(os.environ.get("PALETTE_MAX_BRIGHTNESS", "250"))

    # Logging
    LOG_LEVEL: str = os.environ.get("PALETTE_LOG_LEVEL", "INFO")
    LOG_JSON: bool = bool(int(os.environ.get("PALETTE_LOG_JSON", "0")))

    # Timeouts (milliseconds, 0 disables)
    TIMEOUT_EXTRACTION: int = int(os.environ.get("PALETTE_TIMEOUT_EXTRACTION", "0"))

    # Swatch rendering
    SWATCH_CHIP_SIZE: int = int(os.environ.get("PALETTE_SWATCH_CHIP_SIZE", "64"))

    # Observability
    METRICS_ENABLED: bool = bool(int(os.environ.get("PALETTE_METRICS_ENABLED", "1")))

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get("PALETTE_ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000")
    API_TITLE: Optional[str] = os.environ.get("PALETTE_API_TITLE")

    # Supported image formats
    SUPPORTED_MIME_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp", "image/bmp"]
    SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp"}

    @classmethod
    def validate_chip_size(cls, chip_size: int) -> bool:
        """Validate swatch chip size."""
        return 8 <= chip_size <= 256

    @classmethod
    def allowed_origins(cls) -> list:
        """Parse the comma-separated CORS origin list."""
        return [origin.strip() for origin in cls.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Global config instance
config = Config()
