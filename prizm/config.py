"""
Prizm Configuration
Manages environment variables and defaults for the color service.
"""
import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Configuration class for Prizm services."""

    # Logging
    LOG_LEVEL: str = os.environ.get("PRIZM_LOG_LEVEL", "INFO")

    # Remote page fetching
    FETCH_TIMEOUT: float = float(os.environ.get("PRIZM_FETCH_TIMEOUT", "10"))
    FETCH_MAX_ATTEMPTS: int = int(os.environ.get("PRIZM_FETCH_MAX_ATTEMPTS", "3"))
    CORS_PROXIES: str = os.environ.get(
        "PRIZM_CORS_PROXIES",
        "https://corsproxy.io/?,https://api.allorigins.win/raw?url=",
    )

    # Extraction
    EXTRACT_LIMIT: int = int(os.environ.get("PRIZM_EXTRACT_LIMIT", "12"))

    # Image uploads
    MAX_FILE_MB: int = int(os.environ.get("PRIZM_MAX_FILE_MB", "10"))
    IMAGE_MAX_EDGE: int = int(os.environ.get("PRIZM_IMAGE_MAX_EDGE", "256"))
    IMAGE_PALETTE_SIZE: int = int(os.environ.get("PRIZM_IMAGE_PALETTE_SIZE", "16"))

    # Working palettes
    MAX_SESSIONS: int = int(os.environ.get("PRIZM_MAX_SESSIONS", "1000"))

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get("PRIZM_ALLOWED_ORIGINS", "http://localhost:3000")

    # Observability
    METRICS_ENABLED: bool = bool(int(os.environ.get("PRIZM_METRICS_ENABLED", "1")))

    # Supported upload formats
    SUPPORTED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp", "image/gif"]

    @classmethod
    def proxy_list(cls) -> List[str]:
        """Return configured CORS proxy prefixes in attempt order."""
        return [p.strip() for p in cls.CORS_PROXIES.split(",") if p.strip()]

    @classmethod
    def allowed_origins(cls) -> List[str]:
        """Return configured CORS origins."""
        return [o.strip() for o in cls.ALLOWED_ORIGINS.split(",") if o.strip()]

    @classmethod
    def validate_palette_size(cls, size: int) -> bool:
        """Validate image quantization palette size."""
        return 2 <= size <= 256


# Global config instance
config = Config()
