"""
config.py — Environment configuration for the API.

Settings are read once from environment variables (and an optional .env
file at the repository root) and cached.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path


# Load .env file if it exists
def _load_dotenv():
    env_path = Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()
                    if key and value and key not in os.environ:
                        os.environ[key] = value

_load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        # App
        self.app_name: str = os.environ.get("APP_NAME", "Gallery Layout Service")
        self.app_version: str = os.environ.get("APP_VERSION", "1.0.0")
        self.environment: str = os.environ.get("ENVIRONMENT", "development")
        self.debug: bool = _env_bool("DEBUG", "false")
        self.log_level: str = os.environ.get("LOG_LEVEL", "INFO").upper()
        self.api_prefix: str = os.environ.get("API_PREFIX", "/api/v1")

        # Server settings
        self.host: str = os.environ.get("HOST", "0.0.0.0")
        self.port: int = int(os.environ.get("PORT", "8000"))

        # CORS settings
        self.allowed_origins: list = os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000"
        ).split(",")

        # Wide image classification
        self.wide_threshold: float = float(os.environ.get("WIDE_THRESHOLD", str(16 / 9)))
        self.wide_band_tolerance: float = float(os.environ.get("WIDE_BAND_TOLERANCE", "0.08"))
        self.wide_near_tolerance: float = float(os.environ.get("WIDE_NEAR_TOLERANCE", "0.1"))

        # Ordering
        self.max_wide_streak: int = int(os.environ.get("MAX_WIDE_STREAK", "1"))
        self.balance_wide: bool = _env_bool("BALANCE_WIDE", "true")
        self.ordering_container_width: float = float(os.environ.get("ORDERING_CONTAINER_WIDTH", "1200"))
        self.ordering_gap: float = float(os.environ.get("ORDERING_GAP", "16"))

        # Ordering cache
        self.cache_backend: str = os.environ.get("CACHE_BACKEND", "memory").lower()
        self.redis_url: str = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
        self.cache_prefix: str = os.environ.get("CACHE_PREFIX", "gallery-layout:")
        self.ordering_cache_ttl_seconds: int = int(os.environ.get("ORDERING_CACHE_TTL_SECONDS", "0"))

        # Placement
        self.strict_dimensions: bool = _env_bool("STRICT_DIMENSIONS", "false")

        # Responsive breakpoints
        self.mobile_breakpoint: int = int(os.environ.get("MOBILE_BREAKPOINT", "768"))
        self.tablet_breakpoint: int = int(os.environ.get("TABLET_BREAKPOINT", "1024"))
        self.mobile_columns: int = int(os.environ.get("MOBILE_COLUMNS", "2"))
        self.tablet_columns: int = int(os.environ.get("TABLET_COLUMNS", "3"))
        self.desktop_columns: int = int(os.environ.get("DESKTOP_COLUMNS", "4"))

    @property
    def uses_redis(self) -> bool:
        """Check if orderings are shared through Redis."""
        return self.cache_backend == "redis"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Set up root logging from LOG_LEVEL."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
