"""API middleware for the gallery layout service."""

from gallery_layout.api.middleware.logging import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
]
