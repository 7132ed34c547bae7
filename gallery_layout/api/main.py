"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gallery_layout.api.config import configure_logging, get_settings
from gallery_layout.api.middleware import LoggingMiddleware
from gallery_layout.api.routes import api_router

settings = get_settings()
configure_logging(settings)

logger = logging.getLogger("gallery_layout.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown events."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}, debug: {settings.debug}")
    logger.info(f"Ordering cache backend: {settings.cache_backend}")

    # Create tables for local development; deployed schemas are migrated
    if settings.environment == "development":
        from gallery_layout.db.base import init_db
        init_db()

    yield

    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Masonry gallery ordering and placement",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        LoggingMiddleware,
        exclude_paths=["/health", "/ready"],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "gallery_layout.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
