"""API routes for the gallery layout service."""

from fastapi import APIRouter

from gallery_layout.api.routes.health import router as health_router
from gallery_layout.api.routes.layout import router as layout_router

# Main API router
api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(layout_router, prefix="/layout", tags=["Layout"])

__all__ = ["api_router"]
