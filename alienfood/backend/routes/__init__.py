"""Backend API Routes Package

This module aggregates all route handlers into a single router
that can be included in the main FastAPI application.
"""

from fastapi import APIRouter

from .admin import router as admin_router
from .push import router as push_router


# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(push_router, prefix="/push", tags=["push"])
api_router.include_router(admin_router, prefix="/admin", tags=["admin"])

__all__ = ["api_router"]
