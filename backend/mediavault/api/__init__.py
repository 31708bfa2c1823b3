"""
API router aggregation.
"""

from fastapi import APIRouter

from mediavault.api.routes import health, studios

# Create main API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(studios.router, prefix="/studios", tags=["studios"])

__all__ = ["api_router"]
