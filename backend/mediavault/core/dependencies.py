"""
Dependency injection functions for FastAPI.
"""

from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.core.config import Settings, get_settings
from mediavault.core.database import AsyncSessionLocal
from mediavault.services.search import StudioIndex
from mediavault.services.studio import StudioService

__all__ = [
    "get_db",
    "get_settings",
    "get_studio_index",
    "get_studio_service",
    "Settings",
]


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get database session.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@lru_cache
def get_studio_service() -> StudioService:
    """
    Get the studio service, loading plugins from settings once.

    Returns:
        StudioService: Studio mutation service
    """
    settings = get_settings()
    return StudioService(
        settings, index=StudioIndex(max_results=settings.search.max_results)
    )


def get_studio_index(
    service: StudioService = Depends(get_studio_service),
) -> StudioIndex:
    """Get the search index the studio service writes to."""
    return service.index
