"""Repository for Studio database operations."""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.models import Scene, Studio

logger = logging.getLogger(__name__)


class StudioRepository:
    """Repository class for Studio database operations."""

    async def get_by_id(self, db: AsyncSession, studio_id: str) -> Optional[Studio]:
        """Get a studio by ID.

        Args:
            db: Database session
            studio_id: Studio ID

        Returns:
            Studio if found, None otherwise
        """
        return await db.get(Studio, studio_id)

    async def get_many(self, db: AsyncSession, studio_ids: List[str]) -> List[Studio]:
        """Get every existing studio among the given IDs."""
        if not studio_ids:
            return []
        stmt = select(Studio).where(Studio.id.in_(studio_ids))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def find_by_name(self, db: AsyncSession, name: str) -> Optional[Studio]:
        """Find a studio by name, ignoring case.

        Args:
            db: Database session
            name: Studio name to search for

        Returns:
            First matching studio, None if there is none
        """
        stmt = select(Studio).where(func.lower(Studio.name) == name.strip().lower())
        result = await db.execute(stmt)
        return result.scalars().first()

    async def upsert(self, db: AsyncSession, studio: Studio) -> Studio:
        """Insert or update a studio and flush it to the database."""
        db.add(studio)
        await db.flush()
        logger.debug(f"Upserted studio '{studio.name}' with id: {studio.id}")
        return studio

    async def remove(self, db: AsyncSession, studio_id: str) -> None:
        """Delete a studio record."""
        await db.execute(delete(Studio).where(Studio.id == studio_id))
        await db.flush()
        logger.debug(f"Removed studio {studio_id}")

    async def clear_parent(self, db: AsyncSession, parent_id: str) -> List[str]:
        """Detach every child studio from the given parent.

        Returns:
            IDs of the studios that were detached
        """
        result = await db.execute(
            select(Studio.id).where(Studio.parent_id == parent_id)
        )
        child_ids = list(result.scalars().all())
        if child_ids:
            await db.execute(
                update(Studio)
                .where(Studio.parent_id == parent_id)
                .values(parent_id=None)
            )
            await db.flush()
        return child_ids

    async def count_scenes(self, db: AsyncSession, studio_id: str) -> int:
        """Count the scenes owned by a studio."""
        stmt = select(func.count(Scene.id)).where(Scene.studio_id == studio_id)
        result = await db.execute(stmt)
        return int(result.scalar_one())


# Singleton instance
studio_repository = StudioRepository()
