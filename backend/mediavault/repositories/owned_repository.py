"""Repositories for entities that may be owned by a studio."""

import logging
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.models import Image, Movie, Scene

logger = logging.getLogger(__name__)

T = TypeVar("T", Scene, Movie, Image)


class StudioOwnedRepository(Generic[T]):
    """Shared operations for scenes, movies and images."""

    def __init__(self, model: Type[T]):
        self.model = model

    async def get_by_id(self, db: AsyncSession, entity_id: str) -> Optional[T]:
        """Get an entity by ID."""
        return await db.get(self.model, entity_id)

    async def upsert(self, db: AsyncSession, entity: T) -> T:
        """Insert or update an entity and flush it."""
        db.add(entity)
        await db.flush()
        return entity

    async def find_by_studio(self, db: AsyncSession, studio_id: str) -> List[T]:
        """Get every entity owned by a studio."""
        stmt = select(self.model).where(self.model.studio_id == studio_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def clear_studio(self, db: AsyncSession, studio_id: str) -> List[str]:
        """Remove a studio reference from every entity that holds it.

        Returns:
            IDs of the entities that were detached
        """
        result = await db.execute(
            select(self.model.id).where(self.model.studio_id == studio_id)
        )
        entity_ids = list(result.scalars().all())
        if entity_ids:
            await db.execute(
                update(self.model)
                .where(self.model.studio_id == studio_id)
                .values(studio_id=None)
            )
            await db.flush()
        logger.debug(
            f"Detached {len(entity_ids)} {self.model.__tablename__} rows "
            f"from studio {studio_id}"
        )
        return entity_ids


class SceneRepository(StudioOwnedRepository[Scene]):
    """Repository for scene database operations."""

    def __init__(self) -> None:
        super().__init__(Scene)

    async def find_unmatched(self, db: AsyncSession) -> List[Scene]:
        """Get every scene without a studio."""
        stmt = select(Scene).where(Scene.studio_id.is_(None)).order_by(Scene.name)
        result = await db.execute(stmt)
        return list(result.scalars().all())


# Singleton instances
scene_repository = SceneRepository()
movie_repository: StudioOwnedRepository[Movie] = StudioOwnedRepository(Movie)
image_repository: StudioOwnedRepository[Image] = StudioOwnedRepository(Image)
