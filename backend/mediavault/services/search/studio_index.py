"""
Studio search index.

Documents are denormalized projections of studios (labels, scene counts)
rebuilt from the store. Mutations call into the index after they persist,
so the index may briefly lag the store but is never the source of truth.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.models import Studio, StudioSearchDocument
from mediavault.repositories import (
    LabelledItemRepository,
    StudioRepository,
    labelled_item_repository,
    studio_repository,
)

logger = logging.getLogger(__name__)


class StudioIndex:
    """Keeps ``studio_search_document`` in step with the studio tables."""

    def __init__(
        self,
        studios: StudioRepository = studio_repository,
        labelled_items: LabelledItemRepository = labelled_item_repository,
        max_results: int = 50,
    ):
        self.studios = studios
        self.labelled_items = labelled_items
        self.max_results = max_results

    async def _project(self, db: AsyncSession, studio: Studio) -> StudioSearchDocument:
        labels = await self.labelled_items.get_labels(db, studio.id)
        return StudioSearchDocument(
            studio_id=studio.id,
            name=studio.name,
            aliases=list(studio.aliases or []),
            label_ids=[label.id for label in labels],
            label_names=[label.name for label in labels],
            parent_id=studio.parent_id,
            favorite=bool(studio.favorite),
            bookmark=studio.bookmark,
            scene_count=await self.studios.count_scenes(db, studio.id),
            custom_fields=dict(studio.custom_fields or {}),
            indexed_at=datetime.now(timezone.utc),
        )

    async def index_studios(self, db: AsyncSession, studios: Iterable[Studio]) -> int:
        """Write index documents for the given studios.

        Returns:
            Number of documents written
        """
        count = 0
        for studio in studios:
            await db.merge(await self._project(db, studio))
            count += 1
        await db.flush()
        logger.debug(f"Indexed {count} studios")
        return count

    async def update_studios(self, db: AsyncSession, studios: Iterable[Studio]) -> int:
        """Reindex studios after a batch mutation."""
        studios = list(studios)
        if not studios:
            return 0
        logger.info(f"Updating {len(studios)} studios in search index")
        return await self.index_studios(db, studios)

    async def index(self, db: AsyncSession, studio_ids: Iterable[str]) -> int:
        """Reindex studios by ID.

        IDs that no longer exist in the store have their documents dropped.
        """
        studio_ids = list(dict.fromkeys(studio_ids))
        studios = await self.studios.get_many(db, studio_ids)
        found = {studio.id for studio in studios}
        missing = [studio_id for studio_id in studio_ids if studio_id not in found]
        if missing:
            await self.remove(db, missing)
        return await self.index_studios(db, studios)

    async def remove(self, db: AsyncSession, studio_ids: Iterable[str]) -> None:
        """Drop the documents of the given studios."""
        studio_ids = list(studio_ids)
        if not studio_ids:
            return
        await db.execute(
            delete(StudioSearchDocument).where(
                StudioSearchDocument.studio_id.in_(studio_ids)
            )
        )
        await db.flush()
        logger.debug(f"Removed {len(studio_ids)} studios from search index")

    async def get_document(
        self, db: AsyncSession, studio_id: str
    ) -> Optional[StudioSearchDocument]:
        """Get the index document of a studio."""
        return await db.get(StudioSearchDocument, studio_id)

    async def search(self, db: AsyncSession, query: str) -> List[StudioSearchDocument]:
        """Find studios whose name, alias or label names contain the query."""
        needle = query.strip().lower()
        result = await db.execute(
            select(StudioSearchDocument).order_by(StudioSearchDocument.name)
        )
        hits = []
        for document in result.scalars().all():
            haystack = [document.name, *document.aliases, *document.label_names]
            if not needle or any(needle in value.lower() for value in haystack):
                hits.append(document)
            if len(hits) >= self.max_results:
                break
        return hits


# Singleton instance
studio_index = StudioIndex()
