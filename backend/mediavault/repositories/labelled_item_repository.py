"""Repository for label associations."""

import logging
from typing import Iterable, List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.models import ItemType, Label, LabelledItem

logger = logging.getLogger(__name__)


def _unique(label_ids: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(label_ids))


class LabelledItemRepository:
    """Reads and writes the labels carried by studios, scenes, movies and images."""

    async def get_labels(self, db: AsyncSession, item_id: str) -> List[Label]:
        """Get the labels attached to an item, ordered by name."""
        stmt = (
            select(Label)
            .join(LabelledItem, LabelledItem.label_id == Label.id)
            .where(LabelledItem.item_id == item_id)
            .order_by(Label.name)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_label_ids(self, db: AsyncSession, item_id: str) -> List[str]:
        """Get the IDs of the labels attached to an item."""
        return [label.id for label in await self.get_labels(db, item_id)]

    async def set_labels(
        self,
        db: AsyncSession,
        item_id: str,
        item_type: ItemType,
        label_ids: Iterable[str],
    ) -> None:
        """Replace the labels of an item with exactly the given set."""
        await db.execute(delete(LabelledItem).where(LabelledItem.item_id == item_id))
        for label_id in _unique(label_ids):
            db.add(
                LabelledItem(item_id=item_id, item_type=item_type, label_id=label_id)
            )
        await db.flush()

    async def add_labels(
        self,
        db: AsyncSession,
        item_id: str,
        item_type: ItemType,
        label_ids: Iterable[str],
    ) -> List[str]:
        """Attach labels to an item, keeping the ones it already has.

        Returns:
            IDs of the labels that were newly attached
        """
        wanted = _unique(label_ids)
        if not wanted:
            return []

        existing = set(await self.get_label_ids(db, item_id))
        added = [label_id for label_id in wanted if label_id not in existing]
        for label_id in added:
            db.add(
                LabelledItem(item_id=item_id, item_type=item_type, label_id=label_id)
            )
        if added:
            await db.flush()
        return added

    async def remove_by_item(self, db: AsyncSession, item_id: str) -> int:
        """Delete every label association of an item.

        Returns:
            Number of associations removed
        """
        result = await db.execute(
            delete(LabelledItem).where(LabelledItem.item_id == item_id)
        )
        await db.flush()
        removed = result.rowcount or 0
        logger.debug(f"Removed {removed} label associations of item {item_id}")
        return removed


# Singleton instance
labelled_item_repository = LabelledItemRepository()
