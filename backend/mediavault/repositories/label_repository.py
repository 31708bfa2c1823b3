"""Repository for Label database operations."""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.models import Label

logger = logging.getLogger(__name__)


class LabelRepository:
    """Repository class for Label database operations."""

    async def get_by_id(self, db: AsyncSession, label_id: str) -> Optional[Label]:
        """Find a label by ID.

        Args:
            db: Database session
            label_id: Label ID to search for

        Returns:
            Label object if found, None otherwise
        """
        return await db.get(Label, label_id)

    async def get_many(self, db: AsyncSession, label_ids: List[str]) -> List[Label]:
        """Get every existing label among the given IDs."""
        if not label_ids:
            return []
        result = await db.execute(select(Label).where(Label.id.in_(label_ids)))
        return list(result.scalars().all())

    async def find_by_name(self, db: AsyncSession, name: str) -> Optional[Label]:
        """Find a label by name or alias, ignoring case.

        Args:
            db: Database session
            name: Label name to search for

        Returns:
            Label object if found, None otherwise
        """
        wanted = name.strip().lower()
        stmt = select(Label).where(func.lower(Label.name) == wanted)
        result = await db.execute(stmt)
        label = result.scalars().first()
        if label:
            return label

        # Aliases are a JSON list, so they are checked in Python
        result = await db.execute(select(Label))
        for candidate in result.scalars().all():
            if any(alias.lower() == wanted for alias in candidate.aliases or []):
                logger.debug(f"Label '{name}' matched alias of '{candidate.name}'")
                return candidate

        logger.debug(f"Label '{name}' not found")
        return None

    async def create(self, db: AsyncSession, name: str) -> Label:
        """Create a new label with the given name."""
        label = Label(name=name.strip())
        db.add(label)
        await db.flush()
        logger.info(f"Created label '{label.name}' with id: {label.id}")
        return label


# Singleton instance
label_repository = LabelRepository()
