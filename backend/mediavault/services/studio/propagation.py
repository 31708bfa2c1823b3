"""Push a studio's labels onto the scenes it owns."""

import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.core.exceptions import CascadeSideEffectError
from mediavault.models import ItemType, Studio
from mediavault.repositories import (
    LabelledItemRepository,
    SceneRepository,
    labelled_item_repository,
    scene_repository,
)

logger = logging.getLogger(__name__)


class LabelPropagator:
    """Adds labels to every scene currently assigned to a studio."""

    def __init__(
        self,
        scenes: SceneRepository = scene_repository,
        labelled_items: LabelledItemRepository = labelled_item_repository,
    ):
        self.scenes = scenes
        self.labelled_items = labelled_items

    async def push_labels_to_current_scenes(
        self, db: AsyncSession, studio: Studio, label_ids: Sequence[str]
    ) -> int:
        """Add labels to the studio's scenes, keeping their existing labels.

        Args:
            db: Database session
            studio: Studio whose scenes receive the labels
            label_ids: Labels to add; nothing happens when empty

        Returns:
            Number of scenes that gained at least one label

        Raises:
            CascadeSideEffectError: If any scene could not be updated
        """
        if not label_ids:
            return 0

        updated = 0
        try:
            for scene in await self.scenes.find_by_studio(db, studio.id):
                added = await self.labelled_items.add_labels(
                    db, scene.id, ItemType.SCENE, label_ids
                )
                if added:
                    updated += 1
        except Exception as e:
            raise CascadeSideEffectError(
                f"Error while pushing studio '{studio.name}' labels to scenes: {e}",
                stage="propagate",
                studio_id=studio.id,
            ) from e

        logger.info(
            f"Pushed {len(label_ids)} labels of '{studio.name}' to {updated} scenes"
        )
        return updated


# Singleton instance
label_propagator = LabelPropagator()
