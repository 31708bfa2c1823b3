"""Attach scenes without a studio to the studio they belong to."""

import logging
from typing import List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.core.exceptions import CascadeSideEffectError
from mediavault.models import ItemType, Scene, Studio
from mediavault.repositories import (
    LabelledItemRepository,
    SceneRepository,
    labelled_item_repository,
    scene_repository,
)
from mediavault.services.matching.word_matcher import WordMatcher

logger = logging.getLogger(__name__)


class UnmatchedSceneMatcher:
    """Finds unmatched scenes whose path or name mentions a studio."""

    def __init__(
        self,
        word_matcher: WordMatcher,
        scenes: SceneRepository = scene_repository,
        labelled_items: LabelledItemRepository = labelled_item_repository,
    ):
        self.word_matcher = word_matcher
        self.scenes = scenes
        self.labelled_items = labelled_items

    def is_match(self, studio: Studio, scene: Scene) -> bool:
        """Check whether a scene's path or name mentions the studio."""
        names = [studio.name, *(studio.aliases or [])]
        return self.word_matcher.matches_any(names, [scene.path, scene.name])

    async def find_unmatched_scenes(
        self, db: AsyncSession, studio: Studio, label_ids: Sequence[str]
    ) -> List[Scene]:
        """Assign the studio to every unmatched scene that mentions it.

        Args:
            db: Database session
            studio: Studio to attach
            label_ids: Labels to add to each newly matched scene, may be empty

        Returns:
            Scenes that were attached

        Raises:
            CascadeSideEffectError: If reading or updating scenes fails
        """
        try:
            matched = []
            for scene in await self.scenes.find_unmatched(db):
                if not self.is_match(studio, scene):
                    continue

                scene.studio_id = studio.id
                await self.scenes.upsert(db, scene)
                if label_ids:
                    await self.labelled_items.add_labels(
                        db, scene.id, ItemType.SCENE, label_ids
                    )
                matched.append(scene)
        except Exception as e:
            raise CascadeSideEffectError(
                f"Failed to attach studio '{studio.name}' to unmatched scenes: {e}",
                stage="match",
                studio_id=studio.id,
            ) from e

        logger.info(
            f"Attached studio '{studio.name}' to {len(matched)} unmatched scenes"
        )
        return matched
