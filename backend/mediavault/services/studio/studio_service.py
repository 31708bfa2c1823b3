"""
Studio mutations.

Each public method is one mutation: it reads and validates what it needs,
writes the studio, commits, runs the side effects that follow from the
change and finally brings the search index up to date. Side effects
(label propagation, scene matching) are best effort: their failures are
rolled back and logged without undoing the studio write.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.core.config import ApplyStudioLabels, MatchingSettings, Settings
from mediavault.core.exceptions import (
    CascadeSideEffectError,
    HookExecutionError,
    LabelNotFoundError,
    StudioNotFoundError,
    ValidationError,
)
from mediavault.models import ItemType, Label, Studio
from mediavault.repositories import (
    LabelledItemRepository,
    LabelRepository,
    StudioRepository,
    label_repository,
    labelled_item_repository,
    studio_repository,
)
from mediavault.services.labels import labels_equal
from mediavault.services.matching import UnmatchedSceneMatcher, WordMatcher
from mediavault.services.plugins import (
    HookEvent,
    PluginHookRunner,
    PluginRegistry,
    StudioHook,
)
from mediavault.services.search import StudioIndex, studio_index
from mediavault.services.studio.cascade import CascadeDeletionCoordinator
from mediavault.services.studio.models import CustomFieldValue, StudioUpdateOptions
from mediavault.services.studio.propagation import LabelPropagator, label_propagator

logger = logging.getLogger(__name__)


def normalize_custom_fields(
    fields: Mapping[str, Any],
) -> Dict[str, CustomFieldValue]:
    """Normalize custom field values for storage.

    Missing values become an explicit ``None`` so the key is kept, and any
    sequence becomes a list of strings.
    """
    normalized: Dict[str, CustomFieldValue] = {}
    for key, value in fields.items():
        if value is None:
            normalized[key] = None
        elif isinstance(value, (list, tuple, set)):
            normalized[key] = [str(item) for item in value]
        else:
            normalized[key] = value
        logger.debug(f"Set studio custom.{key} to {json.dumps(normalized[key])}")
    return normalized


class StudioService:
    """Create, update, remove and re-run plugins for studios."""

    def __init__(
        self,
        settings: Settings,
        hook: Optional[StudioHook] = None,
        matcher: Optional[UnmatchedSceneMatcher] = None,
        cascade: Optional[CascadeDeletionCoordinator] = None,
        propagator: LabelPropagator = label_propagator,
        index: StudioIndex = studio_index,
        studios: StudioRepository = studio_repository,
        labels: LabelRepository = label_repository,
        labelled_items: LabelledItemRepository = labelled_item_repository,
    ):
        self.settings = settings
        self.hook: StudioHook = hook or PluginHookRunner(
            PluginRegistry.from_settings(settings.plugins),
            create_missing_labels=settings.plugins.create_missing_labels,
        )
        self.matcher = matcher or UnmatchedSceneMatcher(
            WordMatcher(ignore_single_names=settings.matching.ignore_single_names)
        )
        self.cascade = cascade or CascadeDeletionCoordinator()
        self.propagator = propagator
        self.index = index
        self.studios = studios
        self.labels = labels
        self.labelled_items = labelled_items

    async def _labels_to_push(
        self,
        db: AsyncSession,
        studio: Studio,
        matching: MatchingSettings,
        event: ApplyStudioLabels,
    ) -> List[str]:
        if not matching.applies_on(event):
            return []
        return await self.labelled_items.get_label_ids(db, studio.id)

    async def _discard_side_effect(
        self, db: AsyncSession, studios: Iterable[Studio]
    ) -> None:
        """Roll back uncommitted side-effect writes and reload studios."""
        await db.rollback()
        for studio in studios:
            await db.refresh(studio)

    async def _check_labels_exist(
        self, db: AsyncSession, label_ids: Optional[Sequence[str]]
    ) -> None:
        for label_id in label_ids or []:
            if await self.labels.get_by_id(db, label_id) is None:
                raise LabelNotFoundError(label_id)

    async def get_studio(self, db: AsyncSession, studio_id: str) -> Studio:
        """Get a studio or raise ``StudioNotFoundError``."""
        studio = await self.studios.get_by_id(db, studio_id)
        if studio is None:
            raise StudioNotFoundError(studio_id)
        return studio

    async def get_studio_labels(self, db: AsyncSession, studio_id: str) -> List[Label]:
        """Get the labels a studio carries."""
        return await self.labelled_items.get_labels(db, studio_id)

    async def add_studio(
        self, db: AsyncSession, name: str, labels: Optional[Sequence[str]] = None
    ) -> Studio:
        """Create a studio.

        Args:
            db: Database session
            name: Studio name
            labels: IDs of labels the studio starts with

        Returns:
            The created studio

        Raises:
            LabelNotFoundError: If any label does not exist; nothing is written
        """
        matching = self.settings.matching
        await self._check_labels_exist(db, labels)

        studio = Studio(name=name.strip())
        studio_labels = list(labels or [])

        try:
            result = await self.hook(
                db, studio, studio_labels, HookEvent.STUDIO_CREATED
            )
            studio, studio_labels = result.studio, result.label_ids
        except HookExecutionError as e:
            logger.error(f"Studio plugins failed for new studio '{studio.name}': {e}")
            await db.rollback()

        await self.labelled_items.set_labels(
            db, studio.id, ItemType.STUDIO, studio_labels
        )
        await self.studios.upsert(db, studio)
        await db.commit()
        logger.info(f"Created studio '{studio.name}' with id: {studio.id}")

        try:
            labels_to_push = await self._labels_to_push(
                db, studio, matching, ApplyStudioLabels.STUDIO_CREATE
            )
            await self.matcher.find_unmatched_scenes(db, studio, labels_to_push)
            await db.commit()
        except CascadeSideEffectError as e:
            logger.error(f"Error attaching new studio '{studio.name}' to scenes: {e}")
            await self._discard_side_effect(db, [studio])

        await self.index.index_studios(db, [studio])
        await db.commit()
        return studio

    async def update_studios(
        self,
        db: AsyncSession,
        ids: Sequence[str],
        opts: Union[StudioUpdateOptions, Mapping[str, Any]],
    ) -> List[Studio]:
        """Apply a sparse update to several studios.

        Unknown IDs are skipped. Each studio is committed and reindexed
        before the next one is touched.

        Returns:
            The studios that were found and updated

        Raises:
            LabelNotFoundError: If any label does not exist; nothing is written
        """
        matching = self.settings.matching
        if not isinstance(opts, StudioUpdateOptions):
            opts = StudioUpdateOptions.model_validate(opts)

        if opts.is_set("parent") and opts.parent is not None:
            if opts.parent in ids:
                raise ValidationError(
                    "A studio cannot be its own parent",
                    field="parent",
                    value=opts.parent,
                )
            if await self.studios.get_by_id(db, opts.parent) is None:
                raise StudioNotFoundError(opts.parent)
        await self._check_labels_exist(db, opts.labels)

        updated_studios: List[Studio] = []

        for studio_id in ids:
            studio = await self.studios.get_by_id(db, studio_id)
            if studio is None:
                logger.debug(f"Skipping update of unknown studio {studio_id}")
                continue

            if opts.name is not None:
                studio.name = opts.name.strip()
            if opts.aliases is not None:
                studio.aliases = list(dict.fromkeys(opts.aliases))
            if opts.description is not None:
                studio.description = opts.description.strip()
            if opts.thumbnail is not None:
                studio.thumbnail = opts.thumbnail
            if opts.is_set("parent"):
                studio.parent_id = opts.parent
            if opts.is_set("bookmark"):
                studio.bookmark = opts.bookmark
            if opts.favorite is not None:
                studio.favorite = opts.favorite

            labels_changed = False
            if opts.labels is not None:
                old_labels = await self.labelled_items.get_label_ids(db, studio.id)
                await self.labelled_items.set_labels(
                    db, studio.id, ItemType.STUDIO, opts.labels
                )
                labels_changed = not labels_equal(old_labels, opts.labels)

            if opts.custom_fields is not None:
                studio.custom_fields = normalize_custom_fields(opts.custom_fields)

            await self.studios.upsert(db, studio)
            await self.index.index_studios(db, [studio])
            await db.commit()

            if labels_changed:
                try:
                    labels_to_push = await self._labels_to_push(
                        db, studio, matching, ApplyStudioLabels.STUDIO_UPDATE
                    )
                    await self.propagator.push_labels_to_current_scenes(
                        db, studio, labels_to_push
                    )
                    await db.commit()
                except CascadeSideEffectError as e:
                    logger.error(
                        f"Error while pushing studio '{studio.name}' labels "
                        f"to scenes: {e}"
                    )
                    await self._discard_side_effect(db, [*updated_studios, studio])

            updated_studios.append(studio)

        return updated_studios

    async def remove_studios(self, db: AsyncSession, ids: Sequence[str]) -> bool:
        """Remove studios and every reference to them.

        Unknown IDs are skipped. When any cleanup step fails for a studio,
        the whole cleanup is rolled back and the studio is kept unchanged
        so the removal can be retried.

        Returns:
            True if every studio that was found has been removed
        """
        success = True

        for studio_id in ids:
            if await self.studios.get_by_id(db, studio_id) is None:
                logger.debug(f"Skipping removal of unknown studio {studio_id}")
                continue

            report = await self.cascade.cleanup(db, studio_id)
            if not report.succeeded:
                success = False
                logger.error(
                    f"Keeping studio {studio_id}, cleanup failed for: "
                    + ", ".join(failure.cleaner for failure in report.failures)
                )
                await self.index.index(db, [studio_id])
                await db.commit()
                continue

            await self.index.remove(db, [studio_id])
            await self.studios.remove(db, studio_id)
            detached_children = report.affected.get("studios", [])
            if detached_children:
                await self.index.index(db, detached_children)
            await db.commit()
            logger.info(f"Removed studio {studio_id}")

        return success

    async def attach_studio_to_unmatched_scenes(
        self, db: AsyncSession, studio_id: str
    ) -> Optional[Studio]:
        """Attach a studio to the unmatched scenes that mention it.

        Returns:
            The studio, or None if it does not exist or matching failed
        """
        matching = self.settings.matching

        studio = await self.studios.get_by_id(db, studio_id)
        if studio is None:
            logger.error(
                f'Did not find studio for id "{studio_id}" '
                "to attach to unmatched scenes"
            )
            return None

        try:
            labels_to_push = await self._labels_to_push(
                db, studio, matching, ApplyStudioLabels.STUDIO_FIND_UNMATCHED_SCENES
            )
            await self.matcher.find_unmatched_scenes(db, studio, labels_to_push)
            await db.commit()
        except Exception as e:
            logger.error(f'Error attaching "{studio.name}" to new scenes: {e}')
            await db.rollback()
            return None

        await self.index.index_studios(db, [studio])
        await db.commit()
        return studio

    async def run_studio_plugins(
        self, db: AsyncSession, ids: Sequence[str]
    ) -> List[Studio]:
        """Re-run the custom studio plugins.

        Every studio is persisted and the search index refreshed as soon as
        its plugins finish. A failing studio does not stop the others.

        Returns:
            The studios whose plugins ran

        Raises:
            HookExecutionError: After the batch, if any studio's plugins failed.
                It lists both the failed and the updated studio ids
        """
        updated_studios: List[Studio] = []
        updated_ids: List[str] = []
        failed_ids: List[str] = []

        for studio_id in ids:
            studio = await self.studios.get_by_id(db, studio_id)
            if studio is None:
                continue

            labels = await self.labelled_items.get_label_ids(db, studio.id)
            logger.debug(f"Labels before plugin: {labels}")
            try:
                result = await self.hook(db, studio, labels, HookEvent.STUDIO_CUSTOM)
            except HookExecutionError as e:
                logger.error(f"Studio plugins failed for {studio_id}: {e}")
                failed_ids.append(studio_id)
                await self._discard_side_effect(db, updated_studios)
                continue
            logger.debug(f"Labels after plugin: {result.label_ids}")

            studio = result.studio
            await self.labelled_items.set_labels(
                db, studio.id, ItemType.STUDIO, result.label_ids
            )
            await self.studios.upsert(db, studio)
            updated_studios.append(studio)
            updated_ids.append(studio.id)

            await self.index.update_studios(db, updated_studios)
            await db.commit()

        if failed_ids:
            raise HookExecutionError(
                f"Studio plugins failed for {len(failed_ids)} of {len(ids)} studios",
                event=HookEvent.STUDIO_CUSTOM.value,
                failed_ids=failed_ids,
                updated_ids=updated_ids,
            )
        return updated_studios
