"""Tests for the studio mutations."""

from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select

from mediavault.core.config import ApplyStudioLabels
from mediavault.core.exceptions import (
    CascadeSideEffectError,
    HookExecutionError,
    LabelNotFoundError,
    StudioNotFoundError,
    ValidationError,
)
from mediavault.models import LabelledItem, Scene, Studio
from mediavault.repositories import labelled_item_repository
from mediavault.services.plugins import HookEvent, HookResult, PluginRegistry
from mediavault.services.plugins.runner import PluginHookRunner
from mediavault.services.search import studio_index
from mediavault.services.studio import (
    CascadeDeletionCoordinator,
    ReferenceCleaner,
    StudioService,
    StudioUpdateOptions,
    normalize_custom_fields,
)
from mediavault.services.studio.cascade import default_cleaners
from tests.conftest import make_settings
from tests.helpers import create_label, create_scene, create_studio

get_label_ids = labelled_item_repository.get_label_ids


async def count_studios(db) -> int:
    result = await db.execute(select(func.count(Studio.id)))
    return int(result.scalar_one())


class TestNormalizeCustomFields:
    """Test normalize_custom_fields."""

    def test_missing_value_becomes_explicit_null(self):
        assert normalize_custom_fields({"tag": None}) == {"tag": None}

    def test_sequences_become_lists_of_strings(self):
        assert normalize_custom_fields({"ids": ("a", 1)}) == {"ids": ["a", "1"]}

    def test_scalars_are_kept(self):
        assert normalize_custom_fields({"flag": True, "note": "x"}) == {
            "flag": True,
            "note": "x",
        }


class TestAddStudio:
    """Test StudioService.add_studio."""

    @pytest.mark.asyncio
    async def test_create_with_labels_attaches_matching_scenes(
        self, studio_service, test_async_session
    ):
        db = test_async_session
        l1 = await create_label(db, "L1")
        l2 = await create_label(db, "L2")
        matching = await create_scene(db, "Acme - Episode 1")
        unrelated = await create_scene(db, "Something else")

        studio = await studio_service.add_studio(db, "Acme", [l1.id, l2.id])

        assert set(await get_label_ids(db, studio.id)) == {l1.id, l2.id}
        document = await studio_index.get_document(db, studio.id)
        assert document is not None
        assert set(document.label_ids) == {l1.id, l2.id}
        assert document.scene_count == 1

        await db.refresh(matching)
        await db.refresh(unrelated)
        assert matching.studio_id == studio.id
        assert unrelated.studio_id is None
        assert set(await get_label_ids(db, matching.id)) == {l1.id, l2.id}

    @pytest.mark.asyncio
    async def test_create_toggle_off_matches_without_labels(self, test_async_session):
        db = test_async_session
        service = StudioService(make_settings(ApplyStudioLabels.STUDIO_UPDATE))
        label = await create_label(db, "L1")
        scene = await create_scene(db, "Acme 01")

        studio = await service.add_studio(db, "Acme", [label.id])

        await db.refresh(scene)
        assert scene.studio_id == studio.id
        assert await get_label_ids(db, scene.id) == []

    @pytest.mark.asyncio
    async def test_name_is_trimmed(self, studio_service, test_async_session):
        studio = await studio_service.add_studio(test_async_session, "  Acme  ")
        assert studio.name == "Acme"

    @pytest.mark.asyncio
    async def test_missing_label_persists_nothing(
        self, studio_service, test_async_session
    ):
        db = test_async_session
        label = await create_label(db, "L1")

        with pytest.raises(LabelNotFoundError):
            await studio_service.add_studio(db, "Acme", [label.id, "la_missing"])

        assert await count_studios(db) == 0
        assert await studio_index.search(db, "") == []

    @pytest.mark.asyncio
    async def test_hook_labels_replace_caller_labels(self, test_async_session):
        db = test_async_session
        requested = await create_label(db, "Requested")
        chosen = await create_label(db, "Chosen")
        hook = AsyncMock(
            side_effect=lambda db, studio, label_ids, event: HookResult(
                studio=studio, label_ids=[chosen.id]
            )
        )
        service = StudioService(make_settings(), hook=hook)

        studio = await service.add_studio(db, "Acme", [requested.id])

        assert await get_label_ids(db, studio.id) == [chosen.id]
        assert hook.await_args.args[3] == HookEvent.STUDIO_CREATED
        assert hook.await_args.args[2] == [requested.id]

    @pytest.mark.asyncio
    async def test_hook_failure_keeps_pre_hook_studio(self, test_async_session):
        db = test_async_session
        label = await create_label(db, "L1")
        label_id = label.id
        hook = AsyncMock(side_effect=HookExecutionError("boom"))
        service = StudioService(make_settings(), hook=hook)

        studio = await service.add_studio(db, "Acme", [label_id])

        assert studio.name == "Acme"
        assert await get_label_ids(db, studio.id) == [label_id]
        assert await count_studios(db) == 1

    @pytest.mark.asyncio
    async def test_matcher_failure_keeps_studio(self, test_async_session):
        db = test_async_session
        matcher = AsyncMock()
        matcher.find_unmatched_scenes.side_effect = CascadeSideEffectError(
            "boom", stage="match"
        )
        service = StudioService(make_settings(), matcher=matcher)

        studio = await service.add_studio(db, "Acme")

        assert await count_studios(db) == 1
        assert await studio_index.get_document(db, studio.id) is not None

    @pytest.mark.asyncio
    async def test_plugins_run_on_create(self, test_async_session):
        db = test_async_session
        registry = PluginRegistry()
        registry.register("alias", lambda context: {"aliases": ["ACME Inc"]})
        registry.bind(HookEvent.STUDIO_CREATED.value, ["alias"])
        service = StudioService(make_settings(), hook=PluginHookRunner(registry))

        studio = await service.add_studio(db, "Acme")

        assert studio.aliases == ["ACME Inc"]
        document = await studio_index.get_document(db, studio.id)
        assert document.aliases == ["ACME Inc"]


class TestUpdateStudios:
    """Test StudioService.update_studios."""

    @pytest.mark.asyncio
    async def test_only_present_fields_are_applied(
        self, studio_service, test_async_session
    ):
        db = test_async_session
        studio = await create_studio(
            db, "Acme", description="Old", thumbnail="/a.jpg", bookmark=5
        )

        [updated] = await studio_service.update_studios(
            db, [studio.id], {"name": "  Acme Two ", "aliases": ["A", "B", "A"]}
        )

        assert updated.name == "Acme Two"
        assert updated.aliases == ["A", "B"]
        assert updated.description == "Old"
        assert updated.thumbnail == "/a.jpg"
        assert updated.bookmark == 5

    @pytest.mark.asyncio
    async def test_bookmark_and_parent_can_be_cleared(
        self, studio_service, test_async_session
    ):
        db = test_async_session
        parent = await create_studio(db, "Parent")
        studio = await create_studio(db, "Acme", parent_id=parent.id, bookmark=5)

        [updated] = await studio_service.update_studios(
            db, [studio.id], {"parent": None, "bookmark": None}
        )

        assert updated.parent_id is None
        assert updated.bookmark is None

    @pytest.mark.asyncio
    async def test_parent_is_set(self, studio_service, test_async_session):
        db = test_async_session
        parent = await create_studio(db, "Parent")
        studio = await create_studio(db, "Acme")

        [updated] = await studio_service.update_studios(
            db, [studio.id], StudioUpdateOptions(parent=parent.id)
        )

        assert updated.parent_id == parent.id
        document = await studio_index.get_document(db, studio.id)
        assert document.parent_id == parent.id

    @pytest.mark.asyncio
    async def test_studio_cannot_be_its_own_parent(
        self, studio_service, test_async_session
    ):
        db = test_async_session
        studio = await create_studio(db, "Acme")

        with pytest.raises(ValidationError):
            await studio_service.update_studios(db, [studio.id], {"parent": studio.id})

    @pytest.mark.asyncio
    async def test_unknown_parent(self, studio_service, test_async_session):
        db = test_async_session
        studio = await create_studio(db, "Acme")

        with pytest.raises(StudioNotFoundError):
            await studio_service.update_studios(db, [studio.id], {"parent": "st_x"})

    @pytest.mark.asyncio
    async def test_absent_custom_field_is_stored_as_null(
        self, studio_service, test_async_session
    ):
        db = test_async_session
        studio = await create_studio(db, "Acme", custom_fields={"tag": "old"})

        await studio_service.update_studios(
            db, [studio.id], {"customFields": {"tag": None, "ids": ["1", "2"]}}
        )

        await db.refresh(studio)
        assert studio.custom_fields == {"tag": None, "ids": ["1", "2"]}
        assert "tag" in studio.custom_fields

    @pytest.mark.asyncio
    async def test_unknown_ids_are_skipped(self, studio_service, test_async_session):
        db = test_async_session
        first = await create_studio(db, "First")
        second = await create_studio(db, "Second")

        updated = await studio_service.update_studios(
            db, [first.id, "st_missing", second.id], {"favorite": True}
        )

        assert [studio.id for studio in updated] == [first.id, second.id]
        assert all(studio.favorite for studio in updated)

    @pytest.mark.asyncio
    async def test_unknown_option_is_rejected(self, studio_service, test_async_session):
        with pytest.raises(PydanticValidationError):
            await studio_service.update_studios(
                test_async_session, [], {"colour": "red"}
            )

    @pytest.mark.asyncio
    async def test_changed_labels_reach_every_owned_scene(
        self, studio_service, test_async_session
    ):
        db = test_async_session
        old = await create_label(db, "Old")
        new = await create_label(db, "New")
        studio = await create_studio(db, "Acme", label_ids=[old.id])
        first = await create_scene(db, "one", studio_id=studio.id)
        second = await create_scene(db, "two", studio_id=studio.id, label_ids=[old.id])

        await studio_service.update_studios(db, [studio.id], {"labels": [new.id]})

        assert await get_label_ids(db, studio.id) == [new.id]
        assert await get_label_ids(db, first.id) == [new.id]
        # Propagation adds, it never removes
        assert set(await get_label_ids(db, second.id)) == {old.id, new.id}
        document = await studio_index.get_document(db, studio.id)
        assert document.label_ids == [new.id]

    @pytest.mark.asyncio
    async def test_reordered_labels_do_not_propagate(self, test_async_session):
        db = test_async_session
        a = await create_label(db, "A")
        b = await create_label(db, "B")
        studio = await create_studio(db, "Acme", label_ids=[a.id, b.id])
        scene = await create_scene(db, "one", studio_id=studio.id)
        propagator = AsyncMock()
        service = StudioService(make_settings(*ApplyStudioLabels), propagator=propagator)

        await service.update_studios(db, [studio.id], {"labels": [b.id, a.id, a.id]})

        propagator.push_labels_to_current_scenes.assert_not_called()
        assert await get_label_ids(db, scene.id) == []

    @pytest.mark.asyncio
    async def test_label_change_is_detected_per_studio(self, test_async_session):
        db = test_async_session
        a = await create_label(db, "A")
        changed = await create_studio(db, "Changed")
        unchanged = await create_studio(db, "Unchanged", label_ids=[a.id])
        propagator = AsyncMock()
        service = StudioService(make_settings(*ApplyStudioLabels), propagator=propagator)

        await service.update_studios(db, [changed.id, unchanged.id], {"labels": [a.id]})

        assert propagator.push_labels_to_current_scenes.await_count == 1
        pushed_studio = propagator.push_labels_to_current_scenes.await_args.args[1]
        assert pushed_studio.id == changed.id

    @pytest.mark.asyncio
    async def test_update_toggle_off_pushes_nothing(self, test_async_session):
        db = test_async_session
        label = await create_label(db, "L1")
        studio = await create_studio(db, "Acme")
        scene = await create_scene(db, "one", studio_id=studio.id)
        service = StudioService(make_settings(ApplyStudioLabels.STUDIO_CREATE))

        await service.update_studios(db, [studio.id], {"labels": [label.id]})

        assert await get_label_ids(db, studio.id) == [label.id]
        assert await get_label_ids(db, scene.id) == []

    @pytest.mark.asyncio
    async def test_propagation_failure_keeps_update(self, test_async_session):
        db = test_async_session
        label = await create_label(db, "L1")
        label_id = label.id
        studio = await create_studio(db, "Acme")
        propagator = AsyncMock()
        propagator.push_labels_to_current_scenes.side_effect = CascadeSideEffectError(
            "boom", stage="propagate"
        )
        service = StudioService(make_settings(*ApplyStudioLabels), propagator=propagator)

        [updated] = await service.update_studios(
            db, [studio.id], {"labels": [label_id], "name": "Renamed"}
        )

        assert updated.name == "Renamed"
        assert await get_label_ids(db, studio.id) == [label_id]
        document = await studio_index.get_document(db, studio.id)
        assert document.name == "Renamed"

    @pytest.mark.asyncio
    async def test_missing_label_updates_nothing(
        self, studio_service, test_async_session
    ):
        db = test_async_session
        first = await create_studio(db, "First")
        second = await create_studio(db, "Second")
        first_id, second_id = first.id, second.id

        with pytest.raises(LabelNotFoundError):
            await studio_service.update_studios(
                db,
                [first_id, second_id],
                {"name": "Renamed", "labels": ["la_missing"]},
            )

        for studio_id, name in ((first_id, "First"), (second_id, "Second")):
            studio = await db.get(Studio, studio_id)
            await db.refresh(studio)
            assert studio.name == name

    @pytest.mark.asyncio
    async def test_studios_updated_before_a_failure_stay_indexed(
        self, test_async_session
    ):
        db = test_async_session
        label = await create_label(db, "L1")
        first = await create_studio(db, "First")
        second = await create_studio(db, "Second")
        label_id, first_id, second_id = label.id, first.id, second.id

        async def push(session, studio, label_ids):
            if studio.id == second_id:
                raise RuntimeError("connection lost")
            return 0

        propagator = AsyncMock()
        propagator.push_labels_to_current_scenes.side_effect = push
        service = StudioService(make_settings(*ApplyStudioLabels), propagator=propagator)

        with pytest.raises(RuntimeError):
            await service.update_studios(
                db, [first_id, second_id], {"labels": [label_id], "favorite": True}
            )

        document = await studio_index.get_document(db, first_id)
        assert document.favorite is True
        assert document.label_ids == [label_id]


class TestRemoveStudios:
    """Test StudioService.remove_studios."""

    @pytest.mark.asyncio
    async def test_removal_leaves_no_references(
        self, studio_service, test_async_session
    ):
        db = test_async_session
        label = await create_label(db, "L1")
        studio = await create_studio(db, "Acme", label_ids=[label.id])
        child = await create_studio(db, "Acme Junior", parent_id=studio.id)
        scene = await create_scene(db, "one", studio_id=studio.id)
        await studio_index.index_studios(db, [studio, child])
        await db.commit()
        studio_id = studio.id

        assert await studio_service.remove_studios(db, [studio_id, "st_missing"])

        assert await db.get(Studio, studio_id) is None
        await db.refresh(scene)
        await db.refresh(child)
        assert scene.studio_id is None
        assert child.parent_id is None
        result = await db.execute(
            select(LabelledItem).where(LabelledItem.item_id == studio_id)
        )
        assert result.scalars().all() == []
        assert await studio_index.get_document(db, studio_id) is None
        child_document = await studio_index.get_document(db, child.id)
        assert child_document.parent_id is None

    @pytest.mark.asyncio
    async def test_failed_cleanup_keeps_studio(self, test_async_session):
        db = test_async_session
        label = await create_label(db, "L1")
        keep = await create_studio(db, "Keep", label_ids=[label.id])
        drop = await create_studio(db, "Drop")
        scene = await create_scene(db, "one", studio_id=keep.id)
        await studio_index.index_studios(db, [keep, drop])
        await db.commit()
        label_id, keep_id, drop_id, scene_id = label.id, keep.id, drop.id, scene.id

        async def fail_for_keep(session, studio_id):
            if studio_id == keep_id:
                raise RuntimeError("boom")
            return []

        cascade = CascadeDeletionCoordinator(
            [ReferenceCleaner("flaky", fail_for_keep), *default_cleaners()]
        )
        service = StudioService(make_settings(), cascade=cascade)

        assert await service.remove_studios(db, [keep_id, drop_id]) is False

        assert await db.get(Studio, keep_id) is not None
        assert await db.get(Studio, drop_id) is None
        assert await get_label_ids(db, keep_id) == [label_id]
        kept_scene = await db.get(Scene, scene_id)
        await db.refresh(kept_scene)
        assert kept_scene.studio_id == keep_id
        document = await studio_index.get_document(db, keep_id)
        await db.refresh(document)
        assert document.label_ids == [label_id]
        assert document.scene_count == 1
        assert await studio_index.get_document(db, drop_id) is None


class TestAttachStudioToUnmatchedScenes:
    """Test StudioService.attach_studio_to_unmatched_scenes."""

    @pytest.mark.asyncio
    async def test_attaches_and_reindexes(self, studio_service, test_async_session):
        db = test_async_session
        label = await create_label(db, "L1")
        studio = await create_studio(db, "Acme", label_ids=[label.id])
        scene = await create_scene(db, "x", path="/media/acme/x.mp4")

        result = await studio_service.attach_studio_to_unmatched_scenes(db, studio.id)

        assert result is studio
        await db.refresh(scene)
        assert scene.studio_id == studio.id
        assert await get_label_ids(db, scene.id) == [label.id]
        document = await studio_index.get_document(db, studio.id)
        assert document.scene_count == 1

    @pytest.mark.asyncio
    async def test_toggle_off_attaches_without_labels(self, test_async_session):
        db = test_async_session
        label = await create_label(db, "L1")
        studio = await create_studio(db, "Acme", label_ids=[label.id])
        scene = await create_scene(db, "Acme 01")
        service = StudioService(make_settings())

        await service.attach_studio_to_unmatched_scenes(db, studio.id)

        await db.refresh(scene)
        assert scene.studio_id == studio.id
        assert await get_label_ids(db, scene.id) == []

    @pytest.mark.asyncio
    async def test_unknown_studio(self, studio_service, test_async_session):
        result = await studio_service.attach_studio_to_unmatched_scenes(
            test_async_session, "st_missing"
        )
        assert result is None

    @pytest.mark.asyncio
    async def test_matcher_failure(self, test_async_session):
        db = test_async_session
        studio = await create_studio(db, "Acme")
        matcher = AsyncMock()
        matcher.find_unmatched_scenes.side_effect = CascadeSideEffectError(
            "boom", stage="match"
        )
        service = StudioService(make_settings(), matcher=matcher)

        assert await service.attach_studio_to_unmatched_scenes(db, studio.id) is None


class TestRunStudioPlugins:
    """Test StudioService.run_studio_plugins."""

    @pytest.mark.asyncio
    async def test_hook_output_is_persisted_and_indexed(self, test_async_session):
        db = test_async_session
        old = await create_label(db, "Old")
        new = await create_label(db, "New")
        studio = await create_studio(db, "Acme", label_ids=[old.id])

        async def hook(session, target, label_ids, event):
            assert event == HookEvent.STUDIO_CUSTOM
            assert list(label_ids) == [old.id]
            target.name = "Acme Renamed"
            return HookResult(studio=target, label_ids=[new.id])

        service = StudioService(make_settings(), hook=hook)

        [updated] = await service.run_studio_plugins(db, [studio.id, "st_missing"])

        assert updated.name == "Acme Renamed"
        assert await get_label_ids(db, studio.id) == [new.id]
        document = await studio_index.get_document(db, studio.id)
        assert document.name == "Acme Renamed"
        assert document.label_ids == [new.id]

    @pytest.mark.asyncio
    async def test_failure_is_reported_after_the_batch(self, test_async_session):
        db = test_async_session
        first = await create_studio(db, "First")
        broken = await create_studio(db, "Broken")
        last = await create_studio(db, "Last")
        first_id, broken_id, last_id = first.id, broken.id, last.id

        async def hook(session, target, label_ids, event):
            if target.id == broken_id:
                raise HookExecutionError("boom", event=event.value)
            target.favorite = True
            return HookResult(studio=target, label_ids=list(label_ids))

        service = StudioService(make_settings(), hook=hook)

        with pytest.raises(HookExecutionError) as exc_info:
            await service.run_studio_plugins(db, [first_id, broken_id, last_id])

        assert exc_info.value.failed_ids == [broken_id]
        assert exc_info.value.updated_ids == [first_id, last_id]
        for studio_id in (first_id, last_id):
            document = await studio_index.get_document(db, studio_id)
            assert document is not None
            assert document.favorite is True
        assert await studio_index.get_document(db, broken_id) is None
