"""
Runs studio plugins and turns their output into studio changes.

Plugins see a snapshot of the studio and return a mapping of fields to
change. Outputs accumulate across the plugins bound to an event and are
only applied to the studio once every plugin has succeeded, so a failing
run leaves the studio and the caller's label list untouched.
"""

import inspect
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.core.exceptions import HookExecutionError
from mediavault.models import Studio
from mediavault.repositories import (
    LabelRepository,
    StudioRepository,
    label_repository,
    studio_repository,
)
from mediavault.services.plugins.models import HookEvent, HookResult, PluginContext
from mediavault.services.plugins.registry import Plugin, PluginRegistry

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = {"created_at", "updated_at"}
SCALAR_FIELDS = ("name", "description", "thumbnail", "favorite", "bookmark", "parent")


def _unique(values: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(values))


class PluginHookRunner:
    """``StudioHook`` backed by the configured plugins."""

    def __init__(
        self,
        registry: PluginRegistry,
        create_missing_labels: bool = False,
        studios: StudioRepository = studio_repository,
        labels: LabelRepository = label_repository,
    ):
        self.registry = registry
        self.create_missing_labels = create_missing_labels
        self.studios = studios
        self.labels = labels

    async def __call__(
        self,
        db: AsyncSession,
        studio: Studio,
        label_ids: Sequence[str],
        event: HookEvent,
    ) -> HookResult:
        current_labels = _unique(label_ids)
        plugins = self.registry.plugins_for(event.value)
        if not plugins:
            return HookResult(studio=studio, label_ids=current_labels)

        known_labels = await self.labels.get_many(db, current_labels)
        label_names = [label.name for label in known_labels]
        changes: Dict[str, Any] = {}

        for plugin in plugins:
            context = PluginContext(
                event=event,
                studio={**studio.to_dict(exclude=TIMESTAMP_FIELDS), **changes},
                label_names=_unique([*label_names, *changes.get("labels", [])]),
                args=dict(plugin.args),
            )
            output = await self._invoke(plugin, context)
            if output:
                logger.debug(f"Plugin '{plugin.name}' returned {sorted(output)}")
                self._merge(changes, output)

        try:
            parent_id = await self._resolve_parent(db, studio, changes)
            new_label_ids = await self._resolve_labels(db, changes.get("labels", []))
        except Exception as e:
            raise HookExecutionError(
                f"Could not apply plugin output for studio '{studio.name}': {e}",
                event=event.value,
            ) from e

        self._apply(studio, changes, parent_id)
        return HookResult(
            studio=studio, label_ids=_unique([*current_labels, *new_label_ids])
        )

    async def _invoke(
        self, plugin: Plugin, context: PluginContext
    ) -> Optional[Mapping[str, Any]]:
        try:
            output = plugin.func(context)
            if inspect.isawaitable(output):
                output = await output
        except Exception as e:
            raise HookExecutionError(
                f"Plugin '{plugin.name}' failed on {context.event.value}: {e}",
                event=context.event.value,
                plugin=plugin.name,
            ) from e

        if output is not None and not isinstance(output, Mapping):
            raise HookExecutionError(
                f"Plugin '{plugin.name}' returned {type(output).__name__}, "
                "expected a mapping",
                event=context.event.value,
                plugin=plugin.name,
            )
        return output

    def _merge(self, changes: Dict[str, Any], output: Mapping[str, Any]) -> None:
        for key in SCALAR_FIELDS:
            if key in output:
                changes[key] = output[key]

        if output.get("aliases"):
            changes["aliases"] = _unique(
                [*changes.get("aliases", []), *map(str, output["aliases"])]
            )
        if output.get("labels"):
            changes["labels"] = _unique(
                [*changes.get("labels", []), *map(str, output["labels"])]
            )
        if output.get("custom"):
            changes["custom"] = {**changes.get("custom", {}), **output["custom"]}

    async def _resolve_parent(
        self, db: AsyncSession, studio: Studio, changes: Mapping[str, Any]
    ) -> Optional[str]:
        if not changes.get("parent"):
            return None
        parent = await self.studios.find_by_name(db, str(changes["parent"]))
        if parent is None or parent.id == studio.id:
            logger.warning(
                f"Ignoring parent '{changes['parent']}' for studio '{studio.name}'"
            )
            return None
        return parent.id  # type: ignore[no-any-return]

    async def _resolve_labels(
        self, db: AsyncSession, names: Sequence[str]
    ) -> List[str]:
        label_ids = []
        for name in names:
            label = await self.labels.find_by_name(db, name)
            if label is None and self.create_missing_labels:
                label = await self.labels.create(db, name)
            if label is None:
                logger.info(f"Skipping unknown label '{name}' returned by plugin")
                continue
            label_ids.append(label.id)
        return label_ids

    def _apply(
        self, studio: Studio, changes: Mapping[str, Any], parent_id: Optional[str]
    ) -> None:
        if isinstance(changes.get("name"), str) and changes["name"].strip():
            studio.name = changes["name"].strip()
        if isinstance(changes.get("description"), str):
            studio.description = changes["description"].strip()
        if isinstance(changes.get("thumbnail"), str):
            studio.thumbnail = changes["thumbnail"]
        if isinstance(changes.get("favorite"), bool):
            studio.favorite = changes["favorite"]
        if "bookmark" in changes and (
            changes["bookmark"] is None or isinstance(changes["bookmark"], int)
        ):
            studio.bookmark = changes["bookmark"]
        if parent_id:
            studio.parent_id = parent_id
        if changes.get("aliases"):
            studio.aliases = _unique([*(studio.aliases or []), *changes["aliases"]])
        if changes.get("custom"):
            studio.custom_fields = {**(studio.custom_fields or {}), **changes["custom"]}
