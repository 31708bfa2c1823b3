"""Types shared by the studio plugin hooks."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.models import Studio


class HookEvent(str, Enum):
    """Points at which studio plugins run."""

    STUDIO_CREATED = "studioCreated"
    STUDIO_CUSTOM = "studioCustom"


@dataclass
class HookResult:
    """Studio and label IDs produced by a hook run."""

    studio: Studio
    label_ids: List[str]


@dataclass
class PluginContext:
    """What a plugin gets to see about the studio it runs for."""

    event: HookEvent
    studio: Dict[str, Any]
    label_names: List[str]
    args: Dict[str, Any] = field(default_factory=dict)


class StudioHook(Protocol):
    """A transformation over a studio and its label IDs."""

    async def __call__(
        self,
        db: AsyncSession,
        studio: Studio,
        label_ids: Sequence[str],
        event: HookEvent,
    ) -> HookResult:
        ...
