"""Test helper functions."""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mediavault.models import ItemType, Label, LabelledItem, Scene, Studio

T = TypeVar("T")


async def create_label(
    db: AsyncSession, name: str, aliases: Optional[List[str]] = None
) -> Label:
    """Create and commit a label."""
    label = Label(name=name, aliases=aliases or [])
    db.add(label)
    await db.commit()
    return label


async def create_studio(
    db: AsyncSession,
    name: str,
    label_ids: Optional[List[str]] = None,
    **kwargs: Any,
) -> Studio:
    """Create and commit a studio, optionally with labels."""
    studio = Studio(name=name, **kwargs)
    db.add(studio)
    await db.flush()
    for label_id in label_ids or []:
        db.add(
            LabelledItem(item_id=studio.id, item_type=ItemType.STUDIO, label_id=label_id)
        )
    await db.commit()
    return studio


async def create_scene(
    db: AsyncSession,
    name: str,
    path: Optional[str] = None,
    studio_id: Optional[str] = None,
    label_ids: Optional[List[str]] = None,
) -> Scene:
    """Create and commit a scene, optionally with labels."""
    scene = Scene(name=name, path=path, studio_id=studio_id)
    db.add(scene)
    await db.flush()
    for label_id in label_ids or []:
        db.add(
            LabelledItem(item_id=scene.id, item_type=ItemType.SCENE, label_id=label_id)
        )
    await db.commit()
    return scene


class TestDatabase:
    """An engine plus the event loop used to drive it outside of async tests."""

    __test__ = False

    def __init__(self, engine: AsyncEngine, loop: asyncio.AbstractEventLoop):
        self.engine = engine
        self.loop = loop
        self.session_maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    def run(self, coro: Awaitable[T]) -> T:
        """Run a coroutine to completion on the database loop."""
        return self.loop.run_until_complete(coro)

    def call(self, func: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run ``func`` with a fresh session and return its result."""

        async def _with_session() -> T:
            async with self.session_maker() as session:
                return await func(session)

        return self.run(_with_session())
