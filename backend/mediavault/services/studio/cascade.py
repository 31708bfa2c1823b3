"""
Cleanup of everything that points at a studio being removed.

Each dependent type has its own cleaner. A removal either clears every
reference or, when any cleaner fails, none of them, so a studio kept for
a retry still owns its scenes, movies, images and labels.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.repositories import (
    image_repository,
    labelled_item_repository,
    movie_repository,
    scene_repository,
    studio_repository,
)

logger = logging.getLogger(__name__)


@dataclass
class ReferenceCleaner:
    """Removes references to a studio from one dependent type."""

    name: str
    clear: Callable[[AsyncSession, str], Awaitable[List[str]]]


@dataclass
class CascadeFailure:
    """A cleaner that raised."""

    cleaner: str
    error: str


@dataclass
class CascadeReport:
    """Outcome of cleaning up after one studio."""

    studio_id: str
    affected: Dict[str, List[str]] = field(default_factory=dict)
    failures: List[CascadeFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failures


async def _clear_labels(db: AsyncSession, studio_id: str) -> List[str]:
    removed = await labelled_item_repository.remove_by_item(db, studio_id)
    return [studio_id] if removed else []


def default_cleaners() -> List[ReferenceCleaner]:
    """Cleaners for child studios, scenes, movies, images and label links."""
    return [
        ReferenceCleaner("studios", studio_repository.clear_parent),
        ReferenceCleaner("scenes", scene_repository.clear_studio),
        ReferenceCleaner("movies", movie_repository.clear_studio),
        ReferenceCleaner("images", image_repository.clear_studio),
        ReferenceCleaner("labels", _clear_labels),
    ]


class CascadeDeletionCoordinator:
    """Runs every registered cleaner for a studio."""

    def __init__(self, cleaners: Optional[List[ReferenceCleaner]] = None):
        self.cleaners = cleaners if cleaners is not None else default_cleaners()

    def register(self, cleaner: ReferenceCleaner) -> None:
        """Add a cleaner for another dependent type."""
        self.cleaners.append(cleaner)

    async def cleanup(self, db: AsyncSession, studio_id: str) -> CascadeReport:
        """Remove every reference to a studio, or none of them.

        All cleaners run inside one savepoint, each in a nested savepoint of
        its own so that a failure is recorded and the remaining cleaners
        still run. If any cleaner failed the outer savepoint is rolled back
        and the report's ``affected`` is empty. Nothing is committed here.
        """
        report = CascadeReport(studio_id=studio_id)
        savepoint = await db.begin_nested()

        for cleaner in self.cleaners:
            try:
                async with db.begin_nested():
                    affected = await cleaner.clear(db, studio_id)
            except Exception as e:
                logger.error(
                    f"Failed to clear {cleaner.name} for studio {studio_id}: {e}"
                )
                report.failures.append(
                    CascadeFailure(cleaner=cleaner.name, error=str(e))
                )
                continue
            report.affected[cleaner.name] = affected

        if not report.succeeded:
            await savepoint.rollback()
            report.affected = {}
            logger.warning(
                f"Rolled back cleanup of studio {studio_id}, "
                f"{len(report.failures)} cleaners failed"
            )
            return report

        await savepoint.commit()
        logger.debug(
            f"Cleared references to studio {studio_id}: "
            + ", ".join(f"{k}={len(v)}" for k, v in report.affected.items())
        )
        return report
