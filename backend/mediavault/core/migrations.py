"""
Database migration utilities.

Schema changes are managed through Alembic revisions under ``backend/alembic``
and applied on application startup. To add a revision:

1. Change the models
2. Run: alembic revision --autogenerate -m "Description of changes"
3. Review the generated file
"""

import asyncio
import logging
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from mediavault.core.config import get_settings

logger = logging.getLogger(__name__)

ALEMBIC_DIR = Path(__file__).resolve().parent.parent.parent / "alembic"


def build_alembic_config(database_url: str) -> Config:
    """Build an Alembic configuration pointing at the bundled revisions."""
    if not ALEMBIC_DIR.exists():
        logger.error(f"Alembic directory not found at {ALEMBIC_DIR}")
        raise FileNotFoundError("Alembic directory not found")

    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    return alembic_cfg


def _check_migrations_needed(engine: Engine, alembic_cfg: Config) -> bool:
    """Check if migrations are needed."""
    script_dir = ScriptDirectory.from_config(alembic_cfg)

    with engine.begin() as connection:
        context = MigrationContext.configure(connection)
        current_rev = context.get_current_revision()
        head_rev = script_dir.get_current_head()

    if current_rev == head_rev:
        logger.info(f"Database is already up to date at revision: {current_rev}")
        return False

    logger.info(f"Current revision: {current_rev or 'None (fresh database)'}")
    logger.info(f"Latest revision: {head_rev}")
    return True


def run_migrations() -> None:
    """Run all pending database migrations."""
    settings = get_settings()

    logger.info("Running database migrations...")
    alembic_cfg = build_alembic_config(settings.database.url)
    engine = create_engine(settings.database.url)

    try:
        if not _check_migrations_needed(engine, alembic_cfg):
            return

        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations completed successfully")
    except Exception as e:
        logger.error(f"Failed to run migrations: {e}")
        if hasattr(e, "orig"):
            logger.error(f"Original database error: {e.orig}")
        raise
    finally:
        engine.dispose()


async def run_migrations_async() -> None:
    """Run migrations without blocking the event loop."""
    await asyncio.to_thread(run_migrations)
