"""
MediaVault API application.

``create_app`` wires the studio routes, error handlers and request tracing.
Startup applies pending migrations and loads the studio plugins, so a
broken plugin configuration fails the boot instead of the first mutation.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from mediavault.api import api_router
from mediavault.core.config import Settings, get_settings
from mediavault.core.database import close_db
from mediavault.core.dependencies import get_studio_service
from mediavault.core.error_handlers import register_exception_handlers
from mediavault.core.logging import configure_logging
from mediavault.core.middleware import RequestTracingMiddleware
from mediavault.core.migrations import run_migrations_async

logger = logging.getLogger(__name__)

MIGRATION_ATTEMPTS = 3
MIGRATION_RETRY_DELAY = 5.0


async def apply_migrations(
    attempts: int = MIGRATION_ATTEMPTS, delay: float = MIGRATION_RETRY_DELAY
) -> None:
    """Apply pending migrations, retrying while the database comes up."""
    for attempt in range(1, attempts + 1):
        try:
            await run_migrations_async()
            return
        except Exception as e:
            if attempt == attempts:
                raise RuntimeError(
                    f"Database migrations failed after {attempts} attempts: {e}"
                ) from e
            logger.warning(
                f"Migration attempt {attempt}/{attempts} failed, "
                f"retrying in {delay:.0f}s: {e}"
            )
            await asyncio.sleep(delay)


def should_migrate(settings: Settings) -> bool:
    """Migrations run on startup unless disabled or under pytest."""
    return settings.app.run_migrations and not os.getenv("PYTEST_CURRENT_TEST")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app.name} v{settings.app.version}")

    if should_migrate(settings):
        await apply_migrations()
    else:
        logger.info("Skipping database migrations")
    get_studio_service()

    yield

    await close_db()
    logger.info(f"Stopped {settings.app.name}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API application."""
    settings = settings or get_settings()
    docs = settings.app.debug

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Studio catalog with plugin-driven labeling and scene matching",
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    register_exception_handlers(app)
    app.add_middleware(RequestTracingMiddleware)
    app.include_router(api_router, prefix="/api")
    return app


configure_logging()
app = create_app()
