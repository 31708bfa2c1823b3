"""Shared pytest fixtures and configuration."""

import asyncio
from typing import Generator
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Import all models to ensure they're registered with SQLAlchemy
import mediavault.models  # noqa: F401
from mediavault.core.config import (
    ApplyStudioLabels,
    AppSettings,
    DatabaseSettings,
    MatchingSettings,
    PluginSettings,
    Settings,
)
from mediavault.core.database import Base
from mediavault.core.dependencies import get_db, get_studio_service
from mediavault.main import app
from mediavault.services.studio import StudioService
from tests.helpers import TestDatabase

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_settings(*toggles: ApplyStudioLabels, **matching) -> Settings:
    """Build settings with the given label push toggles enabled."""
    return Settings(
        app=AppSettings(run_migrations=False),
        database=DatabaseSettings(url="sqlite:///:memory:"),
        matching=MatchingSettings(apply_studio_labels=list(toggles), **matching),
        plugins=PluginSettings(),
    )


@pytest.fixture
async def test_async_engine():
    """Create test async database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_async_session(test_async_engine):
    """Create test async database session."""
    async_session_maker = async_sessionmaker(
        test_async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    # In-memory SQLite cannot run Alembic migrations, so create tables directly
    async with test_async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with test_async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with every label push toggle enabled."""
    return make_settings(*ApplyStudioLabels)


@pytest.fixture
def studio_service(test_settings) -> StudioService:
    """Studio service without plugins."""
    return StudioService(test_settings)


@pytest.fixture
def test_database() -> Generator[TestDatabase, None, None]:
    """In-memory database driven from a dedicated event loop.

    Used by route tests to seed and inspect data around ``TestClient``
    calls.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    loop = asyncio.new_event_loop()
    database = TestDatabase(engine, loop)
    database.run(init_test_db(engine))

    yield database

    database.run(engine.dispose())
    loop.close()


@pytest.fixture
def test_client(test_database, studio_service) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""

    async def override_get_db():
        async with test_database.session_maker() as session:
            yield session

    # Override dependencies
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_studio_service] = lambda: studio_service

    with TestClient(app) as client:
        yield client

    # Clean up
    app.dependency_overrides.clear()


async def init_test_db(engine):
    """Initialize test database."""
    async with engine.begin() as conn:
        # Drop all tables first to ensure clean state
        await conn.run_sync(Base.metadata.drop_all)
        # Create all tables
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def fast_async():
    """Make all async sleep calls instant for faster tests."""
    with patch("asyncio.sleep", new_callable=AsyncMock):
        yield
