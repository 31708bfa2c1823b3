"""Alembic environment configuration."""

import logging
import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

logger = logging.getLogger("alembic.env")

# Add parent directory to path to import mediavault modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.realpath(__file__))))

from mediavault.core.config import get_settings  # noqa: E402
from mediavault.core.database import Base  # noqa: E402

# Import all models to ensure they're registered
from mediavault.models import (  # noqa: E402, F401
    Image,
    Label,
    LabelledItem,
    Movie,
    Scene,
    Studio,
    StudioSearchDocument,
)

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Fall back to the configured database when the caller did not set a URL
if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", get_settings().database.url)

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# add your model's MetaData object here
# for 'autogenerate' support
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    This configures the context with just a URL and not an Engine, so no
    DBAPI needs to be available. Calls to context.execute() emit the given
    string to the script output.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    logger.info("Running migrations in online mode")

    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            try:
                context.run_migrations()
                logger.info("Migration transaction completed successfully")
            except Exception as e:
                logger.error(f"Migration failed during execution: {e}")
                if hasattr(e, "orig"):
                    logger.error(f"Original error: {e.orig}")
                raise


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
