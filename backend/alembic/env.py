"""Alembic environment for the brands / brand_brains schema.

The URL always comes from DATABASE_URL (via settings), never alembic.ini,
and online migrations run over asyncpg with the app's connect options.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.config import get_settings
from app.core.database import Base, engine_options, to_async_url
from app.core.logging import db_logger

# Registers the tables on Base.metadata
from app.models import Brand, BrandBrain  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def database_url() -> str:
    return to_async_url(str(get_settings().database_url))


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    context.configure(
        url=database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    head = context.get_head_revision()
    version = str(head) if head else "initial"
    db_logger.migration_start(version=version, description=f"Upgrading to {head or 'head'}")

    connect_args = engine_options(get_settings())["connect_args"]
    engine = create_async_engine(database_url(), poolclass=pool.NullPool, connect_args=connect_args)

    success = False
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
        success = True
    finally:
        db_logger.migration_end(version=version, success=success)
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
