"""Database engine and request-scoped sessions.

One process-wide async engine (asyncpg) is created at startup. Each
request gets its own session through `get_session`: the request's writes
are committed together when the route returns and rolled back together
if anything raises, so a brand and its brain are never half-written.
"""

import re
import time
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import Settings, get_settings
from app.core.logging import db_logger, get_logger

logger = get_logger(__name__)

# Where a table name shows up in asyncpg / SQLAlchemy error text
_TABLE_IN_ERROR = (
    re.compile(r'relation "([^"]+)"', re.IGNORECASE),
    re.compile(r'INSERT INTO "?([^\s"(]+)"?', re.IGNORECASE),
    re.compile(r'UPDATE "?([^\s"]+)"?', re.IGNORECASE),
    re.compile(r"table '([^']+)'", re.IGNORECASE),
)


class Base(DeclarativeBase):
    """Declarative base for brand and brand brain models."""


def to_async_url(db_url: str) -> str:
    """Point a postgres:// or postgresql:// URL at the asyncpg driver."""
    for scheme in ("postgres://", "postgresql://"):
        if db_url.startswith(scheme):
            return "postgresql+asyncpg://" + db_url[len(scheme) :]
    return db_url


def engine_options(settings: Settings) -> dict[str, Any]:
    """Pool and asyncpg connect options for create_async_engine."""
    connect_args: dict[str, Any] = {
        "timeout": settings.db_connect_timeout,
        "command_timeout": settings.db_command_timeout,
    }
    if settings.environment == "production":
        connect_args["ssl"] = "require"

    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_pre_ping": True,
        "echo": settings.debug,
        "connect_args": connect_args,
    }


def table_from_error(error: Exception) -> str | None:
    """Best-effort table name from a database error message."""
    message = str(error)
    for pattern in _TABLE_IN_ERROR:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


class DatabaseManager:
    """Owns the engine and session factory for the life of the process."""

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init_db() first.")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call init_db() first.")
        return self._session_factory

    def init_db(self, settings: Settings | None = None) -> None:
        """Create the engine and session factory from settings."""
        settings = settings or get_settings()
        db_url = to_async_url(str(settings.database_url))

        try:
            self._engine = create_async_engine(db_url, **engine_options(settings))
        except Exception as e:
            db_logger.connection_error(e, db_url)
            raise

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info(
            "Database engine initialized",
            extra={"pool_size": settings.db_pool_size, "environment": settings.environment},
        )

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database connections closed")

    async def check_connection(self) -> bool:
        """Run SELECT 1; False (and an error log) if the database is unreachable."""
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
        except Exception as e:
            db_logger.connection_error(e, str(get_settings().database_url))
            return False
        return True


db_manager = DatabaseManager()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency yielding the request's session.

    Commits when the route returns normally. Any exception rolls back
    everything the request flushed and is re-raised. Routes that turn a
    failure into an error response roll back themselves before returning.
    """
    threshold_ms = get_settings().db_slow_query_threshold_ms

    async with db_manager.session_factory() as session:
        start_time = time.monotonic()
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            db_logger.transaction_failure(
                e,
                table=table_from_error(e),
                context="Request session rolled back after database error",
            )
            raise
        except Exception:
            await session.rollback()
            raise
        finally:
            duration_ms = (time.monotonic() - start_time) * 1000
            if duration_ms > threshold_ms:
                db_logger.slow_query(query="request_transaction", duration_ms=duration_ms)
