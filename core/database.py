"""
SQLAlchemy async database client for the roster bot.

Provides async connection management using SQLAlchemy Core with asyncpg.
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from .config import get_database_url, get_max_db_connections
from .tables import metadata  # noqa: F401 - exported for Alembic

# Module-level engine (created on first use)
_engine: AsyncEngine | None = None


def _get_database_url() -> str:
    """
    Construct async database URL from the configured connection string.

    For asyncpg, we need:
        postgresql+asyncpg://...
    """
    database_url = get_database_url()

    # Convert postgresql:// to postgresql+asyncpg://
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    return database_url


def get_engine() -> AsyncEngine:
    """Get or create the async SQLAlchemy engine singleton."""
    global _engine
    if _engine is None:
        database_url = _get_database_url()
        max_connections = get_max_db_connections()
        _engine = create_async_engine(
            database_url,
            echo=os.environ.get("SQL_ECHO", "").lower() == "true",
            # Fixed-size pool: MAX_DB_CONNECTIONS is both floor and ceiling
            pool_size=max_connections,
            max_overflow=0,
            pool_timeout=30,
            pool_recycle=1800,  # Recycle connections every 30 minutes
        )
    return _engine


def set_engine(engine: AsyncEngine | None) -> None:
    """Replace the engine singleton. Used by tests to inject a per-test engine."""
    global _engine
    _engine = engine


@asynccontextmanager
async def get_connection() -> AsyncGenerator[AsyncConnection, None]:
    """
    Get an async database connection from the pool.

    Usage:
        async with get_connection() as conn:
            result = await conn.execute(select(notification_settings))
            row = result.mappings().first()
    """
    engine = get_engine()
    async with engine.connect() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncConnection, None]:
    """
    Get an async database connection with automatic transaction management.
    Commits on success, rolls back on exception.

    Usage:
        async with get_transaction() as conn:
            await conn.execute(insert(notification_settings).values(...))
            # Auto-commits if no exception
    """
    engine = get_engine()
    async with engine.begin() as conn:
        yield conn


async def ping() -> None:
    """
    Run a trivial query to check the database is reachable.

    Raises whatever the driver raises; callers decide how to report it.
    """
    async with get_connection() as conn:
        await conn.execute(text("SELECT 1"))


async def close_engine() -> None:
    """Close the engine and all connections. Call on shutdown."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def get_sync_database_url() -> str:
    """
    Get the psycopg2 URL Alembic migrates with.

    Raises:
        ConfigurationError: If DATABASE_URL is not set
    """
    database_url = get_database_url()
    return database_url.replace("postgresql+asyncpg://", "postgresql://", 1)
