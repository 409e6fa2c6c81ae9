"""
Async PostgreSQL access for SWAB Server (SQLAlchemy Core + asyncpg).

One engine per process, created lazily from DATABASE_URL. Callers borrow
connections with get_connection() for reads and get_transaction() for writes.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from .tables import metadata  # noqa: F401 - exported for Alembic

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None


class DatabaseNotConfigured(ValueError):
    """DATABASE_URL is missing."""


# Schemes accepted in DATABASE_URL, mapped to the async driver URL prefix
_ASYNC_SCHEMES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
}


def _get_database_url() -> str:
    """
    DATABASE_URL rewritten for asyncpg.

    Supabase and most hosts hand out postgres:// or postgresql:// URLs.
    """
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise DatabaseNotConfigured(
            "DATABASE_URL environment variable must be set. "
            "Get your connection string from Supabase Dashboard > Settings > Database > Connection string"
        )

    for scheme, async_scheme in _ASYNC_SCHEMES.items():
        if database_url.startswith(scheme):
            return async_scheme + database_url[len(scheme):]
    return database_url


def get_engine() -> AsyncEngine:
    """Get or create the process-wide async engine."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            _get_database_url(),
            echo=os.environ.get("SQL_ECHO", "").lower() == "true",
            pool_size=int(os.environ.get("DB_POOL_SIZE", "5")),
            max_overflow=5,
            pool_timeout=30,
            pool_pre_ping=True,  # Scheduler may sit idle for days between firings
            pool_recycle=1800,
        )
    return _engine


@asynccontextmanager
async def get_connection() -> AsyncGenerator[AsyncConnection, None]:
    """
    Borrow a pooled connection for reads.

    Usage:
        async with get_connection() as conn:
            rows = await list_active_notifications(conn)
    """
    async with get_engine().connect() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncConnection, None]:
    """Borrow a connection inside a transaction. Commits on success, rolls back on exception."""
    async with get_engine().begin() as conn:
        yield conn


async def check_connection() -> bool:
    """Run SELECT 1. Used by the health endpoint."""
    try:
        async with get_connection() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError, DatabaseNotConfigured) as e:
        logger.warning(f"Database health check failed: {e}")
        return False
    return True


async def close_engine() -> None:
    """Dispose the engine and its pool. Call on shutdown."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def get_sync_database_url() -> str:
    """
    DATABASE_URL for Alembic, which runs synchronously on psycopg2.
    """
    database_url = os.environ.get("DATABASE_URL", "")

    if database_url.startswith("postgresql+asyncpg://"):
        return database_url.replace("postgresql+asyncpg://", "postgresql://", 1)
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql://", 1)
    if database_url.startswith("postgresql://"):
        return database_url

    raise DatabaseNotConfigured("DATABASE_URL must be set for migrations")
