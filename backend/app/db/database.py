"""
Database connection and session management.

Uses SQLite with aiosqlite for async support.
"""

import os
import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def sqlite_url(path: str) -> str:
    return f"sqlite+aiosqlite:///{path}"


def create_store_engine(sqlite_path: str, busy_timeout: float = 30.0) -> AsyncEngine:
    """
    Create the async engine for a store file.
    The parent directory is created if needed; the file itself is created by
    SQLite on first connect. `busy_timeout` is how long a statement waits on
    a lock held by another connection before failing.
    """
    directory = os.path.dirname(os.path.abspath(sqlite_path))
    os.makedirs(directory, exist_ok=True)

    # Note: SQLite requires check_same_thread=False for async
    return create_async_engine(
        sqlite_url(sqlite_path),
        echo=False,  # Set to True for SQL debugging
        connect_args={"check_same_thread": False, "timeout": busy_timeout},
        poolclass=StaticPool,  # Recommended for SQLite
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def close_engine(engine: AsyncEngine) -> None:
    """
    Close database connections.
    Called on application shutdown.
    """
    await engine.dispose()
    logger.info("Database connections closed")
