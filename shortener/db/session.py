"""
Database Engine and Session Construction

This module builds async SQLAlchemy engines and session factories.
Nothing here is a module-level singleton: the application (or a test)
constructs the engine explicitly and hands it to a RecordStore, so several
isolated stores can coexist in one process.

The database adapter pattern allows us to:
- Use SQLite by default
- Switch to PostgreSQL by changing DATABASE_URL
- Add new database backends easily
"""

from typing import Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from shortener.core.setting import Settings
from shortener.db.interface import DatabaseAdapter
from shortener.db.postgres_adapter import PostgreSQLAdapter
from shortener.db.sqlite_adapter import SQLiteAdapter


def get_database_adapter(database_url: str, settings: Optional[Settings] = None) -> DatabaseAdapter:
    """
    Factory function to get the database adapter for a connection string.

    Args:
        database_url: SQLAlchemy URL; the backend name selects the adapter
        settings: Pool sizing for server databases (defaults used when None)

    Returns:
        DatabaseAdapter instance

    Raises:
        ValueError: If the backend is not supported
    """
    backend = make_url(database_url).get_backend_name()

    if backend == "sqlite":
        return SQLiteAdapter()
    if backend == "postgresql":
        if settings is None:
            return PostgreSQLAdapter()
        return PostgreSQLAdapter(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
    raise ValueError(f"Unsupported database backend: {backend}")


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    """
    Create an async session factory bound to engine.

    Sessions are short-lived: each store operation opens one, runs a single
    statement and commits.
    """
    return async_sessionmaker(
        engine,
        class_=SQLModelAsyncSession,
        expire_on_commit=False,  # Prevents SQLAlchemy from expiring objects after commit
        autoflush=False,
    )
