"""
Database Abstraction Interface

This module defines the database abstraction layer that allows switching between
different database backends (SQLite, PostgreSQL) without changing the
rest of the codebase.

Besides engine configuration, each adapter owns the two dialect-specific
pieces of the allocation protocol:
- the upsert-on-url insert statement
- the translation of driver errors into a StoreError
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import Pool
from sqlalchemy.sql import Executable

from shortener.db.errors import StoreError, StoreErrorKind
from shortener.db.models import Record


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    To add a new database backend:
    1. Create a new class inheriting from DatabaseAdapter
    2. Implement all abstract methods
    3. Register it in get_database_adapter()
    """

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create and configure the async database engine.

        Args:
            database_url: Connection string for the database
            **kwargs: Additional engine options (merged over the adapter defaults)

        Returns:
            Configured AsyncEngine instance
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        pool_class = self.get_pool_class()
        if pool_class is not None:
            engine_kwargs["poolclass"] = pool_class

        return create_async_engine(
            database_url,
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )

    @abstractmethod
    def get_pool_class(self) -> Optional[type[Pool]]:
        """
        Get the connection pool class for this database type.

        Returns:
            Pool class, or None to use the SQLAlchemy default
        """
        pass

    @abstractmethod
    def get_connect_args(self) -> dict[str, Any]:
        """Get connection arguments specific to this database type."""
        pass

    @abstractmethod
    def get_engine_kwargs(self) -> dict[str, Any]:
        """Get additional engine configuration specific to this database type."""
        pass

    @abstractmethod
    def get_dialect_name(self) -> str:
        """
        Get the SQLAlchemy dialect name for this database.

        Returns:
            Dialect name (e.g., 'sqlite', 'postgresql')
        """
        pass

    @abstractmethod
    def insert_or_get_statement(self, code: str, url: str) -> Executable:
        """
        Build the single-statement allocation write.

        Inserts (code, url, visit_count=0). When a record for url already
        exists the statement must return that record instead of failing.
        The statement returns the full Record row either way.
        """
        pass

    @abstractmethod
    def classify_integrity_error(self, error: IntegrityError) -> StoreError:
        """
        Translate a constraint violation raised by the driver.

        Returns:
            StoreError naming the violated column where it can be determined
        """
        pass

    def classify_error(self, error: SQLAlchemyError) -> StoreError:
        """
        Translate any SQLAlchemy error into a StoreError.

        Constraint violations are delegated to classify_integrity_error;
        lost or unusable connections become UNAVAILABLE.
        """
        if isinstance(error, IntegrityError):
            return self.classify_integrity_error(error)
        if isinstance(error, (OperationalError, InterfaceError)):
            return StoreError(StoreErrorKind.UNAVAILABLE, detail=str(error))
        if isinstance(error, DBAPIError) and error.connection_invalidated:
            return StoreError(StoreErrorKind.UNAVAILABLE, detail=str(error))
        return StoreError(StoreErrorKind.OTHER, detail=str(error))

    @staticmethod
    def record_table_name() -> str:
        return Record.__tablename__
