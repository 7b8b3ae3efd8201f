"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

SQLite is a file-based database that's perfect for:
- Local development
- Testing
- Single-instance deployments

Key characteristics:
- File-based (single .db file)
- Single writer at a time (file locking)
- UPSERT and RETURNING need SQLite 3.35 or newer
"""

import re
from typing import Any

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import NullPool
from sqlalchemy.sql import Executable

from shortener.db.errors import StoreError, StoreErrorKind
from shortener.db.interface import DatabaseAdapter
from shortener.db.models import Record

# e.g. "UNIQUE constraint failed: record.code"
_UNIQUE_FAILED = re.compile(r"UNIQUE constraint failed: (?P<table>\w+)\.(?P<column>\w+)")


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    SQLite reports constraint failures only through the error message, so
    classification parses the "UNIQUE constraint failed: table.column" text.
    """

    def get_pool_class(self) -> type[NullPool]:
        """
        Get the connection pool class for SQLite.

        SQLite uses NullPool because:
        - File-based database doesn't benefit from connection pooling
        - SQLite handles one writer at a time (file locking)

        Returns:
            NullPool class
        """
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False,
            "timeout": 30,  # seconds to wait on the write lock
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def get_dialect_name(self) -> str:
        return "sqlite"

    def insert_or_get_statement(self, code: str, url: str) -> Executable:
        table = Record.__table__
        statement = sqlite_insert(table).values(code=code, url=url, visit_count=0)
        # No-op update so RETURNING yields the existing row on a url conflict
        return statement.on_conflict_do_update(
            index_elements=[table.c.url],
            set_={"url": statement.excluded.url},
        ).returning(table.c.code, table.c.url, table.c.visit_count)

    def classify_integrity_error(self, error: IntegrityError) -> StoreError:
        message = str(error.orig)
        match = _UNIQUE_FAILED.search(message)
        if match and match.group("table") == self.record_table_name():
            return StoreError(
                StoreErrorKind.UNIQUE_VIOLATION,
                constraint=match.group("column"),
                detail=message,
            )
        return StoreError(StoreErrorKind.OTHER, detail=message)
