"""
PostgreSQL Database Adapter

Implements the DatabaseAdapter interface for PostgreSQL through asyncpg.
Intended for production deployments with many concurrent writers; the
record table's constraints resolve every allocation race.
"""

import re
from typing import Any, Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.sql import Executable

from shortener.db.errors import StoreError, StoreErrorKind
from shortener.db.interface import DatabaseAdapter
from shortener.db.models import Record

UNIQUE_VIOLATION_SQLSTATE = "23505"

# e.g. "Key (code)=(Ab3dE9) already exists."
_KEY_DETAIL = re.compile(r"Key \((?P<column>\w+)\)=\(.*\) already exists")

# Default constraint names PostgreSQL generates for the record table
CONSTRAINT_COLUMNS = {
    "record_pkey": "code",
    "record_url_key": "url",
}


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL (asyncpg) adapter with a real connection pool."""

    def __init__(self, pool_size: int = 20, max_overflow: int = 10):
        self.pool_size = pool_size
        self.max_overflow = max_overflow

    def get_pool_class(self) -> None:
        # AsyncAdaptedQueuePool, SQLAlchemy's default for async engines
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_pre_ping": True,
        }

    def get_dialect_name(self) -> str:
        return "postgresql"

    def insert_or_get_statement(self, code: str, url: str) -> Executable:
        table = Record.__table__
        statement = pg_insert(table).values(code=code, url=url, visit_count=0)
        return statement.on_conflict_do_update(
            index_elements=[table.c.url],
            set_={"url": statement.excluded.url},
        ).returning(table.c.code, table.c.url, table.c.visit_count)

    def classify_integrity_error(self, error: IntegrityError) -> StoreError:
        driver_error = _driver_error(error)
        detail = getattr(driver_error, "detail", None) or str(error.orig)

        sqlstate = getattr(driver_error, "sqlstate", None) or getattr(error.orig, "sqlstate", None)
        if sqlstate is not None and sqlstate != UNIQUE_VIOLATION_SQLSTATE:
            return StoreError(StoreErrorKind.OTHER, detail=detail)

        column = CONSTRAINT_COLUMNS.get(getattr(driver_error, "constraint_name", None) or "")
        if column is None:
            match = _KEY_DETAIL.search(detail)
            column = match.group("column") if match else None

        if column is None:
            return StoreError(StoreErrorKind.OTHER, detail=detail)
        return StoreError(StoreErrorKind.UNIQUE_VIOLATION, constraint=column, detail=detail)


def _driver_error(error: IntegrityError) -> Optional[BaseException]:
    """
    Dig the asyncpg exception out of SQLAlchemy's wrapper.

    SQLAlchemy wraps asyncpg errors in its DBAPI adaptation layer and keeps
    the original asyncpg exception as the cause.
    """
    orig = error.orig
    return getattr(orig, "__cause__", None) or orig
