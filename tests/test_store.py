"""
Tests for the record store and the dialect adapters' error classification.
"""

import sqlite3

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from shortener.db.errors import StoreError, StoreErrorKind
from shortener.db.postgres_adapter import PostgreSQLAdapter
from shortener.db.session import get_database_adapter
from shortener.db.sqlite_adapter import SQLiteAdapter


def _integrity_error(orig: BaseException) -> IntegrityError:
    return IntegrityError("INSERT INTO record ...", {}, orig)


class FakeUniqueViolation(Exception):
    """Shape of asyncpg.exceptions.UniqueViolationError."""
    sqlstate = "23505"

    def __init__(self, constraint_name, detail):
        super().__init__("duplicate key value violates unique constraint")
        self.constraint_name = constraint_name
        self.detail = detail


class FakeNotNullViolation(Exception):
    sqlstate = "23502"
    constraint_name = None
    detail = None


def _wrapped(driver_error: Exception) -> IntegrityError:
    """Mimic SQLAlchemy's asyncpg adaptation: the driver error is the cause."""
    adapted = Exception(str(driver_error))
    adapted.__cause__ = driver_error
    return _integrity_error(adapted)


class TestAdapterFactory:

    def test_sqlite_url(self):
        assert isinstance(get_database_adapter("sqlite+aiosqlite:///./x.db"), SQLiteAdapter)

    def test_postgres_url(self):
        adapter = get_database_adapter("postgresql+asyncpg://u:p@localhost/db")
        assert isinstance(adapter, PostgreSQLAdapter)
        assert adapter.get_dialect_name() == "postgresql"

    def test_unsupported_url(self):
        with pytest.raises(ValueError):
            get_database_adapter("mysql+aiomysql://u:p@localhost/db")


class TestSQLiteClassification:

    def setup_method(self):
        self.adapter = SQLiteAdapter()

    def test_code_collision(self):
        error = _integrity_error(sqlite3.IntegrityError("UNIQUE constraint failed: record.code"))
        store_error = self.adapter.classify_error(error)

        assert store_error.kind is StoreErrorKind.UNIQUE_VIOLATION
        assert store_error.constraint == "code"

    def test_url_conflict(self):
        error = _integrity_error(sqlite3.IntegrityError("UNIQUE constraint failed: record.url"))
        assert self.adapter.classify_error(error).is_unique_violation("url")

    def test_other_table_is_not_a_collision(self):
        error = _integrity_error(sqlite3.IntegrityError("UNIQUE constraint failed: other.code"))
        assert self.adapter.classify_error(error).kind is StoreErrorKind.OTHER

    def test_not_null_is_other(self):
        error = _integrity_error(sqlite3.IntegrityError("NOT NULL constraint failed: record.url"))
        assert self.adapter.classify_error(error).kind is StoreErrorKind.OTHER

    def test_operational_error_is_unavailable(self):
        error = OperationalError("SELECT 1", {}, sqlite3.OperationalError("unable to open database file"))
        assert self.adapter.classify_error(error).kind is StoreErrorKind.UNAVAILABLE

    def test_programming_error_is_other(self):
        error = ProgrammingError("SELECT 1", {}, sqlite3.ProgrammingError("bad parameter"))
        assert self.adapter.classify_error(error).kind is StoreErrorKind.OTHER


class TestPostgreSQLClassification:

    def setup_method(self):
        self.adapter = PostgreSQLAdapter()

    def test_primary_key_constraint_is_code(self):
        error = _wrapped(FakeUniqueViolation("record_pkey", "Key (code)=(Ab3dE9) already exists."))
        store_error = self.adapter.classify_error(error)

        assert store_error.is_unique_violation("code")
        assert store_error.detail == "Key (code)=(Ab3dE9) already exists."

    def test_url_constraint(self):
        error = _wrapped(FakeUniqueViolation("record_url_key", "Key (url)=(https://a.b) already exists."))
        assert self.adapter.classify_error(error).is_unique_violation("url")

    def test_falls_back_to_detail(self):
        error = _wrapped(FakeUniqueViolation(None, "Key (code)=(Ab3dE9) already exists."))
        assert self.adapter.classify_error(error).is_unique_violation("code")

    def test_other_sqlstate(self):
        error = _wrapped(FakeNotNullViolation())
        assert self.adapter.classify_error(error).kind is StoreErrorKind.OTHER

    def test_unknown_constraint(self):
        error = _wrapped(FakeUniqueViolation("some_other_key", "no detail"))
        assert self.adapter.classify_error(error).kind is StoreErrorKind.OTHER


class TestRecordStore:
    """Store operations against a temporary SQLite database."""

    async def test_insert_returns_new_record(self, store):
        record = await store.insert_or_get("Ab3dE9", "https://example.com/a")

        assert record.code == "Ab3dE9"
        assert record.url == "https://example.com/a"
        assert record.visit_count == 0

    async def test_insert_existing_url_returns_existing_record(self, store):
        await store.insert_or_get("Ab3dE9", "https://example.com/a")

        record = await store.insert_or_get("Zz9yX8", "https://example.com/a")

        assert record.code == "Ab3dE9"
        assert await store.get("Zz9yX8") is None

    async def test_insert_colliding_code_raises(self, store):
        await store.insert_or_get("Ab3dE9", "https://example.com/a")

        with pytest.raises(StoreError) as excinfo:
            await store.insert_or_get("Ab3dE9", "https://example.com/b")

        assert excinfo.value.is_unique_violation("code")

    async def test_get_and_get_by_url(self, store):
        await store.insert_or_get("Ab3dE9", "https://example.com/a")

        assert (await store.get("Ab3dE9")).url == "https://example.com/a"
        assert (await store.get_by_url("https://example.com/a")).code == "Ab3dE9"
        assert await store.get("nope00") is None
        assert await store.get_by_url("https://example.com/none") is None

    async def test_increment_visits(self, store):
        await store.insert_or_get("Ab3dE9", "https://example.com/a")

        assert await store.increment_visits("Ab3dE9") is True
        assert await store.increment_visits("nope00") is False
        assert (await store.get("Ab3dE9")).visit_count == 1

    async def test_create_schema_is_idempotent(self, store):
        await store.insert_or_get("Ab3dE9", "https://example.com/a")

        await store.create_schema()

        assert (await store.get("Ab3dE9")) is not None
