"""
Record Store

The thin store adapter the shortening service talks to. Every method runs a
single statement in its own short transaction and reports failures as
StoreError, so callers never see driver exceptions.

Concurrency:
- Uniqueness of code and url is enforced by the table constraints,
  not by any in-process lock
- The engine's connection pool is the only shared resource and is safe
  for concurrent use
"""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import SQLModel

from shortener.db.errors import StoreError
from shortener.db.interface import DatabaseAdapter
from shortener.db.models import Record
from shortener.db.session import create_session_maker

logger = logging.getLogger(__name__)


class RecordStore:
    """
    Persistent store for Record rows.

    Owns a session factory built on an injected engine; dispose() releases
    the engine's pool.
    """

    def __init__(self, engine: AsyncEngine, adapter: DatabaseAdapter):
        self.engine = engine
        self.adapter = adapter
        self._session_maker = create_session_maker(engine)

    async def create_schema(self) -> None:
        """Create the record table if it does not exist."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all, tables=[Record.__table__])
        except SQLAlchemyError as e:
            raise self.adapter.classify_error(e) from e
        logger.info("Record table ready")

    async def insert_or_get(self, code: str, url: str) -> Record:
        """
        Insert (code, url) or return the record already stored for url.

        Raises:
            StoreError: On any failure, including a code collision with a
                record for a different URL
        """
        statement = self.adapter.insert_or_get_statement(code, url)
        async with self._session_maker() as session:
            try:
                result = await session.execute(statement)
                row = result.one()
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise self.adapter.classify_error(e) from e

        return Record(code=row.code, url=row.url, visit_count=row.visit_count)

    async def get(self, code: str) -> Optional[Record]:
        """Point lookup by code."""
        statement = select(Record).where(Record.code == code)
        async with self._session_maker() as session:
            try:
                result = await session.execute(statement)
                return result.scalar_one_or_none()
            except SQLAlchemyError as e:
                raise self.adapter.classify_error(e) from e

    async def get_by_url(self, url: str) -> Optional[Record]:
        statement = select(Record).where(Record.url == url)
        async with self._session_maker() as session:
            try:
                result = await session.execute(statement)
                return result.scalar_one_or_none()
            except SQLAlchemyError as e:
                raise self.adapter.classify_error(e) from e

    async def increment_visits(self, code: str) -> bool:
        """
        Atomically add one to the visit counter of code.

        Returns:
            True if a record was updated, False if code does not exist
        """
        # Database-level increment; a read-modify-write would lose updates
        statement = (
            update(Record)
            .where(Record.code == code)
            .values(visit_count=Record.visit_count + 1)
            .execution_options(synchronize_session=False)
        )
        async with self._session_maker() as session:
            try:
                result = await session.execute(statement)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise self.adapter.classify_error(e) from e

        return result.rowcount > 0

    async def dispose(self) -> None:
        await self.engine.dispose()


__all__ = ["RecordStore", "StoreError"]
