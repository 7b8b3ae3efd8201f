"""
URL Shortening Service

This service handles the core business logic for URL shortening:
- Allocating a random short code for a URL with a single atomic upsert
- Retrying a bounded number of times when the random code collides
- Resolving codes back to URLs
- Recording visits

Design Decisions:
- Random codes: no shared counter between instances
- Upsert on url: re-submitting a URL returns its existing code; concurrent
  submissions of the same URL converge on one row without any local lock
- Bounded retry: a code collision is retried with a fresh code, at most
  MAX_ALLOCATION_ATTEMPTS writes in total
- Collisions are detected from the store's StoreError shape, never from
  driver internals

Outcome per write attempt:

    success          -> return code
    code collision   -> next attempt (or RetryExhaustedError)
    url conflict     -> return the code already stored for url
    anything else    -> StoreFailureError, no retry
"""

import logging
from enum import Enum
from typing import Optional

from shortener.core.exceptions import (
    CodeCollisionError,
    NotFoundError,
    RetryExhaustedError,
    StoreFailureError,
)
from shortener.db.errors import StoreError
from shortener.db.models import Record
from shortener.db.store import RecordStore
from shortener.services.code_generator import CodeGenerator, code_generator

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 2


class AllocationState(Enum):
    FIRST_ATTEMPT = "first_attempt"
    RETRY_ATTEMPT = "retry_attempt"
    EXHAUSTED = "exhausted"


class AllocationAttempts:
    """
    Retry bound for one allocation.

    FIRST_ATTEMPT -> RETRY_ATTEMPT (repeated while attempts remain) -> EXHAUSTED.
    With max_attempts=2 there is exactly one retry.
    """

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.attempt = 1
        self.state = AllocationState.FIRST_ATTEMPT

    def collided(self) -> AllocationState:
        """Record a code collision on the current attempt and advance."""
        if self.state is AllocationState.EXHAUSTED:
            raise RuntimeError("allocation already exhausted")

        if self.attempt >= self.max_attempts:
            self.state = AllocationState.EXHAUSTED
        else:
            self.attempt += 1
            self.state = AllocationState.RETRY_ATTEMPT
        return self.state

    @property
    def exhausted(self) -> bool:
        return self.state is AllocationState.EXHAUSTED


class WriteFailure(Enum):
    CODE_COLLISION = "code_collision"
    URL_CONFLICT = "url_conflict"
    STORE_FAILURE = "store_failure"


def classify_write_failure(error: StoreError) -> WriteFailure:
    """
    Decide how allocate() reacts to a failed insert.

    Only a uniqueness violation on the code column is a collision; a
    violation on url means another writer stored the same URL first.
    """
    if error.is_unique_violation("code"):
        return WriteFailure.CODE_COLLISION
    if error.is_unique_violation("url"):
        return WriteFailure.URL_CONFLICT
    return WriteFailure.STORE_FAILURE


class URLShorteningService:
    """
    Core business logic for URL shortening.

    Stateless between calls: the injected store is the only shared resource,
    so one instance can serve any number of concurrent requests.
    """

    def __init__(
        self,
        store: RecordStore,
        generate: Optional[CodeGenerator] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS
    ):
        """
        Initialize the URL shortening service.

        Args:
            store: Record store used for every operation
            generate: Zero-argument code generator (default: 6 random base62 chars)
            max_attempts: Insert attempts per allocation (default: 2, one retry)
        """
        self.store = store
        self.generate = generate or code_generator()
        self.max_attempts = max_attempts

    async def allocate(self, url: str) -> str:
        """
        Store url under a new random code, or return its existing code.

        Args:
            url: Any non-empty string; syntax is not checked here

        Returns:
            The code mapped to url, present in the store

        Raises:
            RetryExhaustedError: Every attempt collided on the generated code
            StoreFailureError: Any other store failure
        """
        attempts = AllocationAttempts(self.max_attempts)

        while True:
            code = self.generate()
            try:
                return await self._try_insert(code, url)
            except CodeCollisionError:
                state = attempts.collided()
                if state is AllocationState.EXHAUSTED:
                    logger.warning(
                        f"Giving up on {url!r}: code collided on all {attempts.max_attempts} attempts"
                    )
                    raise RetryExhaustedError(url, attempts.max_attempts)
                logger.warning(f"Code {code} already taken, retrying with a new code")

    async def _try_insert(self, code: str, url: str) -> str:
        """
        One allocation write.

        Raises:
            CodeCollisionError: code belongs to another URL
            StoreFailureError: Any other store failure
        """
        try:
            record = await self.store.insert_or_get(code, url)
            return record.code
        except StoreError as e:
            failure = classify_write_failure(e)
            if failure is WriteFailure.CODE_COLLISION:
                raise CodeCollisionError(code) from e
            if failure is WriteFailure.URL_CONFLICT:
                return await self._existing_code(url, e)
            logger.error(f"Failed to insert record for {url!r}: {e}", exc_info=True)
            raise StoreFailureError(f"Failed to shorten url: {e.kind.value}", original_error=e) from e

    async def _existing_code(self, url: str, conflict: StoreError) -> str:
        try:
            existing = await self.store.get_by_url(url)
        except StoreError as e:
            raise StoreFailureError(f"Failed to read existing record: {e.kind.value}", original_error=e) from e
        if existing is None:
            raise StoreFailureError("url conflict without an existing record", original_error=conflict)
        return existing.code

    async def get_record(self, code: str) -> Record:
        """
        Point lookup of the record stored under code.

        Raises:
            NotFoundError: No record has this code
            StoreFailureError: The lookup itself failed
        """
        try:
            record = await self.store.get(code)
        except StoreError as e:
            logger.error(f"Failed to look up {code}: {e}", exc_info=True)
            raise StoreFailureError(f"Failed to resolve code: {e.kind.value}", original_error=e) from e

        if record is None:
            raise NotFoundError(code)
        return record

    async def resolve(self, code: str) -> str:
        """Return the URL stored for code (NotFoundError when absent)."""
        record = await self.get_record(code)
        return record.url

    async def record_visit(self, code: str) -> bool:
        """
        Increment the visit counter of code.

        Returns:
            True if a record was updated, False if code does not exist

        Raises:
            StoreFailureError: The update failed
        """
        try:
            return await self.store.increment_visits(code)
        except StoreError as e:
            raise StoreFailureError(f"Failed to record visit: {e.kind.value}", original_error=e) from e
