"""Shared pytest fixtures: a fresh SQLite store per test, services and an API client."""

from typing import AsyncGenerator, Iterable, Optional

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from shortener.core.setting import Settings
from shortener.db.session import get_database_adapter
from shortener.db.store import RecordStore
from shortener.main import create_app
from shortener.services.code_generator import generate_code
from shortener.services.url_service import URLShorteningService


class ScriptedCodes:
    """
    Code generator that hands out a fixed sequence first.

    Once the script is used up it falls back to random codes. Every code
    handed out is kept in `issued`.
    """

    def __init__(self, codes: Iterable[str]):
        self._script = list(codes)
        self.issued: list[str] = []

    def __call__(self) -> str:
        code = self._script.pop(0) if self._script else generate_code()
        self.issued.append(code)
        return code


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'shortener.db'}"


@pytest_asyncio.fixture
async def store(database_url: str) -> AsyncGenerator[RecordStore, None]:
    adapter = get_database_adapter(database_url)
    record_store = RecordStore(adapter.create_engine(database_url), adapter)
    await record_store.create_schema()
    yield record_store
    await record_store.dispose()


@pytest.fixture
def make_service(store: RecordStore):
    """Build a service on the test store, optionally with scripted codes."""
    def _make(codes: Optional[Iterable[str]] = None, max_attempts: int = 2) -> URLShorteningService:
        generate = ScriptedCodes(codes) if codes is not None else None
        return URLShorteningService(store, generate=generate, max_attempts=max_attempts)
    return _make


@pytest.fixture
def url_service(make_service) -> URLShorteningService:
    return make_service()


@pytest.fixture
def app(database_url: str, url_service: URLShorteningService) -> FastAPI:
    settings = Settings(
        DATABASE_URL=database_url,
        BASE_URL="http://sho.rt",
        RATE_LIMIT_ENABLED=False,
    )
    application = create_app(settings)
    # ASGITransport does not run the lifespan; inject the service directly
    application.state.url_service = url_service
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
