"""
FastAPI Application Entry Point

This module builds the FastAPI application and configures:
- API routes
- Middleware (logging, CORS)
- Rate limiting
- The store and shortening service, created on startup and disposed on shutdown

Run with:
    uvicorn shortener.main:app
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shortener.api import endpoints
from shortener.core.logging_config import setup_logging
from shortener.core.rate_limit import limiter
from shortener.core.setting import Settings, settings as default_settings
from shortener.db.session import get_database_adapter
from shortener.db.store import RecordStore
from shortener.middleware.logging import add_logging_middleware
from shortener.services.code_generator import code_generator
from shortener.services.url_service import URLShorteningService

logger = logging.getLogger(__name__)


def build_url_service(settings: Settings) -> URLShorteningService:
    """
    Construct the store and the shortening service for settings.

    The engine is created here and owned by the returned service's store;
    nothing is cached at module level.
    """
    adapter = get_database_adapter(settings.DATABASE_URL, settings)
    engine = adapter.create_engine(settings.DATABASE_URL)
    store = RecordStore(engine, adapter)
    return URLShorteningService(
        store,
        generate=code_generator(settings.SHORT_CODE_LENGTH, settings.SHORT_CODE_ALPHABET),
        max_attempts=settings.MAX_ALLOCATION_ATTEMPTS,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Configuration to use (default: loaded from the environment)
    """
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        url_service = build_url_service(settings)
        if settings.SCHEMA_BOOTSTRAP:
            await url_service.store.create_schema()
        app.state.url_service = url_service
        logger.info(f"Connected to database: {url_service.store.adapter.get_dialect_name()}")
        try:
            yield
        finally:
            await url_service.store.dispose()
            logger.info("Database connections closed")

    app = FastAPI(
        title="URL Shortener Service",
        description="Maps long URLs to short random codes and counts visits",
        version="1.0.0",
        docs_url="/docs",  # Swagger UI documentation
        redoc_url="/redoc",  # ReDoc documentation
        lifespan=lifespan,
    )
    app.state.settings = settings

    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health endpoints defined before router to match before catch-all route
    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint for health checks."""
        return {
            "message": "URL Shortener Service",
            "version": "1.0.0",
            "docs": "/docs"
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for monitoring."""
        return {"status": "healthy"}

    app.include_router(endpoints.router, tags=["URL Shortener"])

    return app


app = create_app()
