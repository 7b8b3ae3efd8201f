"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Rate limiting
- Mapping service errors to HTTP responses
- Delegating to the service layer

Error mapping:
- UrlInvalidError     -> 500 (a stored value could not be redirected to)
- NotFoundError       -> 404
- RetryExhaustedError -> 503 (transient, the client may retry)
- StoreFailureError   -> 500 (details are logged, not returned)
"""

import logging

from fastapi import APIRouter, Request, Depends, HTTPException, BackgroundTasks, status
from fastapi.responses import RedirectResponse

from shortener.api.schemas import ShortenRequest, ShortenResponse, StatsResponse
from shortener.core.exceptions import (
    NotFoundError,
    RetryExhaustedError,
    StoreFailureError,
    UrlInvalidError,
)
from shortener.core.rate_limit import limiter, RATE_LIMITS
from shortener.core.validators import sanitize_short_code
from shortener.services.background_tasks import record_visit_background
from shortener.services.redirect_service import RedirectService
from shortener.services.stats_service import StatsService
from shortener.services.url_service import URLShorteningService

logger = logging.getLogger(__name__)

router = APIRouter()

STORE_FAILURE_DETAIL = "Oops! Something went wrong."
RETRY_DETAIL = "Please try again."


def get_url_service(request: Request) -> URLShorteningService:
    """Dependency returning the service created at application startup."""
    return request.app.state.url_service


def _valid_code_or_400(short_code: str) -> str:
    sanitized_code = sanitize_short_code(short_code)
    if not sanitized_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid short code format: '{short_code}'. Short codes must contain only alphanumeric characters."
        )
    return sanitized_code


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description="Takes a long URL and returns a shortened version; the same URL always gets the same code"
)
@limiter.limit(RATE_LIMITS["shorten"])
async def create_short_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    body: ShortenRequest,
    url_service: URLShorteningService = Depends(get_url_service)
) -> ShortenResponse:
    """Create a short URL, or return the existing one for an already shortened URL."""
    try:
        short_code = await url_service.allocate(body.url)
    except RetryExhaustedError as e:
        logger.warning(f"Failed to shorten {body.url!r}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=RETRY_DETAIL
        )
    except StoreFailureError as e:
        logger.warning(f"Failed to shorten {body.url!r}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=STORE_FAILURE_DETAIL
        )

    base_url = request.app.state.settings.BASE_URL.rstrip("/")
    return ShortenResponse(
        short_code=short_code,
        short_url=f"{base_url}/{short_code}",
        original_url=body.url
    )


@router.get(
    "/stats/{short_code}",
    response_model=StatsResponse,
    summary="Get URL statistics",
    description="Returns the original URL and raw visit count for a short code"
)
@limiter.limit(RATE_LIMITS["stats"])
async def get_url_stats(
    short_code: str,
    request: Request,  # Required for rate limiting
    url_service: URLShorteningService = Depends(get_url_service)
) -> StatsResponse:
    """
    Get statistics for a short URL.

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
        HTTPException 429: If rate limit exceeded
    """
    short_code = _valid_code_or_400(short_code)

    try:
        stats = await StatsService(url_service).get_stats(short_code)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreFailureError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=STORE_FAILURE_DETAIL
        )

    return StatsResponse(**stats)


@router.get(
    "/{short_code}",
    status_code=status.HTTP_308_PERMANENT_REDIRECT,
    summary="Redirect to original URL",
    description="Takes a short code and permanently redirects to the original long URL"
)
@limiter.limit(RATE_LIMITS["redirect"])
async def redirect_to_url(
    short_code: str,
    request: Request,
    background_tasks: BackgroundTasks,
    url_service: URLShorteningService = Depends(get_url_service)
) -> RedirectResponse:
    """
    Redirect to the original URL for a given short code.

    The visit is counted in a background task after the response is built;
    a counting failure is logged and never changes the response.

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
        HTTPException 429: If rate limit exceeded
        HTTPException 500: If the stored URL is unusable or the store fails
    """
    short_code = _valid_code_or_400(short_code)

    try:
        original_url = await RedirectService(url_service).get_redirect_url(short_code)
    except NotFoundError as e:
        logger.warning(f"Failed to get url for {short_code}: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except UrlInvalidError as e:
        logger.warning(f"Failed to parse url {e.url!r} stored for {short_code}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except StoreFailureError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=STORE_FAILURE_DETAIL
        )

    background_tasks.add_task(record_visit_background, url_service, short_code)

    return RedirectResponse(
        url=original_url,
        status_code=status.HTTP_308_PERMANENT_REDIRECT
    )
