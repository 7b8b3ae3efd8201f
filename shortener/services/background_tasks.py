"""
Background Task Helpers

Visit accounting runs after the redirect response has been produced.
Failures are logged and swallowed here: a visit that cannot be counted
must never turn into an error for the visitor.
"""

import logging

from shortener.core.exceptions import StoreFailureError
from shortener.services.url_service import URLShorteningService

logger = logging.getLogger(__name__)


async def record_visit_background(url_service: URLShorteningService, short_code: str) -> None:
    """
    Background task to increment the visit count of short_code.

    Args:
        url_service: Service owning the store
        short_code: The short code that was visited
    """
    try:
        counted = await url_service.record_visit(short_code)
    except StoreFailureError as e:
        logger.error(f"Failed to increase visit count for {short_code}: {e}", exc_info=True)
        return

    if not counted:
        logger.warning(f"Visit for {short_code} not counted: no such record")
