"""
Redirect Service

This service handles URL redirection logic: resolve the code, then make
sure the stored value is usable as a redirect target.

Design Decisions:
- Separate service for redirect operations
- Visit accounting is not done here; the endpoint schedules it separately
  so a counting failure can never fail the redirect
"""

from shortener.core.validators import parse_redirect_target
from shortener.services.url_service import URLShorteningService


class RedirectService:
    """Service for handling URL redirections."""

    def __init__(self, url_service: URLShorteningService):
        self.url_service = url_service

    async def get_redirect_url(self, short_code: str) -> str:
        """
        Get the original URL for redirection.

        Raises:
            NotFoundError: If short_code is unknown
            UrlInvalidError: If the stored URL cannot be a redirect target
            StoreFailureError: If the lookup fails
        """
        url = await self.url_service.resolve(short_code)
        return parse_redirect_target(url)
