"""
Statistics Service

Exposes the raw visit counter of a short URL. There is no further
analytics: no per-visit log, no time series.
"""

from shortener.services.url_service import URLShorteningService


class StatsService:
    """Service for retrieving URL statistics."""

    def __init__(self, url_service: URLShorteningService):
        self.url_service = url_service

    async def get_stats(self, short_code: str) -> dict:
        """
        Get statistics for a short URL.

        Returns:
            Dictionary with:
            - short_code: The short code
            - original_url: The original long URL
            - visit_count: Total number of recorded visits

        Raises:
            NotFoundError: If short_code is unknown
        """
        record = await self.url_service.get_record(short_code)

        return {
            "short_code": record.code,
            "original_url": record.url,
            "visit_count": record.visit_count,
        }
