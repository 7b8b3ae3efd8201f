"""
Custom Exceptions

This module defines the error taxonomy of the shortening service.
Only the final outcome of an operation crosses the service boundary;
per-attempt code collisions are handled inside the allocator.
"""

from typing import Optional

from shortener.db.errors import StoreError


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class UrlInvalidError(URLShortenerException):
    """Raised when a stored URL cannot be used as a redirect target."""

    def __init__(self, url: str, reason: str = "Failed to parse url"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class NotFoundError(URLShortenerException):
    """Raised when a short code is not found in the store."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' not found")


class CodeCollisionError(URLShortenerException):
    """A generated code already belongs to a different URL."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' already exists")


class RetryExhaustedError(URLShortenerException):
    """Raised when every allocation attempt collided on the generated code."""

    def __init__(self, url: str, attempts: int):
        self.url = url
        self.attempts = attempts
        super().__init__(f"Failed to allocate a short code after {attempts} attempts")


class StoreFailureError(URLShortenerException):
    """Raised when a store operation fails for a reason other than a code collision."""

    def __init__(self, message: str, original_error: Optional[StoreError] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
