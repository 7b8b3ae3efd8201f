"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs
and for stored values on their way back out.

Security Considerations:
- Short codes from the request path are restricted to base62
- Stored URLs are only checked when used as a redirect target; creation
  accepts any non-empty string
"""

import re
from typing import Optional
from urllib.parse import urlsplit

from shortener.core.exceptions import UrlInvalidError

MAX_SHORT_CODE_LENGTH = 20

# Characters a Location header value may not carry
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")


def sanitize_short_code(short_code: str) -> Optional[str]:
    """
    Sanitize and validate short code format.

    Short codes should only contain base62 characters: [0-9a-zA-Z]

    Args:
        short_code: The short code to sanitize

    Returns:
        Sanitized short code if valid, None otherwise

    Security:
    - Only allows alphanumeric characters
    - Prevents path traversal attacks
    """
    if not short_code or not isinstance(short_code, str):
        return None

    short_code = short_code.strip()

    if len(short_code) > MAX_SHORT_CODE_LENGTH:
        return None

    if not re.fullmatch(r'[0-9a-zA-Z]+', short_code):
        return None

    return short_code


def parse_redirect_target(url: str) -> str:
    """
    Check that a stored URL can be sent as a redirect Location.

    Args:
        url: The stored URL

    Returns:
        The URL unchanged

    Raises:
        UrlInvalidError: If the value is empty, carries surrounding whitespace
            or control characters, or cannot be split into URL components
    """
    if not url or url != url.strip():
        raise UrlInvalidError(url)

    if _CONTROL_CHARS.search(url):
        raise UrlInvalidError(url)

    try:
        urlsplit(url)
    except ValueError:
        # e.g. an unbalanced IPv6 bracket: "http://[::1"
        raise UrlInvalidError(url)

    return url
