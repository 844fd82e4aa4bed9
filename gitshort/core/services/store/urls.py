"""
URL validation: the predicate that separates records from other commits.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

VALID_SCHEMES = ("http", "https", "ftp")


def is_valid_url(url: Any) -> bool:
    """Return True if *url* is an absolute http, https or ftp URL.

    Never raises. Anything that fails to parse is invalid.
    """
    if not isinstance(url, str) or not url:
        return False

    # Whitespace and control characters never appear in a well-formed URL
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url):
        return False

    try:
        parts = urlsplit(url)
        # Accessing .port validates it (raises ValueError when out of range)
        _ = parts.port
    except ValueError:
        return False

    if parts.scheme.lower() not in VALID_SCHEMES:
        return False

    return bool(parts.hostname)
