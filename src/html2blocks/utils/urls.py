#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/utils/urls.py
"""URL helpers for image markup.

These helpers escape URLs and attribute values for the markup the image
transform writes, and rewrite insecure image URLs.
"""

from __future__ import annotations

import html
import re
from urllib.parse import quote

from html2blocks.constants import DANGEROUS_SCHEMES

_HTTP_PREFIX = re.compile(r"^http://", re.IGNORECASE)

# Reserved and already-escaped characters pass through untouched.
_URL_SAFE_CHARS = ":/?#[]@!$&'()*+,;=%~"


def is_url_safe(url: str) -> bool:
    """Check whether a URL avoids script-capable schemes.

    Examples
    --------
        >>> is_url_safe("https://example.com/a.png")
        True
        >>> is_url_safe("JavaScript:alert(1)")
        False
        >>> is_url_safe("/uploads/a.png")
        True

    """
    if not url or not url.strip():
        return True

    url_lower = url.strip().lower()
    return not any(url_lower.startswith(scheme) for scheme in DANGEROUS_SCHEMES)


def escape_url(url: str) -> str:
    """Escape a URL for use inside a double-quoted HTML attribute.

    Dangerous schemes yield an empty string. Spaces and other characters
    that are not valid in a URL are percent-encoded; existing escapes are
    kept.

    Examples
    --------
        >>> escape_url("https://example.com/my image.png?a=1&b=2")
        'https://example.com/my%20image.png?a=1&amp;b=2'
        >>> escape_url("javascript:alert(1)")
        ''

    """
    url = url.strip()
    if not url or not is_url_safe(url):
        return ""
    return html.escape(quote(url, safe=_URL_SAFE_CHARS), quote=True)


def escape_attr(value: str) -> str:
    """Escape text for use inside a double-quoted HTML attribute."""
    return html.escape(value, quote=True)


def force_https(url: str) -> str:
    """Rewrite a leading ``http://`` to ``https://``.

    Only the scheme token is matched, case-insensitively.

    Examples
    --------
        >>> force_https("HTTP://example.com/a.png")
        'https://example.com/a.png'
        >>> force_https("https://example.com/?next=http://x")
        'https://example.com/?next=http://x'

    """
    return _HTTP_PREFIX.sub("https://", url, count=1)


__all__ = ["is_url_safe", "escape_url", "escape_attr", "force_https"]
