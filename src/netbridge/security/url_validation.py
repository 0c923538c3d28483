"""
Resource URL validation for bridged network operations.

Checks that a resource identifier is an absolute address before any
listener is attached or any transport resource is touched.
"""

from typing import Any, Optional, Set, Tuple
from urllib.parse import urlparse


# Schemes accepted when no explicit set is given
ALLOWED_SCHEMES: Set[str] = {"https", "http"}


def validate_resource_url(
    url: Any, allowed_schemes: Optional[Set[str]] = None
) -> Tuple[bool, str]:
    """
    Validate that a resource identifier is an absolute URL.

    Accepts ``str`` or any object whose ``str()`` is a URL (e.g. ``yarl.URL``).

    Args:
        url: Resource identifier to validate
        allowed_schemes: Optional set of schemes (defaults to ALLOWED_SCHEMES)

    Returns:
        (is_valid, error_message)
        - (True, "") if valid
        - (False, "error description") if invalid

    Examples:
        >>> validate_resource_url("https://example.com/feed.xml")
        (True, '')

        >>> validate_resource_url("/relative/path")
        (False, 'URL must be absolute, got no scheme')

        >>> validate_resource_url("ftp://example.com/file")
        (False, 'Unsupported scheme: ftp')
    """
    if url is None:
        return False, "The expected URL is not here"

    text = str(url).strip()
    if not text:
        return False, "Empty URL"

    try:
        parsed = urlparse(text)
    except ValueError as e:
        return False, f"Invalid URL format: {e}"

    if allowed_schemes is None:
        allowed_schemes = ALLOWED_SCHEMES
    else:
        allowed_schemes = {s.lower() for s in allowed_schemes}

    scheme = parsed.scheme.lower()
    if not scheme:
        return False, "URL must be absolute, got no scheme"

    if scheme not in allowed_schemes:
        return False, f"Unsupported scheme: {scheme}"

    if not parsed.hostname:
        return False, "No hostname in URL"

    return True, ""
