"""
Input validation for bridged operations.

Provides:
    - validate_resource_url(): absolute http/https URL check
"""

from netbridge.security.url_validation import (
    ALLOWED_SCHEMES,
    validate_resource_url,
)

__all__ = [
    "validate_resource_url",
    "ALLOWED_SCHEMES",
]
