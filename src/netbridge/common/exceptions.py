"""
Exception types and error classification for netbridge.

Provides:
- ErrorCategory enum for caller-side retry decisions
- Typed exception hierarchy for bridge and transport errors
- Error classification utilities
"""

import asyncio
from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    netbridge performs no retries itself; the category is carried so that a
    caller-side layer composing on top of the returned futures can decide.

    Categories:
        TRANSIENT: Temporary failures that may succeed later
                   (e.g., network timeouts, 429/503 responses)
        PERMANENT: Failures that won't succeed on retry
                   (e.g., 404, invalid arguments)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class BridgeError(Exception):
    """
    Base exception for all netbridge errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for retry decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether a caller-side layer may reasonably retry."""
        return self.category in (ErrorCategory.TRANSIENT, ErrorCategory.UNKNOWN)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


class InvalidArgumentError(BridgeError, ValueError):
    """A required input is missing or malformed.

    Raised synchronously, before any listener is attached or any transport
    resource is touched.
    """

    category = ErrorCategory.PERMANENT


class TransportError(BridgeError):
    """Failure reported by a transport through its terminal event."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        category: Optional[ErrorCategory] = None,
        cause: Optional[BaseException] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message, cause, context)
        self.status_code = status_code
        if category is not None:
            self.category = category
        elif status_code is not None:
            self.category = classify_http_status(status_code)
        elif cause is not None:
            self.category = classify_exception(cause)


class CompletionHookError(BridgeError):
    """A user-supplied completion hook raised on the success branch."""

    category = ErrorCategory.PERMANENT


class SettlementError(BridgeError):
    """A transport delivered more than one terminal event for an operation."""

    category = ErrorCategory.PERMANENT


# =============================================================================
# Error Classification Utilities
# =============================================================================


def classify_http_status(status_code: int) -> ErrorCategory:
    """
    Classify HTTP status code into error category.

    Args:
        status_code: HTTP response status

    Returns:
        Appropriate ErrorCategory
    """
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code in (408, 429):
        return ErrorCategory.TRANSIENT

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT

    if status_code >= 500:
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCategory:
    """
    Classify an exception into error category.

    Args:
        exc: Exception to classify

    Returns:
        Appropriate ErrorCategory
    """
    # Already classified
    if isinstance(exc, BridgeError):
        return exc.category

    if isinstance(exc, asyncio.TimeoutError):
        return ErrorCategory.TRANSIENT

    exc_type = type(exc).__name__.lower()
    exc_str = str(exc).lower()

    connection_markers = (
        "connectionerror",
        "connection refused",
        "connection reset",
        "connection aborted",
        "serverdisconnected",
        "name resolution",
        "dns",
        "socket",
        "broken pipe",
    )
    if any(m in exc_type or m in exc_str for m in connection_markers):
        return ErrorCategory.TRANSIENT

    if "timeout" in exc_type or "timeout" in exc_str:
        return ErrorCategory.TRANSIENT

    if "invalidurl" in exc_type or "permission" in exc_type:
        return ErrorCategory.PERMANENT

    return ErrorCategory.UNKNOWN
