"""Common infrastructure shared across netbridge: errors and logging."""

from netbridge.common.exceptions import (
    BridgeError,
    CompletionHookError,
    ErrorCategory,
    InvalidArgumentError,
    SettlementError,
    TransportError,
    classify_exception,
    classify_http_status,
)
from netbridge.common.logging import (
    LoggedClass,
    get_logger,
    log_exception,
    log_with_context,
)

__all__ = [
    # Errors
    "ErrorCategory",
    "BridgeError",
    "InvalidArgumentError",
    "TransportError",
    "CompletionHookError",
    "SettlementError",
    "classify_http_status",
    "classify_exception",
    # Logging
    "LoggedClass",
    "get_logger",
    "log_exception",
    "log_with_context",
]
