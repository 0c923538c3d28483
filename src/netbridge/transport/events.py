"""
Events emitted by transports.

A transport emits zero or more ProgressEvents followed by exactly one
CompletionEvent per operation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from netbridge.schemas.operations import AsyncOperation


class CompletionSignal(Enum):
    """Tagged outcome of a terminal event. Exactly one applies."""

    ERROR = "error"
    CANCELLED = "cancelled"
    SUCCESS = "success"


@dataclass(frozen=True)
class CompletionEvent:
    """Terminal notification for an operation.

    Attributes:
        operation: The operation that completed
        error: Exception reported by the transport, if any
        cancelled: True when the transport was cancelled before finishing
        result: Produced value (text, stream, or None for file fetches)
        sender: The transport that emitted the event
    """

    operation: AsyncOperation
    error: Optional[BaseException] = None
    cancelled: bool = False
    result: Any = None
    sender: Any = None

    @property
    def signal(self) -> CompletionSignal:
        """Error takes precedence over cancellation."""
        if self.error is not None:
            return CompletionSignal.ERROR
        if self.cancelled:
            return CompletionSignal.CANCELLED
        return CompletionSignal.SUCCESS


@dataclass(frozen=True)
class ProgressEvent:
    """Intermediate transfer notification. Carries no settlement semantics."""

    operation: AsyncOperation
    bytes_received: int
    total_bytes: Optional[int] = None
    sender: Any = None

    @property
    def percentage(self) -> Optional[int]:
        if not self.total_bytes:
            return None
        return min(100, int(self.bytes_received * 100 / self.total_bytes))
