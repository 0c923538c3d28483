"""
Event-emitting transport interface.

A transport runs one network operation and reports it through listeners
instead of return values. Adapters in netbridge.adapters turn those
notifications into futures.

Contract a transport must honour:
    - completed listeners registered for an operation kind fire exactly once,
      with a CompletionEvent, when that operation finishes
    - progress listeners fire zero or more times, strictly before the
      completed listeners of the same operation
    - start() may be called once per instance
    - release() frees the underlying connection resources
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from multidict import CIMultiDict

from netbridge.common.logging import LoggedClass
from netbridge.schemas.operations import AsyncOperation, OperationKind
from netbridge.transport.events import CompletionEvent, ProgressEvent

CompletedListener = Callable[[CompletionEvent], None]
ProgressListener = Callable[[ProgressEvent], None]


class EventTransport(LoggedClass, ABC):
    """
    Base class for one-shot, event-emitting transports.

    Subclasses implement _begin(), _cancel() and _release(); the base class
    owns listener bookkeeping and the one-shot lifecycle checks.

    Attributes:
        headers: Request headers (case-insensitive)
        encoding: Text encoding for request payloads and response bodies.
            None means "use the response's declared charset" when decoding
            and UTF-8 when encoding.
    """

    log_component = "transport"

    def __init__(self) -> None:
        super().__init__()
        self.headers: CIMultiDict = CIMultiDict()
        self.encoding: Optional[str] = None
        self._completed_listeners: Dict[OperationKind, List[CompletedListener]] = {}
        self._progress_listeners: List[ProgressListener] = []
        self._operation: Optional[AsyncOperation] = None
        self._completed = False
        self._released = False

    @property
    def operation_kind(self) -> Optional[OperationKind]:
        return self._operation.kind if self._operation else None

    @property
    def resource_url(self) -> Optional[str]:
        return self._operation.resource_url if self._operation else None

    @property
    def is_busy(self) -> bool:
        """True between start() and the terminal event."""
        return self._operation is not None and not self._completed

    @property
    def released(self) -> bool:
        return self._released

    def add_completed_listener(
        self, kind: OperationKind, listener: CompletedListener
    ) -> None:
        """Register a one-shot listener for the terminal event of ``kind``."""
        self._completed_listeners.setdefault(kind, []).append(listener)

    def add_progress_listener(self, listener: ProgressListener) -> None:
        """Register a listener for intermediate progress notifications."""
        self._progress_listeners.append(listener)

    def start(self, operation: AsyncOperation) -> None:
        """
        Begin the operation without waiting for it.

        Args:
            operation: Validated operation to run

        Raises:
            RuntimeError: If the transport was released or already started
        """
        if self._released:
            raise RuntimeError("Cannot start an operation on a released transport")
        if self._operation is not None:
            raise RuntimeError("Transport does not support more than one operation")

        self._operation = operation
        self._log(logging.DEBUG, "Starting operation")
        self._begin(operation)

    def cancel(self) -> bool:
        """
        Request cooperative cancellation of the running operation.

        The terminal event will report ``cancelled=True`` unless the
        operation already finished.

        Returns:
            True if a running operation was asked to stop
        """
        if not self.is_busy:
            return False
        if self._operation is not None and not self._operation.cancellable:
            return False
        self._log(logging.DEBUG, "Cancellation requested")
        self._cancel()
        return True

    def release(self) -> None:
        """Free connection resources. Later calls are no-ops."""
        if self._released:
            return
        self._released = True
        self._progress_listeners.clear()
        self._log(logging.DEBUG, "Releasing transport")
        self._release()

    def _emit_progress(self, event: ProgressEvent) -> None:
        if self._completed or self._released:
            return
        for listener in list(self._progress_listeners):
            listener(event)

    def _emit_completed(self, event: CompletionEvent) -> None:
        if self._completed:
            raise RuntimeError("Terminal event already emitted for this operation")
        self._completed = True
        listeners = self._completed_listeners.pop(event.operation.kind, [])
        for listener in listeners:
            listener(event)

    @abstractmethod
    def _begin(self, operation: AsyncOperation) -> None:
        """Schedule the operation; must not block."""

    @abstractmethod
    def _cancel(self) -> None:
        """Stop the running operation so it reports cancellation."""

    @abstractmethod
    def _release(self) -> None:
        """Free the underlying resources."""
