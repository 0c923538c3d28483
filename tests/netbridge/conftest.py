"""Shared fixtures for netbridge tests."""

from typing import Any, List, Optional

import pytest

from netbridge.schemas.operations import AsyncOperation, OperationKind
from netbridge.transport.base import EventTransport
from netbridge.transport.events import CompletionEvent, ProgressEvent


class FakeTransport(EventTransport):
    """
    Recording transport driven by the test.

    Every interaction is appended to ``calls`` so tests can assert ordering.
    The terminal event is fired explicitly with complete(), or immediately on
    start when ``auto_result``/``auto_error`` is set.
    """

    def __init__(
        self,
        auto_result: Any = None,
        auto_error: Optional[BaseException] = None,
        auto_complete: bool = False,
        start_error: Optional[Exception] = None,
        listen_error: Optional[Exception] = None,
    ):
        super().__init__()
        self.calls: List[str] = []
        self.release_calls = 0
        self.started_operation: Optional[AsyncOperation] = None
        self._auto_result = auto_result
        self._auto_error = auto_error
        self._auto_complete = auto_complete or auto_error is not None
        self._start_error = start_error
        self._listen_error = listen_error

    def add_completed_listener(self, kind: OperationKind, listener) -> None:
        self.calls.append(f"listen:{kind.value}")
        if self._listen_error is not None:
            raise self._listen_error
        super().add_completed_listener(kind, listener)

    def add_progress_listener(self, listener) -> None:
        self.calls.append("listen:progress")
        super().add_progress_listener(listener)

    def release(self) -> None:
        self.calls.append("release")
        self.release_calls += 1
        super().release()

    def _begin(self, operation: AsyncOperation) -> None:
        self.calls.append("start")
        self.started_operation = operation
        if self._start_error is not None:
            raise self._start_error
        if self._auto_complete:
            self.complete(result=self._auto_result, error=self._auto_error)

    def _cancel(self) -> None:
        self.calls.append("cancel")
        self.complete(cancelled=True)

    def _release(self) -> None:
        pass

    def progress(self, bytes_received: int, total_bytes: Optional[int] = None) -> None:
        self.calls.append("progress")
        self._emit_progress(
            ProgressEvent(
                operation=self._operation,
                bytes_received=bytes_received,
                total_bytes=total_bytes,
                sender=self,
            )
        )

    def complete(
        self,
        result: Any = None,
        error: Optional[BaseException] = None,
        cancelled: bool = False,
    ) -> None:
        self.calls.append("complete")
        self._emit_completed(
            CompletionEvent(
                operation=self._operation,
                error=error,
                cancelled=cancelled,
                result=result,
                sender=self,
            )
        )


@pytest.fixture
def transport():
    """Fresh recording transport."""
    return FakeTransport()


@pytest.fixture
def target_file(tmp_path):
    """Destination path for file fetches."""
    return tmp_path / "downloads" / "feed.xml"


@pytest.fixture
def make_transport():
    """Factory for transports with scripted behavior."""
    return FakeTransport
