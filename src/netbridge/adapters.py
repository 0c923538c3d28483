"""
Typed adapters from event-emitting transports to futures.

Each adapter validates its inputs, builds an AsyncOperation, and hands the
transport to bridge(). They differ in the value produced and in the hooks
they accept:

    StringFetchAdapter  GET text      -> Future[str]
    FileFetchAdapter    GET to file   -> Future[None], progress hook
    StreamOpenAdapter   GET stream    -> Future[BinaryIO]
    StringPostAdapter   POST text     -> Future[str]

All four share one hook policy: the completion hook fires once, on success
only. Failures and cancellation reach the caller through the future.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, Optional, Union

from pydantic import ValidationError

from netbridge.bridge.core import CompletionListener, bridge
from netbridge.common.exceptions import InvalidArgumentError
from netbridge.common.logging import LoggedClass
from netbridge.config import TransportConfig
from netbridge.schemas.operations import AsyncOperation, OperationKind
from netbridge.transport.events import CompletionEvent, ProgressEvent

CompletionHook = Callable[[CompletionEvent], None]
ProgressHook = Callable[[ProgressEvent], None]


class TransportAdapter(LoggedClass):
    """
    Base class for the typed adapters.

    Subclasses set ``kind`` and may override produce().

    Attributes:
        config: Supplies the URL schemes accepted during validation
    """

    kind: OperationKind
    log_component = "adapter"

    def __init__(self, config: Optional[TransportConfig] = None):
        super().__init__()
        self.config = config or TransportConfig()

    @property
    def operation_kind(self) -> OperationKind:
        return self.kind

    def produce(self, event: CompletionEvent) -> Any:
        """Value the future resolves to on success."""
        return event.result

    def _build_operation(self, transport: Any, **fields: Any) -> AsyncOperation:
        if transport is None:
            raise InvalidArgumentError("The expected transport is not here")

        try:
            return AsyncOperation.model_validate(
                {"kind": self.kind, **fields},
                context={"allowed_schemes": self.config.allowed_schemes},
            )
        except ValidationError as e:
            reasons = "; ".join(err["msg"] for err in e.errors())
            raise InvalidArgumentError(
                f"Invalid {self.kind.value} request: {reasons}",
                cause=e,
            ) from e

    def _invoke(
        self,
        transport: Any,
        fields: Dict[str, Any],
        on_completed: Optional[CompletionHook] = None,
        on_progress: Optional[ProgressHook] = None,
    ) -> "asyncio.Future":
        operation: Optional[AsyncOperation] = None

        def validate() -> None:
            nonlocal operation
            operation = self._build_operation(transport, **fields)

        def register(listener: CompletionListener) -> None:
            if on_progress is not None:
                transport.add_progress_listener(on_progress)
            transport.add_completed_listener(self.kind, listener)

        def start() -> None:
            self._log(
                logging.DEBUG,
                "Starting bridged operation",
                resource_url=operation.resource_url,
            )
            transport.start(operation)

        return bridge(
            validate,
            register,
            start,
            resource=transport,
            produce=self.produce,
            on_success=on_completed,
            cancel=getattr(transport, "cancel", None),
        )


class StringFetchAdapter(TransportAdapter):
    """GET a resource as text."""

    kind = OperationKind.GET_STRING

    def invoke(
        self,
        transport: Any,
        resource_url: Any,
        on_completed: Optional[CompletionHook] = None,
    ) -> "asyncio.Future[str]":
        """
        Fetch ``resource_url`` as text.

        Args:
            transport: Unstarted EventTransport, released after completion
            resource_url: Absolute URL
            on_completed: Called with the CompletionEvent on success only

        Returns:
            Future resolving to the response body

        Raises:
            InvalidArgumentError: If transport or resource_url is missing/invalid
        """
        return self._invoke(
            transport, {"resource_url": resource_url}, on_completed=on_completed
        )


class FileFetchAdapter(TransportAdapter):
    """GET a resource into a local file, with optional progress reporting."""

    kind = OperationKind.GET_FILE

    def produce(self, event: CompletionEvent) -> None:
        return None

    def invoke(
        self,
        transport: Any,
        resource_url: Any,
        target_path: Union[str, Path],
        on_completed: Optional[CompletionHook] = None,
        on_progress: Optional[ProgressHook] = None,
    ) -> "asyncio.Future[None]":
        """
        Download ``resource_url`` to ``target_path``.

        Args:
            transport: Unstarted EventTransport, released after completion
            resource_url: Absolute URL
            target_path: Destination file; parent directories are created
            on_completed: Called with the CompletionEvent on success only
            on_progress: Called with each ProgressEvent before completion

        Returns:
            Future resolving to None once the file is written

        Raises:
            InvalidArgumentError: If transport, resource_url or target_path is
                missing/invalid
        """
        fields = {
            "resource_url": resource_url,
            "target_path": target_path,
            "supports_progress": on_progress is not None,
        }
        return self._invoke(
            transport, fields, on_completed=on_completed, on_progress=on_progress
        )


class StreamOpenAdapter(TransportAdapter):
    """GET a resource as a readable byte stream."""

    kind = OperationKind.OPEN_READ

    def invoke(
        self,
        transport: Any,
        resource_url: Any,
        on_completed: Optional[CompletionHook] = None,
    ) -> "asyncio.Future[BinaryIO]":
        """
        Open ``resource_url`` for reading.

        Returns:
            Future resolving to a binary stream positioned at its start

        Raises:
            InvalidArgumentError: If transport or resource_url is missing/invalid
        """
        return self._invoke(
            transport, {"resource_url": resource_url}, on_completed=on_completed
        )


class StringPostAdapter(TransportAdapter):
    """POST a text payload and return the response text."""

    kind = OperationKind.POST_STRING

    def invoke(
        self,
        transport: Any,
        resource_url: Any,
        payload: str,
        on_completed: Optional[CompletionHook] = None,
    ) -> "asyncio.Future[str]":
        """
        Submit ``payload`` to ``resource_url``.

        Args:
            transport: Unstarted EventTransport, released after completion
            resource_url: Absolute URL
            payload: Request body; None is rejected, "" is allowed
            on_completed: Called with the CompletionEvent on success only

        Returns:
            Future resolving to the response body

        Raises:
            InvalidArgumentError: If transport, resource_url or payload is
                missing/invalid
        """
        fields = {"resource_url": resource_url, "payload": payload}
        return self._invoke(transport, fields, on_completed=on_completed)


def get_string(
    transport: Any,
    resource_url: Any,
    on_completed: Optional[CompletionHook] = None,
) -> "asyncio.Future[str]":
    """Shortcut for StringFetchAdapter().invoke()."""
    return StringFetchAdapter().invoke(transport, resource_url, on_completed)


def get_file(
    transport: Any,
    resource_url: Any,
    target_path: Union[str, Path],
    on_completed: Optional[CompletionHook] = None,
    on_progress: Optional[ProgressHook] = None,
) -> "asyncio.Future[None]":
    """Shortcut for FileFetchAdapter().invoke()."""
    return FileFetchAdapter().invoke(
        transport, resource_url, target_path, on_completed, on_progress
    )


def get_stream(
    transport: Any,
    resource_url: Any,
    on_completed: Optional[CompletionHook] = None,
) -> "asyncio.Future[BinaryIO]":
    """Shortcut for StreamOpenAdapter().invoke()."""
    return StreamOpenAdapter().invoke(transport, resource_url, on_completed)


def post_string(
    transport: Any,
    resource_url: Any,
    payload: str,
    on_completed: Optional[CompletionHook] = None,
) -> "asyncio.Future[str]":
    """Shortcut for StringPostAdapter().invoke()."""
    return StringPostAdapter().invoke(transport, resource_url, payload, on_completed)
