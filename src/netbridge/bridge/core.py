"""
Event-to-future bridging.

Turns a one-shot completion event into a settled asyncio.Future:

1. validate() runs synchronously; a failure raises before the transport is
   touched (no listener, no guard, no start)
2. the completion listener is registered; if registration raises, the
   guard releases the transport and the error propagates
3. start() is called
4. the terminal event settles the future (error / cancelled / success) and
   the guard releases the transport in a finally block

Hook policy on the success branch: the hook runs before the future is
resolved. If it raises, the future fails with CompletionHookError wrapping
the hook's exception. Release happens either way.
"""

import asyncio
import logging
import threading
from typing import Any, Callable, Optional, TypeVar

from netbridge.bridge.guard import ResourceLifecycleGuard
from netbridge.common.exceptions import CompletionHookError, SettlementError
from netbridge.common.logging import get_logger, log_exception, log_with_context
from netbridge.transport.events import CompletionEvent, CompletionSignal

logger = get_logger(__name__)

T = TypeVar("T")

CompletionListener = Callable[[CompletionEvent], None]


def _event_result(event: CompletionEvent) -> Any:
    return event.result


def _on_loop(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


def bridge(
    validate: Callable[[], Any],
    register_listener: Callable[[CompletionListener], None],
    start: Callable[[], None],
    *,
    resource: Any,
    produce: Callable[[CompletionEvent], T] = _event_result,
    on_success: Optional[Callable[[CompletionEvent], None]] = None,
    cancel: Optional[Callable[[], Any]] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> "asyncio.Future[T]":
    """
    Bridge a one-shot event source into a future.

    Args:
        validate: Pre-flight check; raises InvalidArgumentError on bad input
        register_listener: Attaches the completion listener to the source
        start: Begins the operation
        resource: Object released exactly once after settlement
        produce: Maps a successful event to the future's value
        on_success: Hook invoked once with the event, success branch only
        cancel: Called if the caller cancels the future before completion
        loop: Loop owning the future (default: the running loop)

    Returns:
        Future settling to the produced value, to the transport's error
        (unchanged), or to cancellation

    Raises:
        InvalidArgumentError: If validate() rejects the inputs
        RuntimeError: If no loop is given and none is running
    """
    validate()

    if loop is None:
        loop = asyncio.get_running_loop()
    future: "asyncio.Future[T]" = loop.create_future()
    guard = ResourceLifecycleGuard(resource)
    fired_lock = threading.Lock()
    fired = False

    def settle(event: CompletionEvent) -> None:
        try:
            if future.done():
                # Caller gave up (cancelled the future); only release remains
                log_with_context(
                    logger,
                    logging.DEBUG,
                    "Terminal event after caller cancellation",
                    signal=event.signal.value,
                )
                return

            signal = event.signal
            if signal is CompletionSignal.ERROR:
                future.set_exception(event.error)
            elif signal is CompletionSignal.CANCELLED:
                future.cancel()
            else:
                value = produce(event)
                if on_success is not None:
                    try:
                        on_success(event)
                    except Exception as exc:
                        log_exception(
                            logger, exc, "Completion hook raised", level=logging.WARNING
                        )
                        future.set_exception(
                            CompletionHookError("Completion hook raised", cause=exc)
                        )
                        return
                future.set_result(value)

            log_with_context(logger, logging.DEBUG, "Future settled", signal=signal.value)
        finally:
            guard.release()

    def listener(event: CompletionEvent) -> None:
        nonlocal fired
        with fired_lock:
            if fired:
                raise SettlementError(
                    "Terminal event delivered more than once",
                    context={"signal": event.signal.value},
                )
            fired = True

        if _on_loop(loop):
            settle(event)
        else:
            loop.call_soon_threadsafe(settle, event)

    try:
        register_listener(listener)
    except Exception as exc:
        log_exception(logger, exc, "Listener registration failed", level=logging.WARNING)
        guard.release()
        raise

    if cancel is not None:

        def propagate_cancel(fut: asyncio.Future) -> None:
            if fut.cancelled() and not fired:
                cancel()

        future.add_done_callback(propagate_cancel)

    try:
        start()
    except Exception as exc:
        log_exception(logger, exc, "Operation failed to start", level=logging.WARNING)
        if not future.done():
            future.set_exception(exc)
        guard.release()

    return future
