"""
aiohttp-backed event transport.

Runs one HTTP operation per instance as an asyncio task and reports it
through EventTransport listeners:
- GET text (decoded with ``encoding`` or the response charset)
- GET to file (streamed in chunks with aiofiles, one ProgressEvent per chunk)
- GET as stream (buffered into an in-memory binary stream)
- POST text (encoded with ``encoding``, UTF-8 when unset)

Failures are reported as TransportError in the terminal event; nothing is
raised to the caller of start().
"""

import asyncio
import io
import logging
from typing import Any, Optional

import aiofiles
import aiohttp

from netbridge.common.exceptions import ErrorCategory, TransportError
from netbridge.config import TransportConfig
from netbridge.schemas.operations import AsyncOperation, OperationKind
from netbridge.transport.base import EventTransport
from netbridge.transport.events import CompletionEvent, ProgressEvent


class AiohttpTransport(EventTransport):
    """
    One-shot transport over a private aiohttp.ClientSession.

    The session is created when the operation starts and closed when the
    transport is released. Instances are not reusable.

    Usage:
        transport = with_utf8_encoding(AiohttpTransport())
        text = await get_string(transport, "https://example.com/feed.xml")
    """

    def __init__(self, config: Optional[TransportConfig] = None):
        """
        Initialize transport.

        Args:
            config: Transport behavior (default: TransportConfig())
        """
        super().__init__()
        self.config = config or TransportConfig()
        self._session: Optional[aiohttp.ClientSession] = None
        self._task: Optional[asyncio.Task] = None
        self._close_task: Optional[asyncio.Task] = None
        self._cancel_requested = False

    async def aclose(self) -> None:
        """Release the transport and wait until the session is closed."""
        self.release()
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)
        if self._close_task is not None:
            await self._close_task

    def _begin(self, operation: AsyncOperation) -> None:
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(operation))
        self._task.add_done_callback(self._on_task_done)

    def _cancel(self) -> None:
        if self._cancel_requested:
            return
        self._cancel_requested = True
        if self._task is not None:
            self._task.cancel()

    def _release(self) -> None:
        if self._task is not None and not self._task.done():
            if not self._completed:
                # Abandoned mid-flight: stop the request, _run closes the session
                self._cancel()
            return
        self._schedule_close()

    def _schedule_close(self) -> None:
        session, self._session = self._session, None
        if session is None or session.closed:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._log(logging.WARNING, "No running event loop, session left for GC")
            return
        self._close_task = loop.create_task(session.close())

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log_exception(exc, "Completion listener failed")

    async def _run(self, operation: AsyncOperation) -> None:
        result: Any = None
        error: Optional[BaseException] = None
        cancelled = False
        url = operation.resource_url

        try:
            session = self._ensure_session()
            if operation.kind is OperationKind.GET_STRING:
                result = await self._get_string(session, operation)
            elif operation.kind is OperationKind.POST_STRING:
                result = await self._post_string(session, operation)
            elif operation.kind is OperationKind.OPEN_READ:
                result = await self._open_read(session, operation)
            elif operation.kind is OperationKind.GET_FILE:
                result = await self._get_file(session, operation)
            else:
                raise TransportError(
                    f"Unsupported operation kind: {operation.kind}",
                    category=ErrorCategory.PERMANENT,
                )

        except asyncio.CancelledError:
            cancelled = True
            if not self._cancel_requested:
                # Cancelled from outside (e.g. loop shutdown): still report, then propagate
                self._emit_completed(
                    CompletionEvent(operation=operation, cancelled=True, sender=self)
                )
                await self._close_if_released()
                raise

        except TransportError as e:
            error = e

        except asyncio.TimeoutError as e:
            error = TransportError(
                f"Timeout after {self.config.timeout_seconds}s: {url}",
                category=ErrorCategory.TRANSIENT,
                cause=e,
            )

        except aiohttp.ClientError as e:
            error = TransportError(
                f"Connection error: {e}",
                category=ErrorCategory.TRANSIENT,
                cause=e,
            )

        except (UnicodeError, LookupError) as e:
            error = TransportError(
                f"Cannot decode response from {url}: {e}",
                category=ErrorCategory.PERMANENT,
                cause=e,
            )

        except OSError as e:
            error = TransportError(
                f"File write error: {e}",
                category=ErrorCategory.PERMANENT,
                cause=e,
            )

        except Exception as e:
            # User progress hooks run inside the request; their failures end it
            error = TransportError(
                f"Operation failed: {type(e).__name__}: {e}",
                category=ErrorCategory.PERMANENT,
                cause=e,
                context={"resource_url": url},
            )

        if error is not None:
            self._log_exception(
                error,
                "Transport operation failed",
                level=logging.WARNING,
                include_traceback=False,
            )

        self._emit_completed(
            CompletionEvent(
                operation=operation,
                error=error,
                cancelled=cancelled,
                result=result,
                sender=self,
            )
        )
        await self._close_if_released()

    async def _close_if_released(self) -> None:
        if self._released and self._session is not None:
            session, self._session = self._session, None
            await session.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
                headers={"User-Agent": self.config.user_agent},
            )
        return self._session

    def _raise_for_status(self, response: aiohttp.ClientResponse, url: str) -> None:
        if not 200 <= response.status < 300:
            raise TransportError(
                f"HTTP error ({response.status}): {url}",
                status_code=response.status,
                context={"resource_url": url},
            )

    async def _get_string(
        self, session: aiohttp.ClientSession, operation: AsyncOperation
    ) -> str:
        async with session.get(operation.resource_url, headers=self.headers) as response:
            self._raise_for_status(response, operation.resource_url)
            return await response.text(encoding=self.encoding)

    async def _post_string(
        self, session: aiohttp.ClientSession, operation: AsyncOperation
    ) -> str:
        encoding = self.encoding or "utf-8"
        headers = self.headers.copy()
        if "Content-Type" not in headers:
            headers["Content-Type"] = f"text/plain; charset={encoding}"
        data = (operation.payload or "").encode(encoding)

        async with session.post(
            operation.resource_url, data=data, headers=headers
        ) as response:
            self._raise_for_status(response, operation.resource_url)
            return await response.text(encoding=self.encoding)

    async def _open_read(
        self, session: aiohttp.ClientSession, operation: AsyncOperation
    ) -> io.BytesIO:
        buffer = io.BytesIO()
        async with session.get(operation.resource_url, headers=self.headers) as response:
            self._raise_for_status(response, operation.resource_url)
            async for chunk in response.content.iter_chunked(self.config.chunk_size):
                buffer.write(chunk)
        buffer.seek(0)
        return buffer

    async def _get_file(
        self, session: aiohttp.ClientSession, operation: AsyncOperation
    ) -> None:
        target = operation.target_path

        async with session.get(operation.resource_url, headers=self.headers) as response:
            self._raise_for_status(response, operation.resource_url)
            total = response.content_length
            received = 0

            await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
            try:
                async with aiofiles.open(target, "wb") as f:
                    async for chunk in response.content.iter_chunked(
                        self.config.chunk_size
                    ):
                        await f.write(chunk)
                        received += len(chunk)
                        if operation.supports_progress:
                            self._emit_progress(
                                ProgressEvent(
                                    operation=operation,
                                    bytes_received=received,
                                    total_bytes=total,
                                    sender=self,
                                )
                            )
            except BaseException:
                # Partial downloads are not left behind
                target.unlink(missing_ok=True)
                raise

        self._log(
            logging.DEBUG,
            "File download complete",
            bytes_downloaded=received,
            target_path=str(target),
        )
        return None
