"""
Tests for the typed adapters against a recording transport.

Covers:
- Text fetch resolves with the response body
- Missing or relative resource URLs fail fast with nothing registered
- A missing post payload fails fast, an empty one is sent
- Transport failures surface unchanged and the transport is released
- File fetch reports progress, then fires the terminal hook once
- Start and listener registration failures still release the transport
"""

import asyncio
import io
from unittest.mock import Mock

import pytest

from netbridge.adapters import (
    FileFetchAdapter,
    StreamOpenAdapter,
    StringFetchAdapter,
    StringPostAdapter,
    get_file,
    get_stream,
    get_string,
    post_string,
)
from netbridge.common.exceptions import (
    CompletionHookError,
    InvalidArgumentError,
    TransportError,
)
from netbridge.config import TransportConfig
from netbridge.schemas.operations import OperationKind


URL = "https://example.com/feed.xml"


class TestStringFetch:
    """GET text."""

    @pytest.mark.asyncio
    async def test_resolves_with_body(self, transport):
        """Test text fetch resolves with the body and releases once."""
        future = get_string(transport, URL)
        transport.complete(result="<rss/>")

        assert await future == "<rss/>"
        assert transport.calls == ["listen:get_string", "start", "complete", "release"]
        assert transport.release_calls == 1

    @pytest.mark.asyncio
    async def test_started_operation_describes_request(self, transport):
        """Test the started operation carries kind and URL."""
        future = get_string(transport, URL)
        transport.complete(result="")
        await future

        op = transport.started_operation
        assert op.kind is OperationKind.GET_STRING
        assert op.resource_url == URL
        assert op.payload is None

    @pytest.mark.asyncio
    async def test_none_url_fails_fast_without_listener(self, transport):
        """Test a None URL raises before any listener is attached."""
        with pytest.raises(InvalidArgumentError):
            get_string(transport, None)

        assert transport.calls == []
        assert transport.release_calls == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["", "   ", "/relative/feed.xml", "ftp://example.com/f"])
    async def test_non_absolute_url_rejected(self, transport, url):
        """Test blank, relative and unsupported URLs are rejected."""
        with pytest.raises(InvalidArgumentError):
            get_string(transport, url)

        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_none_transport_rejected(self):
        """Test a None transport is rejected."""
        with pytest.raises(InvalidArgumentError, match="transport"):
            get_string(None, URL)

    @pytest.mark.asyncio
    async def test_configured_schemes_narrow_validation(self, transport):
        """Test configured schemes restrict accepted URLs."""
        adapter = StringFetchAdapter(TransportConfig(allowed_schemes={"https"}))

        with pytest.raises(InvalidArgumentError, match="Unsupported scheme"):
            adapter.invoke(transport, "http://example.com/feed.xml")

    @pytest.mark.asyncio
    async def test_failure_surfaces_unchanged_and_releases(self, transport):
        """Test transport errors reach the caller as the same object."""
        error = TransportError("Connection error: reset", status_code=None)
        hook = Mock()
        future = get_string(transport, URL, on_completed=hook)

        transport.complete(error=error)

        with pytest.raises(TransportError) as exc_info:
            await future
        assert exc_info.value is error
        hook.assert_not_called()
        assert transport.release_calls == 1

    @pytest.mark.asyncio
    async def test_hook_fires_once_on_success(self, transport):
        """Test completion hook receives the terminal event once."""
        hook = Mock()
        future = get_string(transport, URL, on_completed=hook)
        transport.complete(result="body")

        assert await future == "body"
        hook.assert_called_once()
        event = hook.call_args[0][0]
        assert event.sender is transport
        assert event.result == "body"

    @pytest.mark.asyncio
    async def test_transport_cancellation_settles_as_cancelled(self, transport):
        """Test transport cancellation cancels the future."""
        future = get_string(transport, URL)

        assert transport.cancel() is True

        assert future.cancelled()
        assert transport.release_calls == 1

    @pytest.mark.asyncio
    async def test_caller_cancellation_cancels_transport(self, transport):
        """Test cancelling the future cancels the transport."""
        future = get_string(transport, URL)

        future.cancel()
        await asyncio.sleep(0)

        assert "cancel" in transport.calls
        assert transport.release_calls == 1


class TestFileFetch:
    """GET to file."""

    @pytest.mark.asyncio
    async def test_progress_then_success(self, transport, target_file):
        """Test progress events precede the terminal event and hook."""
        progress_hook = Mock()
        terminal_hook = Mock()
        future = get_file(
            transport,
            URL,
            target_file,
            on_completed=terminal_hook,
            on_progress=progress_hook,
        )

        transport.progress(512, 1024)
        transport.progress(1024, 1024)
        assert transport.release_calls == 0

        transport.complete()

        assert await future is None
        terminal_hook.assert_called_once()
        assert progress_hook.call_count == 2
        assert [c[0][0].percentage for c in progress_hook.call_args_list] == [50, 100]
        assert transport.calls == [
            "listen:progress",
            "listen:get_file",
            "start",
            "progress",
            "progress",
            "complete",
            "release",
        ]
        assert transport.release_calls == 1

    @pytest.mark.asyncio
    async def test_operation_carries_target_and_progress_flag(self, transport, target_file):
        """Test file operation carries target path and progress flag."""
        future = FileFetchAdapter().invoke(
            transport, URL, str(target_file), on_progress=Mock()
        )
        transport.complete()
        await future

        op = transport.started_operation
        assert op.target_path == target_file
        assert op.supports_progress is True

    @pytest.mark.asyncio
    async def test_without_progress_hook(self, transport, target_file):
        """Test file fetch without a progress hook."""
        future = get_file(transport, URL, target_file)
        transport.complete()
        await future

        assert "listen:progress" not in transport.calls
        assert transport.started_operation.supports_progress is False

    @pytest.mark.asyncio
    async def test_terminal_hook_not_fired_on_error(self, transport, target_file):
        """Test terminal hook is skipped when the download fails."""
        terminal_hook = Mock()
        future = get_file(transport, URL, target_file, on_completed=terminal_hook)

        transport.complete(error=TransportError("HTTP error (404)", status_code=404))

        with pytest.raises(TransportError):
            await future
        terminal_hook.assert_not_called()
        assert transport.release_calls == 1

    @pytest.mark.asyncio
    async def test_terminal_hook_not_fired_on_cancel(self, transport, target_file):
        """Test terminal hook is skipped when the download is cancelled."""
        terminal_hook = Mock()
        future = get_file(transport, URL, target_file, on_completed=terminal_hook)

        transport.cancel()

        assert future.cancelled()
        terminal_hook.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", [None, "", "  "])
    async def test_missing_target_path_rejected(self, transport, target):
        """Test missing or blank target paths are rejected."""
        with pytest.raises(InvalidArgumentError, match="target path"):
            get_file(transport, URL, target)

        assert transport.calls == []


class TestStreamOpen:
    """GET as stream."""

    @pytest.mark.asyncio
    async def test_resolves_with_stream(self, transport):
        """Test stream open resolves with the transport's stream."""
        stream = io.BytesIO(b"<rss/>")
        hook = Mock()
        future = get_stream(transport, URL, on_completed=hook)
        transport.complete(result=stream)

        assert await future is stream
        hook.assert_called_once()
        assert transport.started_operation.kind is OperationKind.OPEN_READ
        assert transport.release_calls == 1

    @pytest.mark.asyncio
    async def test_none_url_rejected(self, transport):
        with pytest.raises(InvalidArgumentError):
            StreamOpenAdapter().invoke(transport, None)

        assert transport.calls == []


class TestStringPost:
    """POST text."""

    @pytest.mark.asyncio
    async def test_resolves_with_response(self, transport):
        """Test post resolves with the response body."""
        future = post_string(transport, URL, '{"name": "x"}')
        transport.complete(result='{"id": 1}')

        assert await future == '{"id": 1}'
        assert transport.started_operation.payload == '{"name": "x"}'
        assert transport.started_operation.kind is OperationKind.POST_STRING

    @pytest.mark.asyncio
    async def test_none_payload_fails_fast(self, transport):
        """Test a None payload raises before the transport is touched."""
        with pytest.raises(InvalidArgumentError, match="post data"):
            post_string(transport, URL, None)

        assert transport.calls == []
        assert transport.release_calls == 0

    @pytest.mark.asyncio
    async def test_non_string_payload_rejected(self, transport):
        """Test non-string payloads are rejected."""
        with pytest.raises(InvalidArgumentError):
            StringPostAdapter().invoke(transport, URL, 42)

    @pytest.mark.asyncio
    async def test_empty_payload_allowed(self, transport):
        """Test an empty payload is sent."""
        future = post_string(transport, URL, "")
        transport.complete(result="ok")

        assert await future == "ok"
        assert transport.started_operation.payload == ""

    @pytest.mark.asyncio
    async def test_hook_error_still_releases(self, transport):
        """Test a raising completion hook still releases the transport."""
        hook = Mock(side_effect=KeyError("missing"))
        future = post_string(transport, URL, "data", on_completed=hook)

        transport.complete(result="ok")

        with pytest.raises(CompletionHookError) as exc_info:
            await future
        assert isinstance(exc_info.value.cause, KeyError)
        assert transport.release_calls == 1


class TestStartFailure:
    """Transports failing before the operation runs."""

    @pytest.mark.asyncio
    async def test_start_error_fails_future_and_releases(self, make_transport):
        """Test a raising start fails the future and releases."""
        transport = make_transport(start_error=RuntimeError("boom"))

        future = get_string(transport, URL)

        with pytest.raises(RuntimeError, match="boom"):
            await future
        assert transport.release_calls == 1

    @pytest.mark.asyncio
    async def test_reused_transport_fails_second_call(self, make_transport):
        """Test a released transport cannot run a second operation."""
        transport = make_transport(auto_result="first", auto_complete=True)

        assert await get_string(transport, URL) == "first"

        second = get_string(transport, URL)
        with pytest.raises(RuntimeError, match="released transport"):
            await second

    @pytest.mark.asyncio
    async def test_listener_registration_error_releases(self, make_transport, target_file):
        """Test a failing completion listener registration releases the transport."""
        transport = make_transport(listen_error=RuntimeError("listener rejected"))

        with pytest.raises(RuntimeError, match="listener rejected"):
            get_file(transport, URL, target_file, on_progress=Mock())

        assert transport.calls == ["listen:progress", "listen:get_file", "release"]
        assert transport.release_calls == 1
        assert transport.started_operation is None
        assert transport._progress_listeners == []
