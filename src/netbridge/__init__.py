"""
netbridge: futures over event-emitting network operations.

Adapts callback-style transports (text fetch, file fetch, stream open, text
submission) into single-shot asyncio futures, releasing the transport exactly
once on success, failure, or cancellation.

Example:
    transport = with_utf8_encoding(AiohttpTransport())
    body = await get_string(transport, "https://example.com/feed.xml")
"""

__version__ = "0.1.0"

from netbridge.adapters import (  # noqa: E402
    FileFetchAdapter,
    StreamOpenAdapter,
    StringFetchAdapter,
    StringPostAdapter,
    get_file,
    get_stream,
    get_string,
    post_string,
)
from netbridge.bridge import ResourceLifecycleGuard, bridge  # noqa: E402
from netbridge.common.exceptions import (  # noqa: E402
    BridgeError,
    CompletionHookError,
    InvalidArgumentError,
    SettlementError,
    TransportError,
)
from netbridge.config import TransportConfig  # noqa: E402
from netbridge.configurator import with_json_headers, with_utf8_encoding  # noqa: E402
from netbridge.transport import (  # noqa: E402
    AiohttpTransport,
    CompletionEvent,
    CompletionSignal,
    EventTransport,
    ProgressEvent,
)

__all__ = [
    # Adapters
    "StringFetchAdapter",
    "FileFetchAdapter",
    "StreamOpenAdapter",
    "StringPostAdapter",
    "get_string",
    "get_file",
    "get_stream",
    "post_string",
    # Bridge
    "bridge",
    "ResourceLifecycleGuard",
    # Configuration
    "TransportConfig",
    "with_json_headers",
    "with_utf8_encoding",
    # Transport
    "EventTransport",
    "AiohttpTransport",
    "CompletionEvent",
    "CompletionSignal",
    "ProgressEvent",
    # Errors
    "BridgeError",
    "InvalidArgumentError",
    "TransportError",
    "CompletionHookError",
    "SettlementError",
]
