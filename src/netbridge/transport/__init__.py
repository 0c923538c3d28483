"""
Event-emitting transports.

Provides:
- EventTransport: abstract one-shot transport (listeners, start, cancel, release)
- AiohttpTransport: HTTP implementation over aiohttp
- CompletionEvent / CompletionSignal / ProgressEvent
"""

from netbridge.transport.aiohttp_transport import AiohttpTransport
from netbridge.transport.base import EventTransport
from netbridge.transport.events import CompletionEvent, CompletionSignal, ProgressEvent

__all__ = [
    "EventTransport",
    "AiohttpTransport",
    "CompletionEvent",
    "CompletionSignal",
    "ProgressEvent",
]
