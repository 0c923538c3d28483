"""
Chainable transport setters.

Both helpers accept None and return None without raising, so they can be
chained on an optional transport. This is deliberately more permissive than
the adapters, which reject missing inputs.
"""

from typing import Optional, TypeVar

TransportT = TypeVar("TransportT")

JSON_HEADERS = {
    "Accept": "application/json, text/javascript, */*; q=0.01",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "no-cache",
    "Content-Type": "application/json; charset=utf-8",
}


def with_json_headers(transport: Optional[TransportT]) -> Optional[TransportT]:
    """Set conventional JSON request headers; re-applying replaces values."""
    if transport is None:
        return None

    for name, value in JSON_HEADERS.items():
        transport.headers[name] = value

    return transport


def with_utf8_encoding(transport: Optional[TransportT]) -> Optional[TransportT]:
    """Fix text encoding to UTF-8."""
    if transport is None:
        return None

    transport.encoding = "utf-8"

    return transport
