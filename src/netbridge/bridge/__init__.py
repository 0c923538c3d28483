"""
Completion bridging.

Provides:
- bridge(): one-shot event source -> asyncio.Future with exactly-once settlement
- ResourceLifecycleGuard: exactly-once release of the transport
"""

from netbridge.bridge.core import bridge
from netbridge.bridge.guard import ResourceLifecycleGuard

__all__ = [
    "bridge",
    "ResourceLifecycleGuard",
]
