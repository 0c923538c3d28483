"""Exactly-once release of a transport owned by one operation."""

import logging
import threading
from typing import Any

from netbridge.common.logging import LoggedClass


class ResourceLifecycleGuard(LoggedClass):
    """
    Releases a transport exactly once, whichever exit path runs first.

    The guard is armed when an adapter has validated its inputs and is about
    to touch the transport; a failed validation never creates one. Release is
    thread-safe because transports may report completion from their own
    threads.

    Usage:
        guard = ResourceLifecycleGuard(transport)
        with guard:
            ...  # release() runs on exit, normal or exceptional

    Attributes:
        resource: The guarded transport (anything with a ``release()`` method)
    """

    log_component = "guard"

    def __init__(self, resource: Any):
        super().__init__()
        self.resource = resource
        self._lock = threading.Lock()
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> bool:
        """
        Release the guarded resource if not yet released.

        Returns:
            True if this call performed the release
        """
        with self._lock:
            if self._released:
                return False
            self._released = True

        self._log(logging.DEBUG, "Releasing guarded resource")
        self.resource.release()
        return True

    def __enter__(self) -> "ResourceLifecycleGuard":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
