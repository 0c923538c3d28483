"""Transport configuration from environment variables."""

import os
from dataclasses import dataclass, field
from typing import Set

from netbridge import __version__


def _parse_positive_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass
class TransportConfig:
    """Behavior of the bundled aiohttp transport.

    Load from environment using TransportConfig.from_env().
    Timing values in seconds.
    """

    # Total request timeout (connect + read)
    timeout_seconds: int = 30

    # Read size for streamed file downloads and stream opens
    chunk_size: int = 64 * 1024

    user_agent: str = f"netbridge/{__version__}"

    # Schemes accepted for resource URLs
    allowed_schemes: Set[str] = field(default_factory=lambda: {"http", "https"})

    @classmethod
    def from_env(cls) -> "TransportConfig":
        """Load configuration from environment variables.

        Optional environment variables (with defaults):
            NETBRIDGE_TIMEOUT_SECONDS: 30 (default)
            NETBRIDGE_CHUNK_SIZE: 65536 (default, bytes)
            NETBRIDGE_USER_AGENT: netbridge/<version> (default)
            NETBRIDGE_ALLOWED_SCHEMES: http,https (default, comma-separated)

        Raises:
            ValueError: If a numeric variable is not a positive integer
        """
        schemes_str = os.getenv("NETBRIDGE_ALLOWED_SCHEMES", "http,https")
        allowed_schemes = {s.strip().lower() for s in schemes_str.split(",") if s.strip()}
        if not allowed_schemes:
            raise ValueError("NETBRIDGE_ALLOWED_SCHEMES must name at least one scheme")

        return cls(
            timeout_seconds=_parse_positive_int("NETBRIDGE_TIMEOUT_SECONDS", "30"),
            chunk_size=_parse_positive_int("NETBRIDGE_CHUNK_SIZE", str(64 * 1024)),
            user_agent=os.getenv("NETBRIDGE_USER_AGENT", f"netbridge/{__version__}"),
            allowed_schemes=allowed_schemes,
        )
