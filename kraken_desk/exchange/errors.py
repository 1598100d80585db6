"""
Kraken Desk — Exchange Error Types
"""
from typing import Any, List, Optional


class KrakenError(Exception):
    """Base class for every failure raised by the exchange client."""


class TransportError(KrakenError):
    """HTTP-level failure: non-2xx status, timeout or broken connection."""

    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        prefix = f"HTTP {status}" if status is not None else "Network error"
        super().__init__(f"{prefix}: {message}")


class VenueError(KrakenError):
    """The venue answered 2xx but reported errors in its envelope."""

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__(f"Kraken API error: {', '.join(self.messages)}")


class ParseError(KrakenError):
    """The response did not have the expected shape."""

    def __init__(self, field: str, raw_value: Any):
        self.field = field
        self.raw_value = raw_value
        super().__init__(f"Unexpected value for {field!r}: {str(raw_value)[:200]}")
