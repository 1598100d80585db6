"""
Kraken Desk — Common Utility Functions
"""
from decimal import Decimal, ROUND_DOWN
from typing import Sequence
import math
import time

VOLUME_STEP = Decimal("1e-8")


def now_millis() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safe division avoiding ZeroDivisionError."""
    if denominator == 0:
        return default
    return numerator / denominator


def clamp(value: float, min_val: float = 0.0, max_val: float = 100.0) -> float:
    """Clamp a value between min and max."""
    return max(min_val, min(max_val, value))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    return safe_divide(sum(values), len(values))


def format_volume(amount: float) -> str:
    """
    Render an order volume at 8-decimal precision without exponent notation.

    Digits past the 8th decimal are truncated, never rounded up
    (0.123456789 -> 0.12345678). Raises ValueError for non-finite amounts
    and for amounts that truncate to zero or below.
    """
    if not math.isfinite(amount):
        raise ValueError(f"Order amount must be finite, got {amount}")
    volume = Decimal(str(amount)).quantize(VOLUME_STEP, rounding=ROUND_DOWN)
    if volume <= 0:
        raise ValueError(f"Order amount must be at least {VOLUME_STEP}, got {amount}")
    return format(volume.normalize(), "f")
