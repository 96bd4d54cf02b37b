"""Shared arithmetic for turning cumulative counters into rates.

Functions:
    counter_delta: Difference of two cumulative counters, modulo counter width
    per_second: Scale an interval delta to a per-second rate
    average_per_io: Per-request average, 0.0 when no requests completed
    sectors_to_kb: Convert 512-byte sectors to kilobytes
    clamp_percent: Bound a percentage to 0..100
"""

from __future__ import annotations

from blkiostat.core.constants import COUNTER_WIDTH_32, SECTOR_SIZE


def counter_delta(current: int, previous: int, width: int = COUNTER_WIDTH_32) -> int:
    """Compute the increase of a cumulative counter.

    A counter that wrapped once between samples still yields the true delta.

    Args:
        current: Counter value in the newer sample
        previous: Counter value in the older sample
        width: Counter modulus (2**32 or 2**64)

    Returns:
        Non-negative delta
    """
    return (current - previous) % width


def per_second(delta: float, elapsed_ms: float) -> float:
    """Convert an interval delta to a per-second rate.

    Args:
        delta: Counter increase during the interval
        elapsed_ms: Interval length in milliseconds (must be > 0)

    Returns:
        Rate per second
    """
    return 1000.0 * delta / elapsed_ms


def average_per_io(total: float, n_ios: float) -> float:
    """Average of total over the completed requests, 0.0 if there were none."""
    return total / n_ios if n_ios else 0.0


def sectors_to_kb(sectors: float) -> float:
    """Convert sectors to kilobytes."""
    return sectors * SECTOR_SIZE / 1024


def clamp_percent(value: float) -> float:
    """Bound a percentage to the 0..100 range."""
    return max(0.0, min(100.0, value))
