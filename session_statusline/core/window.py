"""
Trailing-window quota estimation.

Aggregates usage events over a sliding time window against a token limit.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable

from session_statusline.storage.models import UsageEvent


@dataclass(frozen=True)
class WindowStats:
    """Quota consumption for one trailing window."""
    percentage: float
    time_remaining_ms: int
    total_tokens: int = 0

    def __post_init__(self):
        """Validate stats are within range."""
        if not 0 <= self.percentage <= 100:
            raise ValueError("percentage must be between 0 and 100")
        if self.time_remaining_ms < 0:
            raise ValueError("time_remaining_ms cannot be negative")

    @property
    def time_remaining(self) -> timedelta:
        """Time until the oldest counted usage leaves the window."""
        return timedelta(milliseconds=self.time_remaining_ms)


def compute_window_stats(
    events: Iterable[UsageEvent],
    window_ms: int,
    limit: int,
    now: int
) -> WindowStats:
    """Compute quota consumption for the window ending at ``now``.

    An event counts while ``now - timestamp < window_ms``. The window "rolls"
    when its oldest counted event ages out; with nothing counted, the whole
    window remains.

    Args:
        events: Usage events in any order
        window_ms: Window length in milliseconds
        limit: Token quota for the window
        now: Current time in epoch milliseconds

    Returns:
        WindowStats with percentage clamped to 100

    Raises:
        ValueError: If limit or window_ms is not positive
    """
    if limit <= 0:
        raise ValueError("limit must be > 0")
    if window_ms <= 0:
        raise ValueError("window_ms must be > 0")

    in_window = [e for e in events if now - e.timestamp < window_ms]
    total_tokens = sum(e.total_tokens for e in in_window)
    percentage = max(0.0, min(100.0, total_tokens * 100 / limit))

    if in_window:
        oldest = min(e.timestamp for e in in_window)
        time_remaining_ms = max(0, oldest + window_ms - now)
    else:
        time_remaining_ms = window_ms

    return WindowStats(
        percentage=percentage,
        time_remaining_ms=time_remaining_ms,
        total_tokens=total_tokens
    )
