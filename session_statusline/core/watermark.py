"""
Cumulative counter watermarks.

Upstream sources report running totals rather than increments. A watermark
remembers the last total seen for one source so the next observation can be
turned into an increment locally.
"""

from typing import Tuple


def advance(previous: int, current: int) -> Tuple[int, int]:
    """Advance a watermark to a newly observed cumulative value.

    A value below the watermark counts as no new usage; the watermark still
    moves to it so later increments are measured from the latest observation.

    Args:
        previous: Last observed cumulative value (0 for an unseen source)
        current: Newly observed cumulative value

    Returns:
        Tuple of (delta, new watermark), delta never negative
    """
    return max(0, current - previous), current
