"""
Formatting helpers for status line segments.

Pure string and style helpers: no I/O, no state.
"""

import math
import os
import re
from typing import Optional

from rich.text import Text

BAR_CHAR = "━"
EMPTY_BAR_COLOR = 238

_VERSION_PATTERN = re.compile(r"(?:opus|sonnet|haiku)-(\d+)-(\d{1,2})(?!\d)")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int(math.floor(value + 0.5))


def bar_color(percentage: float) -> int:
    """256-color code for a fill percentage: green, yellow, orange, red."""
    if percentage <= 50:
        return 70
    if percentage <= 75:
        return 178
    if percentage <= 90:
        return 208
    return 196


def progress_bar(percentage: float, width: int = 10) -> Text:
    """Render a fixed-width bar filled to ``percentage``."""
    clamped = max(0.0, min(100.0, percentage))
    filled = round_half_up(clamped / 100 * width)
    bar = Text()
    bar.append(BAR_CHAR * filled, style=f"color({bar_color(clamped)})")
    bar.append(BAR_CHAR * (width - filled), style=f"color({EMPTY_BAR_COLOR})")
    return bar


def shorten_path(path: str, max_len: int = 30, home: Optional[str] = None) -> str:
    """Abbreviate ``path`` for display.

    The home directory becomes ``~``. Paths still longer than ``max_len``
    keep their first segment and last two segments around an ellipsis.
    """
    home = home if home is not None else os.path.expanduser("~")
    if home and (path == home or path.startswith(home.rstrip("/") + "/")):
        path = "~" + path[len(home.rstrip("/")):]
    if len(path) <= max_len:
        return path

    parts = path.split("/")
    if len(parts) <= 3:
        return path
    return "/".join([parts[0], "…", *parts[-2:]])


def format_duration(ms: int) -> str:
    """Elapsed session time, e.g. ``45m``, ``2h``, ``1h 5m``."""
    total_min = max(0, int(ms)) // 60000
    if total_min < 60:
        return f"{total_min}m"
    hours, minutes = divmod(total_min, 60)
    return f"{hours}h {minutes}m" if minutes else f"{hours}h"


def format_time_left(ms: int) -> str:
    """Countdown until a window rolls, e.g. ``0m``, ``3h``, ``4h12m``."""
    if ms <= 0:
        return "0m"
    total_min = int(ms) // 60000
    if total_min < 60:
        return f"{total_min}m"
    hours, minutes = divmod(total_min, 60)
    return f"{hours}h{minutes}m" if minutes else f"{hours}h"


def model_version(model_id: str) -> str:
    """Extract a ``major.minor`` version from a model id.

    ``claude-opus-4-6`` gives ``4.6``; ids without a family/version pair,
    or where the trailing number is a release date, give ``""``.
    """
    match = _VERSION_PATTERN.search(model_id or "")
    if not match:
        return ""
    return f"{match.group(1)}.{match.group(2)}"
