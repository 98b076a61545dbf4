"""
Session snapshot parsing.

Extracts the fields the status line needs from the JSON document the coding
assistant writes to stdin. Every field is optional; missing or mistyped
values fall back to defaults instead of failing.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

UNKNOWN_SESSION = "unknown"
MAX_COUNT = 2**63 - 1


@dataclass(frozen=True)
class SessionSnapshot:
    """Session metadata as of one status refresh."""
    session_id: str = UNKNOWN_SESSION
    model_name: str = "Unknown"
    model_id: str = ""
    current_dir: str = ""
    total_cost_usd: float = 0.0
    total_duration_ms: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    context_used_percentage: float = 0.0
    context_window_size: int = 0

    @classmethod
    def from_dict(cls, data: Any, cwd: Optional[str] = None) -> "SessionSnapshot":
        """Build a snapshot from decoded JSON.

        Args:
            data: Decoded snapshot; anything but a dict yields all defaults
            cwd: Fallback working directory (defaults to the process cwd)

        Returns:
            SessionSnapshot with defaults for absent or invalid fields
        """
        if not isinstance(data, dict):
            data = {}

        model = _section(data, "model")
        workspace = _section(data, "workspace")
        cost = _section(data, "cost")
        context = _section(data, "context_window")

        return cls(
            session_id=_string(data.get("session_id")) or UNKNOWN_SESSION,
            model_name=_string(model.get("display_name")) or "Unknown",
            model_id=_string(model.get("id")),
            current_dir=_string(workspace.get("current_dir")) or cwd or os.getcwd(),
            total_cost_usd=_number(cost.get("total_cost_usd")),
            total_duration_ms=_count(cost.get("total_duration_ms")),
            total_input_tokens=_count(context.get("total_input_tokens")),
            total_output_tokens=_count(context.get("total_output_tokens")),
            context_used_percentage=_number(context.get("used_percentage")),
            context_window_size=_count(context.get("context_window_size"))
        )


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _number(value: Any) -> float:
    # bool is an int subclass but never a meaningful amount here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    if value != value or value in (float("inf"), float("-inf")):
        return 0.0
    try:
        return float(value)
    except OverflowError:
        return 0.0


def _count(value: Any) -> int:
    """Coerce to a non-negative integer that fits a SQLite INTEGER."""
    if isinstance(value, int) and not isinstance(value, bool):
        return min(MAX_COUNT, max(0, value))
    return min(MAX_COUNT, max(0, int(_number(value))))
