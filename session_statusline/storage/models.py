"""
Data models for storage layer.

Defines the usage ledger entities persisted between invocations.
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class UsageEvent:
    """Immutable record of token consumption attributable to one session.

    Covers the usage observed between two consecutive snapshots of the
    session's cumulative counters. Once written, events are never modified;
    they are only dropped when they age past the retention period.
    """
    timestamp: int  # epoch milliseconds
    input_delta: int
    output_delta: int
    session_id: str

    @property
    def total_tokens(self) -> int:
        """Total tokens in this event (input + output)."""
        return self.input_delta + self.output_delta


@dataclass(frozen=True)
class SessionCursor:
    """Last cumulative totals observed for a session."""
    cumulative_input: int
    cumulative_output: int


@dataclass
class UsageStore:
    """Complete persisted usage state.

    Events are treated as an unordered set; consumers filter by timestamp.
    """
    events: List[UsageEvent] = field(default_factory=list)
    cursors: Dict[str, SessionCursor] = field(default_factory=dict)

    @property
    def session_ids(self) -> set:
        """Sessions with at least one stored event."""
        return {event.session_id for event in self.events}
