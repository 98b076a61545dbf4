"""
Usage tracking across invocations.

Converts per-session cumulative token counters into delta events, prunes
events past the retention period, and persists the result.

Processing Order:
1. Prune events older than the retention period
2. Derive input/output deltas from the session's watermark
3. Append an event when either delta is positive
4. Move the session's watermark to the observed totals
5. Drop watermarks of sessions without surviving events
"""

import logging
import time
from dataclasses import replace
from datetime import timedelta

from session_statusline.storage.models import SessionCursor, UsageEvent, UsageStore
from session_statusline.storage.repository import UsageRepository

from .watermark import advance

logger = logging.getLogger(__name__)

RETENTION_MS = int(timedelta(days=7).total_seconds() * 1000)


def current_time_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def prune_events(store: UsageStore, now: int, retention_ms: int = RETENTION_MS) -> UsageStore:
    """Return a copy of ``store`` without events older than ``retention_ms``."""
    events = [e for e in store.events if now - e.timestamp < retention_ms]
    return replace(store, events=events)


def apply_observation(
    store: UsageStore,
    session_id: str,
    cumulative_input: int,
    cumulative_output: int,
    now: int,
    retention_ms: int = RETENTION_MS
) -> UsageStore:
    """Fold one observation of a session's cumulative counters into ``store``.

    Repeating the same observation adds nothing, because the watermark
    already sits at the observed totals. ``store`` itself is not modified.

    Args:
        store: Current usage state
        session_id: Identifier of the reporting session
        cumulative_input: Session's running input token total
        cumulative_output: Session's running output token total
        now: Observation time in epoch milliseconds
        retention_ms: Age after which events are discarded

    Returns:
        New UsageStore reflecting the observation
    """
    pruned = prune_events(store, now, retention_ms)
    events = list(pruned.events)
    cursors = dict(pruned.cursors)

    prior = cursors.get(session_id, SessionCursor(0, 0))
    delta_input, input_mark = advance(prior.cumulative_input, cumulative_input)
    delta_output, output_mark = advance(prior.cumulative_output, cumulative_output)

    if delta_input > 0 or delta_output > 0:
        events.append(UsageEvent(
            timestamp=now,
            input_delta=delta_input,
            output_delta=delta_output,
            session_id=session_id
        ))

    cursors[session_id] = SessionCursor(input_mark, output_mark)

    active_sessions = {e.session_id for e in events}
    cursors = {sid: c for sid, c in cursors.items() if sid in active_sessions}

    return UsageStore(events=events, cursors=cursors)


def record_observation(
    repository: UsageRepository,
    session_id: str,
    cumulative_input: int,
    cumulative_output: int,
    now: int,
    retention_ms: int = RETENTION_MS
) -> UsageStore:
    """Load the store, apply one observation, and persist the result.

    Storage failures degrade rather than raise: an unreadable store starts
    empty, and an unwritable one leaves the returned store unsaved.

    Args:
        repository: Durable storage for the usage ledger
        session_id: Identifier of the reporting session
        cumulative_input: Session's running input token total
        cumulative_output: Session's running output token total
        now: Observation time in epoch milliseconds
        retention_ms: Age after which events are discarded

    Returns:
        The updated in-memory store
    """
    store = apply_observation(
        repository.load(),
        session_id,
        cumulative_input,
        cumulative_output,
        now,
        retention_ms
    )
    if not repository.save(store):
        logger.debug("Usage for session %s was not persisted", session_id)
    return store
