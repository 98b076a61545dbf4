"""
Repository pattern for data access.

Handles loading and saving the usage ledger. The whole store is read at the
start of an invocation and rewritten at the end, inside one transaction.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Dict, List

from .db import DEFAULT_DB_PATH, get_connection
from .models import SessionCursor, UsageEvent, UsageStore

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS usage_event (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp INTEGER NOT NULL,
        input_delta INTEGER NOT NULL,
        output_delta INTEGER NOT NULL,
        session_id TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS session_cursor (
        session_id TEXT PRIMARY KEY,
        cumulative_input INTEGER NOT NULL,
        cumulative_output INTEGER NOT NULL
    )
    """,
)


class UsageRepository:
    """Repository for the persisted usage ledger.

    Storage failures never escape this class: an unreadable database loads
    as an empty store and a failed write is reported through the return
    value of :meth:`save`.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        """Initialize the repository with a database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path

    @property
    def path(self) -> Path:
        return Path(self.db_path).expanduser()

    def initialize_schema(self) -> None:
        """Create the ledger tables if they don't exist.

        Raises:
            sqlite3.Error: If the database cannot be created
        """
        conn = get_connection(self.db_path, create_dirs=True)
        try:
            _create_tables(conn)
        finally:
            conn.close()

    def load(self) -> UsageStore:
        """Load the full usage store.

        Returns:
            The persisted store, or an empty store when the database is
            missing, unreadable, or holds malformed rows
        """
        if not self.path.exists():
            return UsageStore()

        try:
            conn = get_connection(self.db_path)
        except sqlite3.Error as e:
            logger.debug("Cannot open usage database %s: %s", self.path, e)
            return UsageStore()

        try:
            events = _read_events(conn)
            cursors = _read_cursors(conn)
        except (sqlite3.Error, ValueError) as e:
            logger.debug("Discarding unreadable usage database %s: %s", self.path, e)
            return UsageStore()
        finally:
            conn.close()

        return UsageStore(events=events, cursors=cursors)

    def save(self, store: UsageStore) -> bool:
        """Overwrite the persisted store with ``store``.

        Old rows are deleted and the new snapshot inserted in a single
        transaction, so readers see either the old or the new state.

        A file that is not a SQLite database is replaced, matching the
        fresh start :meth:`load` reports for it.

        Args:
            store: Store to persist

        Returns:
            True if the snapshot was written, False if storage is unwritable
        """
        try:
            self._write_snapshot(store)
        except OverflowError as e:
            # Counters beyond the SQLite INTEGER range cannot be stored
            logger.debug("Failed to persist usage to %s: %s", self.path, e)
            return False
        except sqlite3.OperationalError as e:
            logger.debug("Failed to persist usage to %s: %s", self.path, e)
            return False
        except sqlite3.DatabaseError as e:
            logger.debug("Replacing corrupt usage database %s: %s", self.path, e)
            try:
                self.path.unlink()
                self._write_snapshot(store)
            except (sqlite3.Error, OSError) as retry_error:
                logger.debug("Failed to persist usage to %s: %s", self.path, retry_error)
                return False
        except (sqlite3.Error, OSError) as e:
            logger.debug("Cannot open usage database %s for writing: %s", self.path, e)
            return False

        return True

    def _write_snapshot(self, store: UsageStore) -> None:
        conn = get_connection(self.db_path, create_dirs=True)
        try:
            _create_tables(conn)
            conn.execute("BEGIN TRANSACTION")
            conn.execute("DELETE FROM usage_event")
            conn.execute("DELETE FROM session_cursor")
            conn.executemany(
                """
                INSERT INTO usage_event
                (timestamp, input_delta, output_delta, session_id)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (e.timestamp, e.input_delta, e.output_delta, e.session_id)
                    for e in store.events
                ],
            )
            conn.executemany(
                """
                INSERT INTO session_cursor
                (session_id, cumulative_input, cumulative_output)
                VALUES (?, ?, ?)
                """,
                [
                    (session_id, c.cumulative_input, c.cumulative_output)
                    for session_id, c in store.cursors.items()
                ],
            )
            conn.commit()
        except Exception:
            if conn.in_transaction:
                conn.rollback()
            raise
        finally:
            conn.close()

    def reset(self) -> None:
        """Remove every event and cursor.

        Raises:
            sqlite3.Error: If the database cannot be written
        """
        conn = get_connection(self.db_path, create_dirs=True)
        try:
            _create_tables(conn)
            conn.execute("BEGIN TRANSACTION")
            conn.execute("DELETE FROM usage_event")
            conn.execute("DELETE FROM session_cursor")
            conn.commit()
        except Exception:
            if conn.in_transaction:
                conn.rollback()
            raise
        finally:
            conn.close()


def _create_tables(conn: sqlite3.Connection) -> None:
    for statement in _SCHEMA:
        conn.execute(statement)
    conn.commit()


def _require_int(value, column: str) -> int:
    if not isinstance(value, int):
        raise ValueError(f"Column '{column}' holds non-integer value {value!r}")
    return value


def _read_events(conn: sqlite3.Connection) -> List[UsageEvent]:
    cursor = conn.execute(
        "SELECT timestamp, input_delta, output_delta, session_id FROM usage_event ORDER BY id"
    )
    events = []
    for row in cursor.fetchall():
        if not isinstance(row[3], str):
            raise ValueError(f"Event session id is not text: {row[3]!r}")
        events.append(UsageEvent(
            timestamp=_require_int(row[0], "timestamp"),
            input_delta=_require_int(row[1], "input_delta"),
            output_delta=_require_int(row[2], "output_delta"),
            session_id=row[3]
        ))
    return events


def _read_cursors(conn: sqlite3.Connection) -> Dict[str, SessionCursor]:
    cursor = conn.execute(
        "SELECT session_id, cumulative_input, cumulative_output FROM session_cursor"
    )
    cursors = {}
    for row in cursor.fetchall():
        if not isinstance(row[0], str):
            raise ValueError(f"Cursor session id is not text: {row[0]!r}")
        cursors[row[0]] = SessionCursor(
            cumulative_input=_require_int(row[1], "cumulative_input"),
            cumulative_output=_require_int(row[2], "cumulative_output")
        )
    return cursors
