"""
Database connection management.

Provides SQLite connection for usage persistence.
"""

import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = "~/.claude/statusline-usage.db"


def get_connection(db_path: str = DEFAULT_DB_PATH, create_dirs: bool = False) -> sqlite3.Connection:
    """Create and return a SQLite database connection.

    Args:
        db_path: Path to SQLite database file (``~`` is expanded)
        create_dirs: Create missing parent directories before connecting

    Returns:
        SQLite connection with a short busy timeout so concurrent
        status refreshes do not stall each other

    Raises:
        sqlite3.Error: If the database cannot be opened
        OSError: If parent directories cannot be created
    """
    path = Path(db_path).expanduser()
    if create_dirs:
        path.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(str(path), timeout=1.0)
