"""
SQLite connection management for the event store.

Provides a context manager ``get_connection()`` that:
  - Enables WAL journal mode so trend queries can read while appends commit.
  - Sets a busy timeout to handle lock contention gracefully.
  - Uses ``sqlite3.Row`` factory so rows behave like dicts.
  - Commits on clean exit, rolls back on exception.
  - Reports a database that cannot be opened, or a file that is not a
    SQLite database, as ``StoreUnavailableError``.

Usage::

    from rec_trends.db.connection import get_connection

    with get_connection("data/db/rec_trends.db") as conn:
        store = SQLiteEventStore(conn)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from rec_trends.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Generator[sqlite3.Connection, None, None]:
    """Context manager yielding a configured SQLite connection.

    The database file (and any parent directories) are created if they do
    not already exist. The connection may be shared with worker threads;
    ``SQLiteEventStore`` serializes its own writes.

    Args:
        db_path: Path to the SQLite database file. Use ``":memory:"`` for
            in-memory databases (useful in tests).
        wal_mode: If ``True``, enable WAL journal mode.
        busy_timeout_ms: Milliseconds to wait when the database is locked.

    Yields:
        An open, configured ``sqlite3.Connection``.

    Raises:
        StoreUnavailableError: If the database cannot be opened.
    """
    try:
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(
            db_path,
            timeout=busy_timeout_ms / 1000,
            check_same_thread=False,
        )
    except (OSError, sqlite3.Error) as exc:
        raise StoreUnavailableError("open", f"{db_path}: {exc}") from exc

    conn.row_factory = sqlite3.Row

    try:
        conn.execute(f"PRAGMA busy_timeout = {busy_timeout_ms};")
        if wal_mode and db_path != ":memory:":
            conn.execute("PRAGMA journal_mode = WAL;")
    except sqlite3.Error as exc:
        conn.close()
        raise StoreUnavailableError("open", f"{db_path}: {exc}") from exc
    logger.debug("Opened event store database at %s", db_path)

    try:
        yield conn
        conn.commit()

    except Exception:
        conn.rollback()
        raise

    finally:
        conn.close()
