"""
SQLite schema DDL for the recommendation event log.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is **idempotent**:
safe to call on an already-initialized database (e.g. after restart or in tests).

``recommendation_events`` is append-only. ``event_id`` is AUTOINCREMENT so
ids are never reused and ascending ``event_id`` is the total insertion
order. The CHECK constraints mirror the model invariants;
events are validated in Python before they get here.
"""

from __future__ import annotations

import logging
import sqlite3

from rec_trends.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_RECOMMENDATION_EVENTS = """
CREATE TABLE IF NOT EXISTS recommendation_events (
    event_id        INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id         TEXT    NOT NULL,
    subject_id      TEXT    NOT NULL,
    timestamp_ms    INTEGER NOT NULL CHECK (timestamp_ms >= 0),
    confidence      REAL    NOT NULL CHECK (confidence >= 0 AND confidence <= 100),
    position        INTEGER NOT NULL CHECK (position >= 1),
    recorded_at     TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_rec_events_time
    ON recommendation_events (timestamp_ms);
CREATE INDEX IF NOT EXISTS idx_rec_events_item_time
    ON recommendation_events (item_id, timestamp_ms);
"""

_ALL_DDL = [_DDL_RECOMMENDATION_EVENTS, _DDL_INDEXES]

ALL_TABLE_NAMES: list[str] = ["recommendation_events"]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``.

    Idempotent — safe to call on an already-initialized database.

    Args:
        conn: An open ``sqlite3.Connection``.

    Raises:
        StoreUnavailableError: If the file is not a usable SQLite database.
    """
    logger.debug("Applying schema to database...")

    try:
        for ddl in _ALL_DDL:
            for statement in _split_ddl(ddl):
                conn.execute(statement)
        conn.commit()
    except sqlite3.Error as exc:
        raise StoreUnavailableError("open", f"schema could not be applied: {exc}") from exc
    logger.info("Schema applied: %d tables, indexes created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return the table names present in the database, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row[0] for row in rows]


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    """Return the index names present in the database, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='index' ORDER BY name;"
    ).fetchall()
    return [row[0] for row in rows]
