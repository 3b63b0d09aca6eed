"""
Base repository providing shared SQLite execution helpers.

Repositories receive a ``sqlite3.Connection`` at construction time. The
connection is opened and managed by the caller (typically via
``get_connection()``).

Design:
  - No ORM — all SQL is explicit and lives in repository methods.
  - Repositories speak Pydantic models, not raw dicts.
  - Any ``sqlite3.Error`` is re-raised as ``StoreUnavailableError`` so the
    host sees one persistence failure type regardless of medium.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional

from rec_trends.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Shared SQL execution helpers.

    Attributes:
        conn: The active ``sqlite3.Connection``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(
        self,
        sql: str,
        params: tuple[Any, ...] | dict[str, Any] = (),
        operation: str = "read",
    ) -> sqlite3.Cursor:
        """Execute a single SQL statement.

        Args:
            sql: SQL string with ``?`` or ``:name`` placeholders.
            params: Positional tuple or named dict of parameters.
            operation: Label used in ``StoreUnavailableError`` on failure.

        Returns:
            The resulting ``sqlite3.Cursor``.

        Raises:
            StoreUnavailableError: If SQLite reports an error.
        """
        logger.debug("SQL: %s | params: %s", sql.strip(), params)
        try:
            return self.conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise StoreUnavailableError(operation, str(exc)) from exc

    def fetchone(
        self,
        sql: str,
        params: tuple[Any, ...] | dict[str, Any] = (),
    ) -> Optional[sqlite3.Row]:
        """Execute a query and return the first row, or ``None``."""
        try:
            return self.execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailableError("read", str(exc)) from exc

