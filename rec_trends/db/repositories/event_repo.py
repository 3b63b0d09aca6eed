"""
SQLite-backed event store over the ``recommendation_events`` table.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterable, Iterator

from rec_trends.db.repositories.base import BaseRepository
from rec_trends.errors import StoreUnavailableError
from rec_trends.events.store import EventInput, EventSnapshot, EventStore, validate_events
from rec_trends.models.event import RecommendationEvent

logger = logging.getLogger(__name__)

_FETCH_BATCH_SIZE = 500


class SQLiteEventStore(BaseRepository, EventStore):
    """Append-only access to ``recommendation_events``.

    Each ``append`` batch is one transaction: either every event lands or
    none does. Snapshots are bounded by the highest ``event_id`` visible at
    the time they are taken and are streamed in ``_FETCH_BATCH_SIZE`` chunks.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        super().__init__(conn)
        self._lock = threading.Lock()

    def append(self, events: Iterable[EventInput]) -> list[RecommendationEvent]:
        """Validate ``events`` and insert them in one transaction.

        Args:
            events: Batch of events or event mappings.

        Returns:
            The stored events with ``event_id`` assigned.

        Raises:
            InvalidEventError: If any event is invalid (nothing is written).
            StoreUnavailableError: If the insert or commit fails.
        """
        batch = validate_events(events)
        if not batch:
            return []

        with self._lock:
            try:
                stored: list[RecommendationEvent] = []
                for event in batch:
                    cursor = self.execute(
                        """
                        INSERT INTO recommendation_events (
                            item_id, subject_id, timestamp_ms, confidence, position
                        ) VALUES (?, ?, ?, ?, ?);
                        """,
                        (
                            event.item_id,
                            event.subject_id,
                            event.timestamp,
                            event.confidence,
                            event.position,
                        ),
                        operation="append",
                    )
                    stored.append(event.model_copy(update={"event_id": cursor.lastrowid}))
                self.conn.commit()
            except StoreUnavailableError:
                self._rollback_quietly()
                raise
            except sqlite3.Error as exc:
                self._rollback_quietly()
                raise StoreUnavailableError("append", str(exc)) from exc
            except BaseException:
                # Nothing from a failed batch may stay in the open transaction.
                self._rollback_quietly()
                raise

        logger.info(
            "Appended %d recommendation event(s).",
            len(stored),
            extra={
                "event_count": len(stored),
                "first_event_id": stored[0].event_id,
                "last_event_id": stored[-1].event_id,
            },
        )
        return stored

    def all(self) -> EventSnapshot:
        return self._snapshot(None)

    def since(self, timestamp_ms: int) -> EventSnapshot:
        return self._snapshot(timestamp_ms)

    def count(self) -> int:
        row = self.fetchone("SELECT COUNT(*) AS n FROM recommendation_events;")
        assert row is not None
        return int(row["n"])

    def max_event_id(self) -> int:
        """Return the highest assigned ``event_id`` (0 for an empty store)."""
        row = self.fetchone(
            "SELECT COALESCE(MAX(event_id), 0) AS max_id FROM recommendation_events;"
        )
        assert row is not None
        return int(row["max_id"])

    # ── Private helpers ───────────────────────────────────────────────────────

    def _snapshot(self, since_ms: int | None) -> EventSnapshot:
        bound = self.max_event_id()
        return EventSnapshot(lambda: self._iter_rows(bound, since_ms))

    def _iter_rows(self, bound: int, since_ms: int | None) -> Iterator[RecommendationEvent]:
        if since_ms is None:
            cursor = self.execute(
                """
                SELECT * FROM recommendation_events
                WHERE event_id <= ?
                ORDER BY event_id;
                """,
                (bound,),
            )
        else:
            cursor = self.execute(
                """
                SELECT * FROM recommendation_events
                WHERE event_id <= ? AND timestamp_ms >= ?
                ORDER BY event_id;
                """,
                (bound, since_ms),
            )
        while True:
            try:
                rows = cursor.fetchmany(_FETCH_BATCH_SIZE)
            except sqlite3.Error as exc:
                raise StoreUnavailableError("read", str(exc)) from exc
            if not rows:
                return
            for row in rows:
                yield _row_to_event(row)

    def _rollback_quietly(self) -> None:
        try:
            self.conn.rollback()
        except sqlite3.Error:
            logger.warning("Rollback failed after append error.", exc_info=True)


def _row_to_event(row: sqlite3.Row) -> RecommendationEvent:
    """Convert a ``recommendation_events`` row to a ``RecommendationEvent``."""
    return RecommendationEvent(
        event_id=row["event_id"],
        item_id=row["item_id"],
        subject_id=row["subject_id"],
        timestamp=row["timestamp_ms"],
        confidence=row["confidence"],
        position=row["position"],
    )
