"""
Append-only event store contract and the in-memory implementation.

Every store satisfies ``EventStore``:

  - ``append(events)`` validates the whole batch first, then stores it in
    arrival order in one step. A batch with any invalid event is rejected
    entirely with ``InvalidEventError``. Nothing is ever deduplicated:
    repeat recommendations are signal.
  - ``all()`` / ``since(ts)`` return an ``EventSnapshot``: a lazy,
    restartable iterable bounded to the events present when it was taken.
    Events appended while a snapshot is being iterated show up in the next
    call, never half-way through the current one.

Appends are serialized with a lock so insertion order is total even when
the host lets several threads write.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Mapping
from itertools import islice
from typing import Any

from pydantic import ValidationError

from rec_trends.errors import InvalidEventError
from rec_trends.models.event import RecommendationEvent

logger = logging.getLogger(__name__)

EventInput = RecommendationEvent | Mapping[str, Any]


class EventSnapshot:
    """Restartable view over a fixed prefix of the event log.

    Each ``iter()`` call re-reads from the source, so the snapshot can be
    walked any number of times (window filter, then trend comparison)
    without materializing it.
    """

    def __init__(self, source: Callable[[], Iterator[RecommendationEvent]]) -> None:
        self._source = source

    def __iter__(self) -> Iterator[RecommendationEvent]:
        return self._source()

    def to_list(self) -> list[RecommendationEvent]:
        return list(self)


class EventStore(ABC):
    """Durable, ordered, append-only record of recommendation events."""

    @abstractmethod
    def append(self, events: Iterable[EventInput]) -> list[RecommendationEvent]:
        """Validate and store ``events`` in order; return them with ids assigned.

        Raises:
            InvalidEventError: If any event violates the model invariants.
            StoreUnavailableError: If the persistence medium fails.
        """

    @abstractmethod
    def all(self) -> EventSnapshot:
        """Return every stored event in insertion order."""

    @abstractmethod
    def since(self, timestamp_ms: int) -> EventSnapshot:
        """Return stored events with ``timestamp >= timestamp_ms``, insertion order."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored events."""


def validate_events(events: Iterable[EventInput]) -> list[RecommendationEvent]:
    """Validate a batch of events, collecting every failure.

    Accepts ``RecommendationEvent`` instances (re-validated, which catches
    models built with ``model_construct``) or plain mappings. Any
    ``event_id`` already present is dropped; the store assigns its own.

    Args:
        events: Batch to validate.

    Returns:
        Validated events, in input order.

    Raises:
        InvalidEventError: If any event fails; lists each failing index.
    """
    validated: list[RecommendationEvent] = []
    problems: list[str] = []

    for i, event in enumerate(events):
        if isinstance(event, RecommendationEvent):
            data = event.model_dump()
        elif isinstance(event, Mapping):
            data = dict(event)
        else:
            problems.append(f"Event {i}: expected a mapping, got {type(event).__name__}")
            continue
        data.pop("event_id", None)
        try:
            validated.append(RecommendationEvent.model_validate(data))
        except ValidationError as exc:
            problems.append(f"Event {i}: {summarize_validation_error(exc)}")

    if problems:
        raise InvalidEventError(problems)
    return validated


def summarize_validation_error(exc: ValidationError) -> str:
    """Collapse a pydantic ``ValidationError`` into one ``field: msg`` line."""
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'event'}: {err['msg']}"
        for err in exc.errors()
    )


class InMemoryEventStore(EventStore):
    """List-backed store for hosts without persistence, and for tests."""

    def __init__(self) -> None:
        self._events: list[RecommendationEvent] = []
        self._lock = threading.Lock()

    def append(self, events: Iterable[EventInput]) -> list[RecommendationEvent]:
        batch = validate_events(events)
        with self._lock:
            next_id = len(self._events) + 1
            stored = [
                event.model_copy(update={"event_id": next_id + offset})
                for offset, event in enumerate(batch)
            ]
            self._events.extend(stored)
        logger.info(
            "Appended %d recommendation event(s) (in-memory).",
            len(stored),
            extra={"event_count": len(stored)},
        )
        return stored

    def all(self) -> EventSnapshot:
        size = self.count()
        return EventSnapshot(lambda: islice(self._events, size))

    def since(self, timestamp_ms: int) -> EventSnapshot:
        size = self.count()
        return EventSnapshot(
            lambda: (e for e in islice(self._events, size) if e.timestamp >= timestamp_ms)
        )

    def count(self) -> int:
        with self._lock:
            return len(self._events)
