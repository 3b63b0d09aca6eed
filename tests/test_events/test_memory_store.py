"""Tests for InMemoryEventStore and batch validation."""

from __future__ import annotations

import threading

import pytest

from rec_trends.errors import InvalidEventError
from rec_trends.events.store import InMemoryEventStore, validate_events
from rec_trends.models.event import RecommendationEvent


class TestValidateEvents:
    def test_collects_every_problem(self, make_event):
        with pytest.raises(InvalidEventError) as exc_info:
            validate_events([
                make_event(),
                {"item_id": "", "timestamp": 0, "subject_id": "s", "confidence": 1, "position": 1},
                {"item_id": "x", "timestamp": 0, "subject_id": "s", "confidence": 1, "position": 0},
                "not-an-event",
            ])
        problems = exc_info.value.problems
        assert len(problems) == 3
        assert problems[0].startswith("Event 1")
        assert "position" in problems[1]
        assert "expected a mapping" in problems[2]

    def test_rejects_unvalidated_model(self):
        bad = RecommendationEvent.model_construct(
            item_id="a", timestamp=0, subject_id="s", confidence=500.0, position=1
        )
        with pytest.raises(InvalidEventError, match="confidence"):
            validate_events([bad])

    def test_message_caps_listed_problems(self):
        bad = [{"item_id": "x"}] * 12
        with pytest.raises(InvalidEventError) as exc_info:
            validate_events(bad)
        assert "and 2 more" in str(exc_info.value)


class TestInMemoryEventStore:
    def test_append_and_read(self, make_event, now):
        store = InMemoryEventStore()
        stored = store.append([make_event(timestamp=now - 100), make_event(timestamp=now)])
        assert [e.event_id for e in stored] == [1, 2]
        assert store.all().to_list() == stored
        assert [e.timestamp for e in store.since(now)] == [now]

    def test_invalid_batch_leaves_store_untouched(self, make_event):
        store = InMemoryEventStore()
        with pytest.raises(InvalidEventError):
            store.append([make_event(), {"item_id": "x"}])
        assert store.count() == 0

    def test_snapshot_ignores_later_appends(self, make_event):
        store = InMemoryEventStore()
        store.append([make_event()])
        snap = store.since(0)
        store.append([make_event()])
        assert len(list(snap)) == 1
        assert len(list(snap)) == 1

    def test_concurrent_appends_keep_every_event(self, make_event):
        store = InMemoryEventStore()
        batch = [make_event() for _ in range(25)]

        def worker():
            for _ in range(4):
                store.append(batch)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ids = [e.event_id for e in store.all()]
        assert len(ids) == 8 * 4 * 25
        assert ids == list(range(1, len(ids) + 1))
