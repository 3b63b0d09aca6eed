"""Tests for RecommendationEvent — invariant validation and immutability."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rec_trends.models.event import MAX_TIMESTAMP_MS, RecommendationEvent


def _event(**overrides) -> RecommendationEvent:
    fields = dict(
        item_id="bundle-a",
        timestamp=1_000,
        subject_id="agent-1",
        confidence=80,
        position=1,
    )
    fields.update(overrides)
    return RecommendationEvent(**fields)


class TestRecommendationEventConstruction:
    def test_valid_construction(self):
        ev = _event()
        assert ev.item_id == "bundle-a"
        assert ev.timestamp == 1_000
        assert ev.subject_id == "agent-1"
        assert ev.confidence == 80.0
        assert ev.position == 1
        assert ev.event_id is None

    @pytest.mark.parametrize("confidence", [0, 100, 55.5])
    def test_confidence_bounds_inclusive(self, confidence):
        assert _event(confidence=confidence).confidence == confidence

    @pytest.mark.parametrize("confidence", [-0.1, 100.01, 250])
    def test_confidence_out_of_range_raises(self, confidence):
        with pytest.raises(ValidationError, match="confidence"):
            _event(confidence=confidence)

    def test_confidence_nan_raises(self):
        with pytest.raises(ValidationError):
            _event(confidence=float("nan"))

    @pytest.mark.parametrize("position", [0, -1])
    def test_position_below_one_raises(self, position):
        with pytest.raises(ValidationError, match="position"):
            _event(position=position)

    def test_negative_timestamp_raises(self):
        with pytest.raises(ValidationError, match="timestamp"):
            _event(timestamp=-5)

    @pytest.mark.parametrize("field", ["item_id", "subject_id"])
    def test_blank_identifier_raises(self, field):
        with pytest.raises(ValidationError, match=field):
            _event(**{field: "   "})

    def test_identifiers_are_stripped(self):
        ev = _event(item_id="  bundle-a ", subject_id=" agent-1")
        assert ev.item_id == "bundle-a"
        assert ev.subject_id == "agent-1"


class TestRecommendationEventImmutability:
    def test_frozen(self):
        ev = _event()
        with pytest.raises(ValidationError):
            ev.confidence = 10  # type: ignore[misc]

    def test_equal_events_compare_equal(self):
        assert _event() == _event()


class TestTimestampBounds:
    def test_last_representable_millisecond_accepted(self):
        assert _event(timestamp=MAX_TIMESTAMP_MS).timestamp == MAX_TIMESTAMP_MS

    @pytest.mark.parametrize("timestamp", [MAX_TIMESTAMP_MS + 1, 2**63])
    def test_beyond_year_9999_rejected(self, timestamp):
        with pytest.raises(ValidationError, match="timestamp"):
            _event(timestamp=timestamp)
