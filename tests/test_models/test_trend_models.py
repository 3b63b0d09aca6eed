"""Tests for ItemTrend, ItemDescriptor and the placeholder descriptor."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rec_trends.models.trend import (
    PLACEHOLDER_DESCRIPTOR,
    ItemDescriptor,
    ItemKind,
    ItemTrend,
    TrendDirection,
)


def test_item_trend_defaults_to_stable():
    trend = ItemTrend(
        item_id="a", count=1, avg_confidence=80, avg_position=1, last_recommended_at=0
    )
    assert trend.trend_direction == TrendDirection.STABLE


def test_item_trend_count_must_be_positive():
    with pytest.raises(ValidationError, match="count"):
        ItemTrend(item_id="a", count=0, avg_confidence=0, avg_position=1, last_recommended_at=0)


def test_trend_direction_values():
    assert {d.value for d in TrendDirection} == {"up", "down", "stable"}


def test_placeholder_descriptor():
    assert PLACEHOLDER_DESCRIPTOR.name == "Unknown Bundle"
    assert PLACEHOLDER_DESCRIPTOR.category == "Unknown"
    assert PLACEHOLDER_DESCRIPTOR.kind == ItemKind.BUNDLE
    assert PLACEHOLDER_DESCRIPTOR.discount_pct == 0


def test_descriptor_is_frozen():
    desc = ItemDescriptor(name="X", category="Y", kind=ItemKind.SUBSCRIPTION, discount_pct=5)
    with pytest.raises(ValidationError):
        desc.name = "Z"  # type: ignore[misc]


def test_descriptor_kind_from_string():
    desc = ItemDescriptor(name="X", category="Y", kind="subscription")
    assert desc.kind is ItemKind.SUBSCRIPTION
