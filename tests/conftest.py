"""
Shared pytest fixtures for the recommendation trend test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the schema
    applied. Created anew for each test that requests it.
  - ``make_event``: Factory for valid ``RecommendationEvent`` objects.
  - ``sample_catalog``: A small bundle/subscription ``CatalogLookup``.
"""

from __future__ import annotations

import sqlite3
from typing import Callable, Generator

import pytest

from rec_trends.catalog import CatalogLookup
from rec_trends.db.schema import apply_schema
from rec_trends.models.event import RecommendationEvent
from rec_trends.taxonomy.time_range import DAY_MS

# A fixed reference "now": 2026-10-19T12:00:00Z.
REFERENCE_NOW = 1_792_411_200_000


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Domain object factories ───────────────────────────────────────────────────

@pytest.fixture
def now() -> int:
    return REFERENCE_NOW


@pytest.fixture
def make_event() -> Callable[..., RecommendationEvent]:
    """Return a factory producing valid events with overridable fields."""

    def _make(
        item_id: str = "bundle-a",
        timestamp: int = REFERENCE_NOW - DAY_MS,
        subject_id: str = "agent-1",
        confidence: float = 80.0,
        position: int = 1,
    ) -> RecommendationEvent:
        return RecommendationEvent(
            item_id=item_id,
            timestamp=timestamp,
            subject_id=subject_id,
            confidence=confidence,
            position=position,
        )

    return _make


@pytest.fixture
def sample_catalog() -> CatalogLookup:
    """A catalog with two bundles and one subscription."""
    return CatalogLookup(
        bundles=[
            {"id": "bundle-a", "name": "Starter Pack", "category": "Starter", "discount": 15},
            {"id": "bundle-b", "name": 'Pro, "Plus"', "category": "Analytics", "discount": 20},
        ],
        subscriptions=[
            {"id": "sub-c", "name": "Monitoring Monthly", "category": "Ops", "discount": 10},
        ],
    )
