"""
Dashboard views over aggregated trend rows.

Three short lists the marketplace dashboard shows side by side:

  - ``top_recommended``  — most frequently recommended items.
  - ``rising_trends``    — items recommended more often than last window.
  - ``high_confidence``  — items the oracle is most sure about.

All functions accept rows in aggregator order and never mutate them.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from rec_trends.models.trend import ItemTrend, TrendDirection

T = TypeVar("T", ItemTrend, tuple)


def _trend_of(row: ItemTrend | tuple) -> ItemTrend:
    return row[0] if isinstance(row, tuple) else row


def top_recommended(rows: Sequence[T], limit: int = 5) -> list[T]:
    """Return the first ``limit`` rows (already ordered by count)."""
    return list(rows[:max(limit, 0)])


def rising_trends(rows: Sequence[T], limit: int = 5) -> list[T]:
    """Return up to ``limit`` rows whose direction is ``up``, in input order."""
    rising = [r for r in rows if _trend_of(r).trend_direction == TrendDirection.UP]
    return rising[:max(limit, 0)]


def high_confidence(rows: Sequence[T], limit: int = 5) -> list[T]:
    """Return up to ``limit`` rows with the highest average confidence.

    Ties are broken by count desc, then item id asc.
    """
    ranked = sorted(
        rows,
        key=lambda r: (
            -_trend_of(r).avg_confidence,
            -_trend_of(r).count,
            _trend_of(r).item_id,
        ),
    )
    return ranked[:max(limit, 0)]
