"""
Trend aggregator: reduce recommendation events to one ``ItemTrend`` per item.

Algorithm
---------
One pass over the input events:

  1. Events inside the current window ``[now - length, now]`` are grouped by
     ``item_id`` and accumulate count, confidence sum, position sum and the
     latest timestamp.
  2. Events inside the preceding window ``[now - 2*length, now - length)``
     only bump a per-item counter.

Trend direction compares the two counts: ``up`` when the current window
has more events, ``down`` when it has fewer, ``stable`` when equal. An item
with no history in the preceding window is therefore ``up``.

Caveat for ``all``: there is no preceding window, so every row is reported
``stable``. Callers showing ``all`` should not read meaning into direction.

Ordering
--------
Rows are sorted by count desc, then average confidence desc, then item id
asc, so a given event set always yields the same report.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from rec_trends.analytics.windows import (
    in_previous_window,
    in_window,
    parse_time_range,
    previous_window_bounds,
    window_bounds,
)
from rec_trends.models.event import RecommendationEvent
from rec_trends.models.trend import ItemTrend, TrendDirection
from rec_trends.taxonomy.time_range import TimeRange

logger = logging.getLogger(__name__)


@dataclass
class _ItemAccumulator:
    """Running sums for one item inside the current window."""

    count: int = 0
    total_confidence: float = 0.0
    total_position: int = 0
    last_timestamp: int = 0

    def add(self, event: RecommendationEvent) -> None:
        self.count += 1
        self.total_confidence += event.confidence
        self.total_position += event.position
        self.last_timestamp = max(self.last_timestamp, event.timestamp)


def compute_trend_direction(current_count: int, previous_count: int) -> TrendDirection:
    """Compare event counts in two adjacent equal-length windows.

    Args:
        current_count:  Events for the item in the current window.
        previous_count: Events for the item in the preceding window.

    Returns:
        ``UP`` if current > previous, ``DOWN`` if current < previous,
        ``STABLE`` if equal (including both zero).
    """
    if current_count > previous_count:
        return TrendDirection.UP
    if current_count < previous_count:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def trend_sort_key(trend: ItemTrend) -> tuple[int, float, str]:
    """Sort key: count desc, avg confidence desc, item id asc."""
    return (-trend.count, -trend.avg_confidence, trend.item_id)


def aggregate_trends(
    events: Iterable[RecommendationEvent],
    time_range: TimeRange | str,
    now: int,
) -> list[ItemTrend]:
    """Aggregate events into ordered per-item trend rows.

    ``events`` may be any iterable covering at least the current and the
    preceding window; events outside both are ignored.

    Args:
        events:     Recommendation events, any order.
        time_range: Range token or ``TimeRange``.
        now:        Reference time in epoch milliseconds (inclusive upper bound).

    Returns:
        One ``ItemTrend`` per distinct ``item_id`` in the current window,
        ordered by ``trend_sort_key``. Empty input gives an empty list.

    Raises:
        UnknownRangeError: If ``time_range`` is not recognized.
    """
    time_range = parse_time_range(time_range)
    bounds = window_bounds(time_range, now)
    previous = previous_window_bounds(time_range, now)

    current: dict[str, _ItemAccumulator] = {}
    previous_counts: Counter[str] = Counter()

    for event in events:
        if in_window(event.timestamp, bounds):
            current.setdefault(event.item_id, _ItemAccumulator()).add(event)
        elif in_previous_window(event.timestamp, previous):
            previous_counts[event.item_id] += 1

    if previous is None:
        logger.debug("Trend direction undefined for range '%s'; reporting stable.", time_range)

    trends: list[ItemTrend] = []
    for item_id, acc in current.items():
        if previous is None:
            direction = TrendDirection.STABLE
        else:
            direction = compute_trend_direction(acc.count, previous_counts[item_id])
        trends.append(
            ItemTrend(
                item_id=item_id,
                count=acc.count,
                avg_confidence=acc.total_confidence / acc.count,
                avg_position=acc.total_position / acc.count,
                last_recommended_at=acc.last_timestamp,
                trend_direction=direction,
            )
        )

    trends.sort(key=trend_sort_key)
    logger.debug(
        "Aggregated %d item(s) for range '%s' (window %d..%d).",
        len(trends), time_range, bounds[0], bounds[1],
    )
    return trends
