"""
Trend query service — the engine's read surface.

``TrendQueryService`` ties the pieces together::

    store.since(prev_lower) ──> aggregate_trends ──> join descriptors
                                                       │
                                       get_trends(range) / get_summary(range)

Only the current and preceding windows are read from the store; ``all``
reads everything. ``now`` defaults to the injected clock so tests can pin
it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from rec_trends.analytics.aggregator import aggregate_trends
from rec_trends.analytics.windows import parse_time_range, previous_window_bounds, window_bounds
from rec_trends.catalog import DescriptorLookup, resolve_descriptor
from rec_trends.events.store import EventSnapshot, EventStore
from rec_trends.models.trend import ItemTrend, TrendRow
from rec_trends.taxonomy.time_range import TimeRange
from rec_trends.utils.time_utils import now_ms

logger = logging.getLogger(__name__)


@dataclass
class TrendSummary:
    """Aggregated rows for one window plus the headline figures.

    Attributes:
        time_range:            Resolved range.
        reference_now:         Upper bound used for the window (epoch ms).
        rows:                  Ordered ``(ItemTrend, ItemDescriptor)`` pairs.
        total_recommendations: Events in the window (sum of row counts).
        unique_items:          Number of rows.
        mean_confidence:       Mean of the rows' average confidences (0 if empty).
    """

    time_range: TimeRange
    reference_now: int
    rows: list[TrendRow] = field(default_factory=list)

    @property
    def total_recommendations(self) -> int:
        return sum(trend.count for trend, _ in self.rows)

    @property
    def unique_items(self) -> int:
        return len(self.rows)

    @property
    def mean_confidence(self) -> float:
        if not self.rows:
            return 0.0
        return sum(trend.avg_confidence for trend, _ in self.rows) / len(self.rows)


def join_descriptors(
    trends: Iterable[ItemTrend],
    lookup: DescriptorLookup,
) -> list[TrendRow]:
    """Pair each trend with its descriptor (placeholder on a miss)."""
    return [(trend, resolve_descriptor(lookup, trend.item_id)) for trend in trends]


class TrendQueryService:
    """Answer ``get_trends(range)`` queries over an ``EventStore``.

    Args:
        store:  Source of recommendation events.
        lookup: Host-supplied ``item_id -> ItemDescriptor`` callable.
        clock:  Returns the current time in epoch ms; defaults to wall clock.
    """

    def __init__(
        self,
        store: EventStore,
        lookup: DescriptorLookup,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.lookup = lookup
        self.clock = clock

    def get_trends(
        self,
        time_range: TimeRange | str,
        now: int | None = None,
    ) -> list[TrendRow]:
        """Return ordered ``(ItemTrend, ItemDescriptor)`` rows for a window.

        Raises:
            UnknownRangeError: If ``time_range`` is not recognized.
            StoreUnavailableError: If the store cannot be read.
        """
        return self.get_summary(time_range, now).rows

    def get_summary(
        self,
        time_range: TimeRange | str,
        now: int | None = None,
    ) -> TrendSummary:
        """Like ``get_trends`` but wrapped with headline figures."""
        resolved = parse_time_range(time_range)
        reference_now = self.clock() if now is None else now

        trends = aggregate_trends(self._events_for(resolved, reference_now), resolved, reference_now)
        rows = join_descriptors(trends, self.lookup)
        logger.info(
            "Trend query '%s' at %d: %d item(s).",
            resolved,
            reference_now,
            len(rows),
            extra={"time_range": resolved.value, "item_count": len(rows)},
        )
        return TrendSummary(time_range=resolved, reference_now=reference_now, rows=rows)

    def _events_for(self, time_range: TimeRange, now: int) -> EventSnapshot:
        previous = previous_window_bounds(time_range, now)
        if previous is None:
            lower, _ = window_bounds(time_range, now)
            return self.store.since(lower)
        return self.store.since(previous[0])
