"""
Window filter: resolve range tokens and select the events inside a window.

A window is ``[now - length, now]`` (both ends inclusive). ``all`` starts
at epoch 0. The preceding window used for trend comparison is
``[lower - length, lower)`` so the two never share an event.
``in_window`` and ``in_previous_window`` hold those edge rules; both
``filter_window`` and the trend aggregator select events through them.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from rec_trends.errors import UnknownRangeError
from rec_trends.models.event import RecommendationEvent
from rec_trends.taxonomy.time_range import RANGE_DURATION_MS, TimeRange


def parse_time_range(token: TimeRange | str) -> TimeRange:
    """Resolve a range token (``24h`` / ``7d`` / ``30d`` / ``all``).

    Matching ignores surrounding whitespace and case.

    Raises:
        UnknownRangeError: For anything else. Never falls back to ``all``.
    """
    if isinstance(token, TimeRange):
        return token
    if isinstance(token, str):
        try:
            return TimeRange(token.strip().lower())
        except ValueError:
            pass
    raise UnknownRangeError(token, [r.value for r in TimeRange])


def window_bounds(time_range: TimeRange | str, now: int) -> tuple[int, int]:
    """Return ``(lower, upper)`` epoch-ms bounds of the window ending at ``now``."""
    time_range = parse_time_range(time_range)
    length = RANGE_DURATION_MS[time_range]
    lower = 0 if length is None else now - length
    return lower, now


def previous_window_bounds(
    time_range: TimeRange | str,
    now: int,
) -> tuple[int, int] | None:
    """Return ``(lower, upper)`` of the equal-length window just before the current one.

    The upper bound is exclusive. ``None`` for ``all``, which has no
    preceding window.
    """
    time_range = parse_time_range(time_range)
    length = RANGE_DURATION_MS[time_range]
    if length is None:
        return None
    lower, _ = window_bounds(time_range, now)
    return lower - length, lower


def filter_window(
    events: Iterable[RecommendationEvent],
    time_range: TimeRange | str,
    now: int,
) -> Iterator[RecommendationEvent]:
    """Yield events with ``lower <= timestamp <= now``, preserving order.

    The range is resolved eagerly so an unknown token fails at call time,
    not on first iteration.
    """
    bounds = window_bounds(time_range, now)
    return (e for e in events if in_window(e.timestamp, bounds))


def in_window(timestamp: int, bounds: tuple[int, int]) -> bool:
    """True if ``timestamp`` lies in a current window ``[lower, upper]``."""
    lower, upper = bounds
    return lower <= timestamp <= upper


def in_previous_window(timestamp: int, bounds: tuple[int, int] | None) -> bool:
    """True if ``timestamp`` lies in a preceding window ``[lower, upper)``.

    ``None`` bounds (the ``all`` range) contain nothing.
    """
    if bounds is None:
        return False
    lower, upper = bounds
    return lower <= timestamp < upper
