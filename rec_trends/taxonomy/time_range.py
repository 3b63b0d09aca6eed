"""
Reporting window taxonomy.

``TimeRange`` names the relative windows a trend query can be scoped to.
Each finite range has a fixed length in milliseconds; ``ALL`` has no lower
bound and therefore no preceding window to compare against.

Usage example::

    from rec_trends.taxonomy.time_range import TimeRange, RANGE_DURATION_MS

    window_ms = RANGE_DURATION_MS[TimeRange.LAST_7_DAYS]

This module has NO imports from any other ``rec_trends`` package.
"""

from enum import StrEnum

DAY_MS = 24 * 60 * 60 * 1000


class TimeRange(StrEnum):
    """Relative reporting window, resolved against a reference ``now``."""

    LAST_24_HOURS = "24h"
    """Events from the last 86,400,000 ms."""

    LAST_7_DAYS = "7d"
    """Events from the last seven days."""

    LAST_30_DAYS = "30d"
    """Events from the last thirty days."""

    ALL = "all"
    """Every stored event; trend direction is always ``stable``."""


# ``None`` means unbounded (no lower bound, no preceding window).
RANGE_DURATION_MS: dict[TimeRange, int | None] = {
    TimeRange.LAST_24_HOURS: DAY_MS,
    TimeRange.LAST_7_DAYS:   7 * DAY_MS,
    TimeRange.LAST_30_DAYS:  30 * DAY_MS,
    TimeRange.ALL:           None,
}

RANGE_LABELS: dict[TimeRange, str] = {
    TimeRange.LAST_24_HOURS: "Last 24 Hours",
    TimeRange.LAST_7_DAYS:   "Last 7 Days",
    TimeRange.LAST_30_DAYS:  "Last 30 Days",
    TimeRange.ALL:           "All Time",
}
