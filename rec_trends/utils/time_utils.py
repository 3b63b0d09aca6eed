"""
Time helpers for millisecond-epoch recommendation timestamps.

Recommendation events carry integer milliseconds since the Unix epoch.
Every human-readable rendering in reports is done in UTC so the same
input always produces the same text regardless of the host's timezone.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from rec_trends.taxonomy.time_range import DAY_MS

HOUR_MS = 60 * 60 * 1000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# strftime month names follow the process locale; reports must not.
_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def now_ms() -> int:
    """Return the current time as integer milliseconds since the epoch."""
    return datetime_to_ms(utcnow())


def datetime_to_ms(value: datetime) -> int:
    """Convert a datetime to epoch milliseconds.

    Naive datetimes are interpreted as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // timedelta(milliseconds=1)


def ms_to_datetime(timestamp_ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime.

    Raises:
        OverflowError: If the instant is outside what ``datetime`` can hold.
    """
    return _EPOCH + timedelta(milliseconds=timestamp_ms)


def format_timestamp(timestamp_ms: int) -> str:
    """Format a timestamp as ``Oct 19, 2026, 03:04 PM`` (UTC).

    English names regardless of the host locale. A value ``datetime``
    cannot represent is rendered as its raw millisecond count so a report
    never fails on one row.

    Args:
        timestamp_ms: Epoch milliseconds.

    Returns:
        Month abbreviation, day, year, and 12-hour clock time.
    """
    try:
        dt = ms_to_datetime(timestamp_ms)
    except (OverflowError, ValueError):
        return f"{timestamp_ms} ms"
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return (
        f"{_MONTHS[dt.month - 1][:3]} {dt.day}, {dt.year}, "
        f"{hour:02d}:{dt.minute:02d} {meridiem}"
    )


def format_report_date(value: datetime) -> str:
    """Format a report generation date as ``October 19, 2026``."""
    return f"{_MONTHS[value.month - 1]} {value.day}, {value.year}"


def format_time_since(timestamp_ms: int, now: int) -> str:
    """Return a coarse relative age: ``3d ago``, ``5h ago`` or ``Just now``.

    Args:
        timestamp_ms: When the item was last recommended.
        now:          Reference time in epoch milliseconds.
    """
    diff = now - timestamp_ms
    hours = diff // HOUR_MS
    days = diff // DAY_MS
    if days > 0:
        return f"{days}d ago"
    if hours > 0:
        return f"{hours}h ago"
    return "Just now"
