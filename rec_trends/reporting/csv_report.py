"""
CSV rendering of trend rows.

``render_trends_csv()`` is a pure function: same rows in, same string out.
Writing the string anywhere is the caller's job (see ``export.py``).

Quoting follows the usual CSV convention via the standard ``csv`` module:
a field containing a comma, double quote or newline is wrapped in double
quotes and every inner double quote is written twice. Rows are
``\\n``-separated.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence

from rec_trends.models.trend import TrendRow
from rec_trends.reporting.formatters import format_confidence, format_discount, format_position
from rec_trends.utils.time_utils import format_timestamp

CSV_COLUMNS: list[str] = [
    "Bundle Name",
    "Type",
    "Category",
    "Discount",
    "Recommendations",
    "Avg Confidence",
    "Avg Position",
    "Trend",
    "Last Recommended",
]


def render_trends_csv(rows: Sequence[TrendRow]) -> str:
    """Render ``(ItemTrend, ItemDescriptor)`` rows as CSV text.

    Columns: see ``CSV_COLUMNS``. Confidence is ``85%``, position ``#1``,
    discount ``20%``, last recommended a UTC timestamp.

    Args:
        rows: Ordered report rows. Empty input yields the header line only.

    Returns:
        CSV text, no trailing newline.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_COLUMNS)
    for trend, descriptor in rows:
        writer.writerow(
            [
                descriptor.name,
                descriptor.kind.value,
                descriptor.category,
                format_discount(descriptor.discount_pct),
                trend.count,
                format_confidence(trend.avg_confidence),
                format_position(trend.avg_position),
                trend.trend_direction.value,
                format_timestamp(trend.last_recommended_at),
            ]
        )
    return buf.getvalue().rstrip("\n")
