"""
Display formatting shared by the report renderers, plus ASCII terminal
tables for the ``show-trends`` CLI command.

Number display rules (used by CSV, HTML and terminal output alike):

  - confidence → ``85%``   (rounded half-up to an integer)
  - position   → ``#1``    (rounded half-up to an integer)
  - discount   → ``20%``   (``12.5%`` if not a whole number)

Terminal formatters return plain multi-line strings suitable for
``typer.echo()``. No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from rec_trends.analytics.views import high_confidence, rising_trends, top_recommended
from rec_trends.models.trend import TrendRow
from rec_trends.taxonomy.time_range import RANGE_LABELS
from rec_trends.utils.time_utils import format_time_since

if TYPE_CHECKING:
    from rec_trends.analytics.service import TrendSummary


# ── Value formatting ─────────────────────────────────────────────────────────


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity (2.5 → 3)."""
    return int(math.floor(value + 0.5))


def format_confidence(value: float) -> str:
    return f"{round_half_up(value)}%"


def format_position(value: float) -> str:
    return f"#{round_half_up(value)}"


def format_discount(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value)}%"
    return f"{value:g}%"


# ── Terminal tables ──────────────────────────────────────────────────────────


def format_trend_summary(summary: "TrendSummary", top_n: int = 5) -> str:
    """Format a trend summary as three ASCII tables.

    Sections: top recommended, rising trends, high confidence — each
    limited to ``top_n`` rows::

        === AI Recommendation Trends ===
          Range:                 Last 7 Days
          Total recommendations: 12
          Unique items:          4
          Avg confidence:        81%

          [TOP RECOMMENDED]
            Rank  Name                            Count   Conf   Pos   Trend  Last seen
            ...

    Args:
        summary: Result of ``TrendQueryService.get_summary()``.
        top_n:   Rows per section.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append("=== AI Recommendation Trends ===")
    lines.append(f"  Range:                 {RANGE_LABELS[summary.time_range]}")
    lines.append(f"  Total recommendations: {summary.total_recommendations}")
    lines.append(f"  Unique items:          {summary.unique_items}")
    lines.append(f"  Avg confidence:        {format_confidence(summary.mean_confidence)}")

    if not summary.rows:
        lines.append("")
        lines.append(
            "  (no recommendation data yet — recommendations appear here as they are generated)"
        )
        return "\n".join(lines)

    sections = [
        ("TOP RECOMMENDED", top_recommended(summary.rows, top_n)),
        ("RISING TRENDS", rising_trends(summary.rows, top_n)),
        ("HIGH CONFIDENCE", high_confidence(summary.rows, top_n)),
    ]
    for title, rows in sections:
        lines.append("")
        lines.append(f"  [{title}]")
        if not rows:
            lines.append("    (none)")
            continue
        lines.extend(_format_rows(rows, summary.reference_now))

    return "\n".join(lines)


def _format_rows(rows: list[TrendRow], now: int) -> list[str]:
    header = (
        f"    {'Rank':>4}  {'Name':<30}  {'Count':>5}  {'Conf':>5}  "
        f"{'Pos':>4}  {'Trend':>6}  {'Last seen':>10}"
    )
    out = [header, "    " + "-" * (len(header) - 4)]
    for rank, (trend, descriptor) in enumerate(rows, start=1):
        name = descriptor.name[:30]
        out.append(
            f"    {rank:>4}  {name:<30}  {trend.count:>5}  "
            f"{format_confidence(trend.avg_confidence):>5}  "
            f"{format_position(trend.avg_position):>4}  "
            f"{trend.trend_direction.value:>6}  "
            f"{format_time_since(trend.last_recommended_at, now):>10}"
        )
    return out
