"""
Printable HTML rendering of trend rows.

``render_trends_html()`` returns one self-contained HTML5 document: all
styling is inline, nothing is fetched. Opening it in a browser and using
the print dialog produces the PDF report.

Layout:
  - Header: title, subtitle, generation date, range label, bundle count.
  - Summary tiles: total recommendations, unique items, average confidence.
  - "Top Recommended Bundles": ranked table; rank 1 carries the ``gold`` marker.
  - "Detailed Metrics": discount, average position, last recommended.
  - Footer lines.

Every descriptor-derived string is HTML-escaped before insertion. The
function is pure: ``generated_at`` is passed in, so re-rendering the same
rows yields identical bytes.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from html import escape

from rec_trends.analytics.windows import parse_time_range
from rec_trends.models.trend import TrendRow
from rec_trends.reporting.formatters import (
    format_confidence,
    format_discount,
    format_position,
    round_half_up,
)
from rec_trends.taxonomy.time_range import RANGE_LABELS, TimeRange
from rec_trends.utils.time_utils import format_report_date, format_timestamp

DEFAULT_TITLE = "AI Recommendation Trends Report"
DEFAULT_SUBTITLE = "AI Agent Marketplace - Recommendation Analytics"
DEFAULT_FOOTER = (
    "This report was automatically generated by the AI Agent Marketplace",
    "For more information, visit the marketplace dashboard",
)

_STYLE = """\
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Roboto', sans-serif;
           padding: 40px; color: #1a1a1a; background: #ffffff; max-width: 1200px; margin: 0 auto; }
    .header { border-bottom: 3px solid #6366f1; padding-bottom: 20px; margin-bottom: 30px; }
    .header h1 { font-size: 32px; font-weight: 700; margin-bottom: 8px; }
    .header .subtitle { font-size: 16px; color: #666; margin-bottom: 12px; }
    .header .metadata { display: flex; gap: 24px; font-size: 14px; color: #888; }
    .stats-grid { display: grid; grid-template-columns: repeat(3, 1fr); gap: 20px; margin-bottom: 40px; }
    .stat-card { background: #6366f1; padding: 20px; border-radius: 12px; color: white; }
    .stat-card.secondary { background: #10b981; }
    .stat-card.tertiary { background: #f59e0b; }
    .stat-card .label { font-size: 13px; opacity: 0.9; margin-bottom: 8px; }
    .stat-card .value { font-size: 32px; font-weight: 700; }
    .section { margin-bottom: 40px; }
    .section h2 { font-size: 24px; font-weight: 600; margin-bottom: 20px; }
    .table { width: 100%; border-collapse: collapse; border: 1px solid #e5e7eb; }
    .table thead { background: #f9fafb; }
    .table th { text-align: left; padding: 12px 16px; font-size: 13px; font-weight: 600;
                color: #374151; border-bottom: 1px solid #e5e7eb; }
    .table td { padding: 12px 16px; font-size: 14px; color: #1f2937; border-bottom: 1px solid #f3f4f6; }
    .center { text-align: center; }
    .badge { display: inline-block; padding: 4px 10px; border-radius: 6px; font-size: 12px; font-weight: 500; }
    .badge.bundle { background: #dbeafe; color: #1e40af; }
    .badge.subscription { background: #fef3c7; color: #92400e; }
    .badge.up { background: #d1fae5; color: #065f46; }
    .badge.down { background: #fee2e2; color: #991b1b; }
    .badge.stable { background: #e5e7eb; color: #374151; }
    .rank { display: inline-block; width: 28px; height: 28px; line-height: 28px; text-align: center;
            border-radius: 6px; font-weight: 700; font-size: 14px; }
    .rank.gold { background: #fef3c7; color: #92400e; }
    .rank.default { background: #f3f4f6; color: #6b7280; }
    .empty { color: #888; font-style: italic; }
    .footer { margin-top: 60px; padding-top: 20px; border-top: 1px solid #e5e7eb;
              text-align: center; font-size: 12px; color: #888; }
    @media print { body { padding: 20px; } .table { page-break-inside: avoid; } }"""


def render_trends_html(
    rows: Sequence[TrendRow],
    time_range: TimeRange | str,
    generated_at: datetime,
    title: str = DEFAULT_TITLE,
    subtitle: str = DEFAULT_SUBTITLE,
    footer_lines: Sequence[str] = DEFAULT_FOOTER,
) -> str:
    """Render ``(ItemTrend, ItemDescriptor)`` rows as a printable HTML document.

    Args:
        rows:         Ordered report rows (may be empty).
        time_range:   Range the rows were aggregated over (label only).
        generated_at: Generation date shown in the header.
        title:        Document and header title.
        subtitle:     Header subtitle.
        footer_lines: One ``<p>`` per line in the footer.

    Returns:
        HTML5 document as a string.

    Raises:
        UnknownRangeError: If ``time_range`` is not recognized.
    """
    range_label = RANGE_LABELS[parse_time_range(time_range)]
    total = sum(trend.count for trend, _ in rows)
    mean_conf = (
        sum(trend.avg_confidence for trend, _ in rows) / len(rows) if rows else 0.0
    )

    parts: list[str] = []
    parts.append("<!DOCTYPE html>")
    parts.append('<html lang="en">')
    parts.append("<head>")
    parts.append('  <meta charset="UTF-8">')
    parts.append(f"  <title>{escape(title)}</title>")
    parts.append("  <style>")
    parts.append(_STYLE)
    parts.append("  </style>")
    parts.append("</head>")
    parts.append("<body>")

    # Header
    parts.append('  <div class="header">')
    parts.append(f"    <h1>{escape(title)}</h1>")
    parts.append(f'    <div class="subtitle">{escape(subtitle)}</div>')
    parts.append('    <div class="metadata">')
    parts.append(f"      <span><strong>Generated:</strong> {format_report_date(generated_at)}</span>")
    parts.append(f"      <span><strong>Time Range:</strong> {range_label}</span>")
    parts.append(f"      <span><strong>Total Bundles:</strong> {len(rows)}</span>")
    parts.append("    </div>")
    parts.append("  </div>")

    # Summary tiles
    parts.append('  <div class="stats-grid">')
    parts.extend(_stat_card("", "Total Recommendations", str(total)))
    parts.extend(_stat_card(" secondary", "Unique Bundles", str(len(rows))))
    parts.extend(_stat_card(" tertiary", "Avg Confidence", f"{round_half_up(mean_conf)}%"))
    parts.append("  </div>")

    if rows:
        parts.extend(_ranked_table(rows))
        parts.extend(_details_table(rows))
    else:
        parts.append('  <div class="section">')
        parts.append('    <p class="empty">No recommendation data for this time range.</p>')
        parts.append("  </div>")

    # Footer
    parts.append('  <div class="footer">')
    for line in footer_lines:
        parts.append(f"    <p>{escape(line)}</p>")
    parts.append("  </div>")
    parts.append("</body>")
    parts.append("</html>")

    return "\n".join(parts) + "\n"


def _stat_card(modifier: str, label: str, value: str) -> list[str]:
    return [
        f'    <div class="stat-card{modifier}">',
        f'      <div class="label">{label}</div>',
        f'      <div class="value">{value}</div>',
        "    </div>",
    ]


def _ranked_table(rows: Sequence[TrendRow]) -> list[str]:
    out = [
        '  <div class="section">',
        "    <h2>Top Recommended Bundles</h2>",
        '    <table class="table">',
        "      <thead>",
        "        <tr>",
        '          <th class="center">Rank</th>',
        "          <th>Bundle Name</th>",
        "          <th>Type</th>",
        "          <th>Category</th>",
        '          <th class="center">Recommendations</th>',
        '          <th class="center">Confidence</th>',
        '          <th class="center">Trend</th>',
        "        </tr>",
        "      </thead>",
        "      <tbody>",
    ]
    for rank, (trend, descriptor) in enumerate(rows, start=1):
        rank_class = "gold" if rank == 1 else "default"
        kind = escape(descriptor.kind.value)
        direction = escape(trend.trend_direction.value)
        out.extend(
            [
                "        <tr>",
                f'          <td class="center"><span class="rank {rank_class}">{rank}</span></td>',
                f"          <td><strong>{escape(descriptor.name)}</strong></td>",
                f'          <td><span class="badge {kind}">{kind}</span></td>',
                f"          <td>{escape(descriptor.category)}</td>",
                f'          <td class="center"><strong>{trend.count}</strong></td>',
                f'          <td class="center"><strong>{format_confidence(trend.avg_confidence)}</strong></td>',
                f'          <td class="center"><span class="badge {direction}">{direction}</span></td>',
                "        </tr>",
            ]
        )
    out.extend(["      </tbody>", "    </table>", "  </div>"])
    return out


def _details_table(rows: Sequence[TrendRow]) -> list[str]:
    out = [
        '  <div class="section">',
        "    <h2>Detailed Metrics</h2>",
        '    <table class="table">',
        "      <thead>",
        "        <tr>",
        "          <th>Bundle Name</th>",
        '          <th class="center">Discount</th>',
        '          <th class="center">Avg Position</th>',
        "          <th>Last Recommended</th>",
        "        </tr>",
        "      </thead>",
        "      <tbody>",
    ]
    for trend, descriptor in rows:
        out.extend(
            [
                "        <tr>",
                f"          <td><strong>{escape(descriptor.name)}</strong></td>",
                f'          <td class="center">{format_discount(descriptor.discount_pct)}</td>',
                f'          <td class="center">{format_position(trend.avg_position)}</td>',
                f"          <td>{format_timestamp(trend.last_recommended_at)}</td>",
                "        </tr>",
            ]
        )
    out.extend(["      </tbody>", "    </table>", "  </div>"])
    return out
