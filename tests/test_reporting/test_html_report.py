"""Tests for the printable HTML report."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from rec_trends.errors import UnknownRangeError
from rec_trends.models.trend import ItemDescriptor, ItemTrend, TrendDirection
from rec_trends.reporting.html_report import DEFAULT_TITLE, render_trends_html

GENERATED_AT = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _row(item_id, count, confidence, name, now, direction=TrendDirection.STABLE):
    return (
        ItemTrend(
            item_id=item_id, count=count, avg_confidence=confidence, avg_position=1,
            last_recommended_at=now, trend_direction=direction,
        ),
        ItemDescriptor(name=name, category="Cat & Co"),
    )


@pytest.fixture
def rows(now):
    return [
        _row("a", 3, 90, "<script>alert(1)</script>", now, TrendDirection.UP),
        _row("b", 2, 70, "Plain Bundle", now),
    ]


def test_document_shell(rows):
    html = render_trends_html(rows, "7d", GENERATED_AT)
    assert html.startswith("<!DOCTYPE html>\n")
    assert html.rstrip().endswith("</html>")
    assert f"<title>{DEFAULT_TITLE}</title>" in html
    assert "October 19, 2026" in html
    assert "Last 7 Days" in html


def test_self_contained(rows):
    html = render_trends_html(rows, "7d", GENERATED_AT)
    assert "<link" not in html
    assert "<script" not in html
    assert "http" not in html


def test_descriptor_text_is_escaped(rows):
    html = render_trends_html(rows, "7d", GENERATED_AT)
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "Cat &amp; Co" in html


def test_only_first_rank_is_gold(rows):
    html = render_trends_html(rows, "7d", GENERATED_AT)
    assert html.count('class="rank gold"') == 1
    assert '<span class="rank gold">1</span>' in html
    assert '<span class="rank default">2</span>' in html


def test_summary_tiles(rows):
    html = render_trends_html(rows, "7d", GENERATED_AT)
    assert '<div class="value">5</div>' in html
    assert '<div class="value">2</div>' in html
    assert '<div class="value">80%</div>' in html


def test_empty_rows_still_render_document():
    html = render_trends_html([], "all", GENERATED_AT)
    assert "<!DOCTYPE html>" in html
    assert "All Time" in html
    assert "No recommendation data for this time range." in html
    assert "Top Recommended Bundles" not in html


def test_custom_title_and_footer_are_escaped(rows):
    html = render_trends_html(
        rows, "24h", GENERATED_AT, title="R&D", subtitle="s", footer_lines=["<b>x</b>"]
    )
    assert "<h1>R&amp;D</h1>" in html
    assert "<p>&lt;b&gt;x&lt;/b&gt;</p>" in html


def test_rendering_is_deterministic(rows):
    first = render_trends_html(rows, "30d", GENERATED_AT)
    assert first == render_trends_html(rows, "30d", GENERATED_AT)


def test_unknown_range(rows):
    with pytest.raises(UnknownRangeError):
        render_trends_html(rows, "90d", GENERATED_AT)


def test_out_of_range_timestamp_does_not_abort_rendering():
    rows = [_row("far", 1, 50, "Far Future", 300_000_000_000_000)]
    assert "300000000000000 ms" in render_trends_html(rows, "all", GENERATED_AT)
