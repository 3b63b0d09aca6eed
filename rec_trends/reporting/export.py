"""
File export helpers for rendered trend reports.

Renderers in ``csv_report`` / ``html_report`` return strings; this module
is the only place that touches disk. Filenames follow the product's
download naming::

    ai-recommendations-7d-1760886000000.csv
    ai-recommendations-7d-1760886000000.html
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from rec_trends.analytics.windows import parse_time_range
from rec_trends.taxonomy.time_range import TimeRange
from rec_trends.utils.time_utils import datetime_to_ms

logger = logging.getLogger(__name__)


def build_report_filename(
    time_range: TimeRange | str,
    generated_at: datetime,
    extension: str,
) -> str:
    """Return ``ai-recommendations-<range>-<epoch ms>.<extension>``.

    Raises:
        UnknownRangeError: If ``time_range`` is not recognized.
    """
    resolved = parse_time_range(time_range)
    ext = extension.lstrip(".").lower()
    return f"ai-recommendations-{resolved.value}-{datetime_to_ms(generated_at)}.{ext}"


def write_report(content: str, path: Path) -> Path:
    """Write ``content`` to ``path`` as UTF-8.

    Args:
        content: Rendered CSV or HTML text.
        path:    Destination file path (parent dirs created if missing).

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8", newline="")
    logger.info("Wrote report %s (%d bytes)", path, len(content.encode("utf-8")))
    return path
