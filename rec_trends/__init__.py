"""
rec_trends — recommendation history and trend analytics.

Append-only log of scored recommendation events, time-windowed
aggregation into per-item trends, and CSV / printable HTML reports.
"""

__version__ = "0.1.0"
