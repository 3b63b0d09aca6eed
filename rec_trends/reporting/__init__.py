"""
rec_trends.reporting — rendering and export of trend rows.

Renderers are pure (rows in, string out); only ``export`` writes files.

Modules:
  formatters  — Shared value formatting and ASCII terminal tables.
  csv_report  — CSV rendering.
  html_report — Self-contained printable HTML rendering.
  export      — Report filenames and file writing.
"""
