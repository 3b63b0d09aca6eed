"""
rec_trends.analytics — windowing, aggregation and trend queries.

Modules:
  windows    — Range token resolution and window filtering.
  aggregator — Per-item trend statistics and trend direction.
  views      — Top / rising / high-confidence selections.
  service    — ``TrendQueryService``: store + aggregator + descriptor join.
"""
