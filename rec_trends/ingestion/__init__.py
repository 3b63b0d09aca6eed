"""
rec_trends.ingestion — turning oracle output and event files into
validated ``RecommendationEvent`` batches.
"""
