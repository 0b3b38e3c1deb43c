"""EconTimeline - economic calendar aggregation and enrichment."""

__version__ = "2.0.0"
