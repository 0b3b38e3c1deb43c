"""Event preprocessors: metadata resolution, normalization and deduplication."""

from econ_timeline.ingestion.preprocessors.event_normalizer import (
    EventNormalizer,
    classify_category,
    deduplicate_events,
    sort_events,
)
from econ_timeline.ingestion.preprocessors.indicator_catalog import (
    IndicatorCatalog,
    IndicatorMetadata,
)

__all__ = [
    "EventNormalizer",
    "IndicatorCatalog",
    "IndicatorMetadata",
    "classify_category",
    "deduplicate_events",
    "sort_events",
]
