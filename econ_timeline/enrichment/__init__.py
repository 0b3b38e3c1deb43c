"""Series enrichment: mappings, upstream observation clients and the enricher."""

from econ_timeline.enrichment.data_enricher import DataEnricher, resolve_actual_previous
from econ_timeline.enrichment.series_mapping import (
    SERIES_MAPPINGS,
    Observation,
    SeriesMapping,
    SeriesReading,
    compute_reading,
    format_value,
)

__all__ = [
    "DataEnricher",
    "Observation",
    "SERIES_MAPPINGS",
    "SeriesMapping",
    "SeriesReading",
    "compute_reading",
    "format_value",
    "resolve_actual_previous",
]
