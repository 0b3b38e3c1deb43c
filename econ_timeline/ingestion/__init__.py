"""Data ingestion module - schedule collectors and event preprocessors."""

from econ_timeline.ingestion.collectors import BaseScheduleCollector
from econ_timeline.ingestion.preprocessors import EventNormalizer, IndicatorCatalog

__all__ = ["BaseScheduleCollector", "EventNormalizer", "IndicatorCatalog"]
