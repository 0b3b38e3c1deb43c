"""Event normalization, ordering and deduplication.

Turns the raw output of every collector into snapshot-ready events:

- provenance: every event carries a non-empty source
- schema: impact in the allowed set, time is HH:MM or a sentinel, date is ISO
- metadata: descriptive fields and category from the indicator catalog,
  falling back to keyword classification for unknown titles
- identity: a stable indicator id for titles the catalog knows exactly

Ordering is by (date, time) as plain strings; deduplication keeps the first
event seen for each (date, title), so provider registration order decides
which copy survives.
"""

from collections.abc import Iterable
from pathlib import Path

from econ_timeline.ingestion.preprocessors.indicator_catalog import IndicatorCatalog
from econ_timeline.shared.schema import (
    CATEGORIES,
    DEFAULT_IMPACT,
    IMPACTS,
    TENTATIVE,
    TIME_SENTINELS,
    ReleaseEvent,
)
from econ_timeline.shared.utils import parse_clock, setup_logger
from econ_timeline.shared.validate import event_issues

# First matching keyword wins; checked against the lower-cased title.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("holiday", ("market closed", "holiday", "early close")),
    ("central_bank", ("rate decision", "interest rate", "fomc", "press conference", "minutes",
                      "monetary policy", "speaks", "testimony", "beige book", "ecb", "pboc")),
    ("employment", ("payroll", "employment", "unemployment", "jobless", "claims", "jobs",
                    "jolts", "earnings", "labor")),
    ("inflation", ("cpi", "ppi", "pce", "inflation", "price index", "prices")),
    ("growth", ("gdp", "gross domestic")),
    ("energy", ("crude", "oil", "natural gas", "gasoline", "eia")),
    ("housing", ("housing", "home sales", "building permits", "mortgage", "construction")),
    ("trade", ("trade balance", "exports", "imports", "current account", "inventories")),
    ("sentiment", ("sentiment", "confidence", "expectations", "zew", "ifo")),
    ("manufacturing", ("manufacturing", "industrial", "factory", "durable", "production")),
    ("services", ("services", "non-manufacturing")),
    ("consumer", ("retail", "consumer", "spending", "income", "credit")),
    ("bonds", ("auction", "bill", "note", "bond")),
    ("fiscal", ("budget", "treasury statement", "deficit")),
)


def classify_category(title: str) -> str:
    """Keyword-based category for titles without catalog metadata."""
    lowered = (title or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return "other"


def sort_events(events: Iterable[ReleaseEvent]) -> list[ReleaseEvent]:
    """Sort ascending by (date, time or "00:00"); stable for ties."""
    return sorted(events, key=lambda e: e.sort_key)


def deduplicate_events(events: Iterable[ReleaseEvent]) -> list[ReleaseEvent]:
    """Keep the first event for each (date, title), preserving order."""
    seen: set[tuple[str, str]] = set()
    unique = []
    for event in events:
        if event.dedup_key in seen:
            continue
        seen.add(event.dedup_key)
        unique.append(event)
    return unique


class EventNormalizer:
    """Validate events and attach catalog metadata.

    Provider-supplied fields always win over catalog metadata.
    """

    def __init__(self, catalog: IndicatorCatalog | None = None, log_file: Path | None = None) -> None:
        self.catalog = catalog or IndicatorCatalog()
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def normalize(self, events: Iterable[ReleaseEvent], source: str | None = None) -> list[ReleaseEvent]:
        """Normalize events in place and return the valid ones.

        Args:
            events: Raw collector output.
            source: Provenance tag applied to events without one.

        Returns:
            Events that passed validation, in input order.
        """
        normalized = []
        dropped = 0
        for event in events:
            self._coerce_fields(event, source)
            issues = event_issues(event)
            if issues:
                self.logger.warning("Dropping event %r: %s", event.title, "; ".join(issues))
                dropped += 1
                continue
            normalized.append(self._attach_metadata(event))

        if dropped:
            self.logger.info("Dropped %d invalid events", dropped)
        return normalized

    def normalize_event(self, event: ReleaseEvent, source: str | None = None) -> ReleaseEvent:
        """Coerce fields and attach metadata to a single event."""
        self._coerce_fields(event, source)
        return self._attach_metadata(event)

    def _coerce_fields(self, event: ReleaseEvent, source: str | None) -> None:
        event.title = " ".join((event.title or "").split())
        if not event.source:
            event.source = source or "unknown"

        if event.impact not in IMPACTS:
            self.logger.debug("Unknown impact %r for %s, using %s", event.impact, event.title, DEFAULT_IMPACT)
            event.impact = DEFAULT_IMPACT

        if event.time not in TIME_SENTINELS and parse_clock(event.time) is None:
            self.logger.debug("Invalid time %r for %s, marking tentative", event.time, event.title)
            event.time = TENTATIVE

    def _attach_metadata(self, event: ReleaseEvent) -> ReleaseEvent:
        metadata = self.catalog.resolve(event.title)
        if event.indicator_id is None:
            event.indicator_id = self.catalog.identify(event.title)

        if event.category not in CATEGORIES:
            event.category = (
                classify_category(event.title) if metadata.is_fallback else metadata.category
            )

        if event.description is None:
            event.description = metadata.description
        if event.why_it_matters is None:
            event.why_it_matters = metadata.why_it_matters
        if event.frequency is None:
            event.frequency = metadata.frequency
        if event.typical_reaction is None and metadata.typical_reaction:
            event.typical_reaction = dict(metadata.typical_reaction)
        if event.related_assets is None:
            event.related_assets = list(metadata.related_assets)
        if event.historical_volatility is None:
            event.historical_volatility = metadata.historical_volatility

        return event
