"""Release event schema.

One ReleaseEvent per scheduled release. The wire form is a camelCase JSON
object; unknown keys survive a round trip through ``extra``.
"""

from dataclasses import dataclass, field
from typing import Any

ALL_DAY = "All Day"
TENTATIVE = "Tentative"
TIME_SENTINELS = frozenset({ALL_DAY, TENTATIVE})

IMPACTS = ("high", "medium", "low", "holiday")
DEFAULT_IMPACT = "low"

CATEGORIES = (
    "employment",
    "inflation",
    "growth",
    "central_bank",
    "energy",
    "housing",
    "trade",
    "sentiment",
    "manufacturing",
    "services",
    "consumer",
    "bonds",
    "fiscal",
    "holiday",
    "other",
)

# Fields written by the enrichment service. Quick refresh touches nothing else.
DATA_FIELDS = (
    "actual",
    "previous",
    "latestValue",
    "priorValue",
    "latestDate",
    "priorDate",
    "seriesId",
    "dataUpdatedAt",
)

SNAPSHOT_SCHEMA = {
    "lastUpdated": str,
    "version": str,
    "region": str,
    "sources": list,
    "dataIncluded": bool,
    "events": list,
}

# python attribute -> wire key, in serialization order
_WIRE_KEYS = {
    "date": "date",
    "time": "time",
    "title": "title",
    "impact": "impact",
    "category": "category",
    "currency": "currency",
    "country": "country",
    "source": "source",
    "source_url": "sourceUrl",
    "forecast": "forecast",
    "previous": "previous",
    "actual": "actual",
    "indicator_id": "indicatorId",
    "latest_value": "latestValue",
    "prior_value": "priorValue",
    "latest_date": "latestDate",
    "prior_date": "priorDate",
    "series_id": "seriesId",
    "data_updated_at": "dataUpdatedAt",
    "description": "description",
    "why_it_matters": "whyItMatters",
    "frequency": "frequency",
    "typical_reaction": "typicalReaction",
    "related_assets": "relatedAssets",
    "historical_volatility": "historicalVolatility",
}
_ALWAYS_EMITTED = {"forecast", "previous", "actual"}


@dataclass
class ReleaseEvent:
    """A single scheduled economic release."""

    date: str
    time: str
    title: str
    impact: str = DEFAULT_IMPACT
    category: str | None = None
    currency: str = "USD"
    country: str = "US"
    source: str | None = None
    source_url: str | None = None
    forecast: str | None = None
    previous: str | None = None
    actual: str | None = None
    indicator_id: str | None = None
    latest_value: str | None = None
    prior_value: str | None = None
    latest_date: str | None = None
    prior_date: str | None = None
    series_id: str | None = None
    data_updated_at: str | None = None
    description: str | None = None
    why_it_matters: str | None = None
    frequency: str | None = None
    typical_reaction: dict[str, str] | str | None = None
    related_assets: list[str] | None = None
    historical_volatility: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def sort_key(self) -> tuple[str, str]:
        """(date, time) with timeless events treated as "00:00" when untimed."""
        return self.date, self.time or "00:00"

    @property
    def dedup_key(self) -> tuple[str, str]:
        return self.date, self.title

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire form."""
        data: dict[str, Any] = {}
        for attr, key in _WIRE_KEYS.items():
            value = getattr(self, attr)
            if value is None and attr not in _ALWAYS_EMITTED:
                continue
            if isinstance(value, (list, dict)):
                value = type(value)(value)
            data[key] = value
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReleaseEvent":
        """Build an event from its wire form; unknown keys go to ``extra``."""
        reverse = {key: attr for attr, key in _WIRE_KEYS.items()}
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            attr = reverse.get(key)
            if attr is None:
                extra[key] = value
            else:
                kwargs[attr] = value
        missing = [name for name in ("date", "time", "title") if name not in kwargs]
        if missing:
            raise ValueError(f"Event is missing required keys: {missing}")
        return cls(**kwargs, extra=extra)

