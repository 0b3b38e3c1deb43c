"""Indicator metadata catalog.

Loads ``data/indicators.json`` and resolves event titles to descriptive
metadata and stable indicator identifiers.

Resolution order for metadata (``resolve``):
    1. exact title or alias (case and whitespace insensitive)
    2. substring match in either direction; the longest matching title wins
    3. a generic fallback with category "other"

Identifiers (``identify``) are only assigned on exact title/alias matches, so
a fuzzy hit never joins an event to the wrong data series.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[2] / "data" / "indicators.json"

REQUIRED_FIELDS = ("id", "title", "category")


def _normalize(title: str) -> str:
    return " ".join(title.lower().split())


@dataclass(frozen=True)
class IndicatorMetadata:
    """Descriptive metadata for one indicator."""

    indicator_id: str | None
    title: str
    category: str
    description: str = ""
    why_it_matters: str = ""
    frequency: str = ""
    typical_reaction: dict[str, str] = field(default_factory=dict)
    related_assets: tuple[str, ...] = ()
    historical_volatility: str = ""

    @property
    def is_fallback(self) -> bool:
        return self.indicator_id is None


def generic_metadata(title: str) -> IndicatorMetadata:
    """Fallback metadata for titles the catalog does not know."""
    return IndicatorMetadata(
        indicator_id=None,
        title=title,
        category="other",
        frequency="Variable",
        historical_volatility="Unknown",
    )


class IndicatorCatalog:
    """Read-only lookup from event titles to indicator metadata.

    Example:
        >>> catalog = IndicatorCatalog()
        >>> catalog.identify("CPI m/m")
        'us_cpi_mom'
        >>> catalog.resolve("Core CPI m/m (Final)").indicator_id
        'us_core_cpi_mom'
        >>> catalog.resolve("Something Unknown").category
        'other'
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or DEFAULT_CATALOG_PATH
        self._by_id: dict[str, IndicatorMetadata] = {}
        self._by_key: dict[str, IndicatorMetadata] = {}
        self._titles: list[tuple[str, IndicatorMetadata]] = []
        self._load()

    def _load(self) -> None:
        with self.path.open(encoding="utf-8") as f:
            document = json.load(f)

        entries = document.get("indicators") if isinstance(document, dict) else None
        if not isinstance(entries, list):
            raise ValueError(f"{self.path.name}: expected an 'indicators' list")

        for index, entry in enumerate(entries):
            missing = [k for k in REQUIRED_FIELDS if not entry.get(k)]
            if missing:
                raise ValueError(f"{self.path.name}: indicator[{index}] missing {missing}")
            if entry["id"] in self._by_id:
                raise ValueError(f"{self.path.name}: duplicate indicator id {entry['id']!r}")

            metadata = self._from_entry(entry)
            self._by_id[metadata.indicator_id] = metadata
            for key in (entry["title"], *entry.get("aliases", [])):
                normalized = _normalize(key)
                if normalized in self._by_key:
                    raise ValueError(f"{self.path.name}: title or alias {key!r} is ambiguous")
                self._by_key[normalized] = metadata
            self._titles.append((_normalize(entry["title"]), metadata))

    @staticmethod
    def _from_entry(entry: dict[str, Any]) -> IndicatorMetadata:
        return IndicatorMetadata(
            indicator_id=entry["id"],
            title=entry["title"],
            category=entry["category"],
            description=entry.get("description", ""),
            why_it_matters=entry.get("whyItMatters", ""),
            frequency=entry.get("frequency", ""),
            typical_reaction=dict(entry.get("typicalReaction", {})),
            related_assets=tuple(entry.get("relatedAssets", [])),
            historical_volatility=entry.get("historicalVolatility", ""),
        )

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, indicator_id: str) -> bool:
        return indicator_id in self._by_id

    def identify(self, title: str) -> str | None:
        """Stable indicator id for an exact title or alias, else None."""
        metadata = self._by_key.get(_normalize(title or ""))
        return metadata.indicator_id if metadata else None

    def resolve(self, title: str) -> IndicatorMetadata:
        """Best metadata for a title. Never raises."""
        normalized = _normalize(title or "")
        if not normalized:
            return generic_metadata(title)

        exact = self._by_key.get(normalized)
        if exact is not None:
            return exact

        candidates = [
            (len(key), metadata)
            for key, metadata in self._titles
            if key in normalized or normalized in key
        ]
        if candidates:
            return max(candidates, key=lambda item: item[0])[1]

        return generic_metadata(title)
