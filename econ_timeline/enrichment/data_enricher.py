"""Enrichment service: attach latest/prior data values to calendar events.

Two modes:

    enrich(events)      full run; events with a series mapping get
                        latestValue/priorValue/latestDate/priorDate/seriesId
                        and a derived actual/previous pair
    refresh(snapshot)   quick refresh of an existing snapshot document; only
                        the data fields of mapped events change

Every upstream series is fetched at most once per run, through a bounded
worker pool. A series that fails is logged and its events keep schedule data
only.

actual/previous are derived from the event time: an event at or before now
is treated as released (actual = latest, previous = prior); a future event
shows the latest print as its previous value.
"""

import copy
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, time
from pathlib import Path
from typing import Any

import pytz

from econ_timeline.enrichment.observation_clients import (
    EIAObservationClient,
    FREDObservationClient,
    ObservationClient,
)
from econ_timeline.enrichment.series_mapping import (
    SERIES_MAPPINGS,
    Observation,
    SeriesMapping,
    SeriesReading,
    compute_reading,
)
from econ_timeline.ingestion.preprocessors.indicator_catalog import IndicatorCatalog
from econ_timeline.shared.config import Config
from econ_timeline.shared.errors import SeriesFetchFailure
from econ_timeline.shared.schema import DATA_FIELDS, ReleaseEvent
from econ_timeline.shared.utils import parse_clock, parse_iso_date, setup_logger, utc_now


def event_timestamp(event_date: str, event_time: str | None) -> datetime | None:
    """UTC timestamp of an event; untimed events count from start of day."""
    day = parse_iso_date(event_date)
    if day is None:
        return None
    clock = parse_clock(event_time) or time(0, 0)
    return pytz.UTC.localize(datetime.combine(day, clock))


def resolve_actual_previous(
    event_date: str, event_time: str | None, reading: SeriesReading, now: datetime
) -> tuple[str | None, str | None]:
    """(actual, previous) for an event given the latest reading of its series."""
    timestamp = event_timestamp(event_date, event_time)
    if timestamp is not None and timestamp <= now:
        return reading.latest_value, reading.prior_value
    return None, reading.latest_value


def apply_reading(event: ReleaseEvent, reading: SeriesReading, now: datetime, stamp: str) -> None:
    """Write a series reading onto an event's data fields."""
    event.series_id = reading.series_id
    event.latest_value = reading.latest_value
    event.prior_value = reading.prior_value
    event.latest_date = reading.latest_date
    event.prior_date = reading.prior_date
    event.data_updated_at = stamp
    event.actual, event.previous = resolve_actual_previous(event.date, event.time, reading, now)


class DataEnricher:
    """Attach series values to events, one upstream fetch per series."""

    def __init__(
        self,
        catalog: IndicatorCatalog | None = None,
        clients: dict[str, ObservationClient] | None = None,
        mappings: dict[str, SeriesMapping] | None = None,
        max_workers: int | None = None,
        clock: Callable[[], datetime] = utc_now,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the enricher.

        Args:
            catalog: Resolves indicator ids for events that lack one.
            clients: Observation clients keyed by provider ("fred", "eia").
            mappings: Indicator id -> SeriesMapping (defaults to SERIES_MAPPINGS).
            max_workers: Worker pool size (defaults to Config.FETCH_WORKERS).
            clock: Returns the current aware UTC datetime.
            log_file: Optional path for file-based logging.
        """
        self.logger = setup_logger(self.__class__.__name__, log_file)
        self.catalog = catalog or IndicatorCatalog()
        self.clients = clients if clients is not None else {
            FREDObservationClient.PROVIDER: FREDObservationClient(log_file=log_file),
            EIAObservationClient.PROVIDER: EIAObservationClient(log_file=log_file),
        }
        self.mappings = SERIES_MAPPINGS if mappings is None else mappings
        self.max_workers = max_workers or Config.FETCH_WORKERS
        self._clock = clock
        self.failures: list[SeriesFetchFailure] = []

        uncatalogued = sorted(i for i in self.mappings if i not in self.catalog)
        if uncatalogued:
            self.logger.warning("Series mappings without catalog metadata: %s", ", ".join(uncatalogued))

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _fetch_one(self, mapping: SeriesMapping) -> list[Observation]:
        client = self.clients.get(mapping.provider)
        if client is None:
            raise SeriesFetchFailure(mapping.series_id, f"no client for provider '{mapping.provider}'")
        return client.fetch(mapping.series_id, count=mapping.observations_needed)

    def fetch_observations(
        self, mappings: Iterable[SeriesMapping]
    ) -> dict[tuple[str, str], list[Observation]]:
        """Fetch each distinct series once, in parallel.

        Returns:
            Observations keyed by (provider, series_id); failed series are absent
            and recorded in ``self.failures``.
        """
        unique: dict[tuple[str, str], SeriesMapping] = {}
        for mapping in mappings:
            unique.setdefault(mapping.key, mapping)
        if not unique:
            return {}

        self.logger.info(
            "Fetching %d series with %d workers", len(unique), min(self.max_workers, len(unique))
        )
        results: dict[tuple[str, str], list[Observation]] = {}
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(unique))) as executor:
            future_to_key = {
                executor.submit(self._fetch_one, mapping): key for key, mapping in unique.items()
            }
            for future in as_completed(future_to_key):
                key = future_to_key[future]
                try:
                    results[key] = future.result()
                except SeriesFetchFailure as e:
                    self.logger.error("%s", e)
                    self.failures.append(e)
                except Exception as e:
                    failure = SeriesFetchFailure(key[1], f"{type(e).__name__}: {e}")
                    self.logger.error("Unexpected error fetching %s: %s", key[1], e, exc_info=True)
                    self.failures.append(failure)

        self.logger.info("Fetched %d/%d series", len(results), len(unique))
        return results

    def _readings(self, mappings: Iterable[SeriesMapping]) -> dict[str, SeriesReading]:
        mappings = list(mappings)
        observations = self.fetch_observations(mappings)
        readings = {}
        for mapping in mappings:
            series = observations.get(mapping.key)
            reading = compute_reading(series, mapping) if series else None
            if reading is not None:
                readings[mapping.indicator_id] = reading
            elif series:
                self.logger.warning("Not enough observations for %s", mapping.series_id)
        return readings

    def _indicator_id(self, indicator_id: str | None, title: str) -> str | None:
        return indicator_id or self.catalog.identify(title)

    # ------------------------------------------------------------------
    # Full enrichment
    # ------------------------------------------------------------------

    def enrich(self, events: list[ReleaseEvent]) -> list[ReleaseEvent]:
        """Attach data values to every mapped event (in place).

        Events without a mapping, or whose series failed, keep
        ``actual``/``previous`` unset.
        """
        mapped = []
        for event in events:
            event.indicator_id = self._indicator_id(event.indicator_id, event.title)
            mapping = self.mappings.get(event.indicator_id) if event.indicator_id else None
            if mapping is not None:
                mapped.append((event, mapping))

        readings = self._readings({m.indicator_id: m for _, m in mapped}.values())
        now = self._clock()
        updated_at = now.isoformat(timespec="seconds").replace("+00:00", "Z")

        enriched = 0
        for event, mapping in mapped:
            reading = readings.get(mapping.indicator_id)
            if reading is None:
                continue
            apply_reading(event, reading, now, updated_at)
            enriched += 1

        self.logger.info("Enriched %d of %d mapped events", enriched, len(mapped))
        return events

    # ------------------------------------------------------------------
    # Quick refresh
    # ------------------------------------------------------------------

    def refresh(self, snapshot: dict[str, Any]) -> dict[str, Any]:
        """Re-fetch every mapped series and patch an existing snapshot.

        Only the data fields of mapped events change; every other key is
        carried over unchanged. The input document is not modified.

        Returns:
            A patched copy with ``dataRefreshedAt`` and ``lastUpdated`` set.
        """
        refreshed = copy.deepcopy(snapshot)
        readings = self._readings(self.mappings.values())
        now = self._clock()
        stamp = now.isoformat(timespec="seconds").replace("+00:00", "Z")

        patched = 0
        for event in refreshed.get("events", []):
            indicator_id = self._indicator_id(event.get("indicatorId"), event.get("title", ""))
            reading = readings.get(indicator_id) if indicator_id else None
            if reading is None:
                continue
            try:
                patched_event = ReleaseEvent.from_dict(event)
            except ValueError as e:
                self.logger.warning("Skipping malformed snapshot event %r: %s", event.get("title"), e)
                continue
            apply_reading(patched_event, reading, now, stamp)
            wire = patched_event.to_dict()
            event.update({key: wire.get(key) for key in DATA_FIELDS})
            patched += 1

        refreshed["dataRefreshedAt"] = stamp
        refreshed["lastUpdated"] = stamp
        if patched:
            refreshed["dataIncluded"] = True
        self.logger.info("Refreshed data on %d events", patched)
        return refreshed
