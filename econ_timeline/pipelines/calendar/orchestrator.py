"""Calendar orchestrator: collect, normalize, deduplicate, enrich, publish.

Providers run sequentially in registration order. A provider that raises is
recorded as a ProviderFailure and the run continues with the others. After
collection, events are sorted by (date, time) and deduplicated on
(date, title), so earlier-registered providers win ties.
"""

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import pandas as pd

from econ_timeline.enrichment.data_enricher import DataEnricher
from econ_timeline.ingestion.collectors import (
    BaseScheduleCollector,
    CentralBankCollector,
    ChinaScheduleCollector,
    EIAScheduleCollector,
    FedEventsCollector,
    FREDReleaseCollector,
    TreasuryAuctionCollector,
    USMarketHolidaysCollector,
)
from econ_timeline.ingestion.preprocessors import (
    EventNormalizer,
    deduplicate_events,
    sort_events,
)
from econ_timeline.publishing.snapshot_publisher import SnapshotPublisher
from econ_timeline.shared.config import Config
from econ_timeline.shared.errors import FatalRunFailure, ProviderFailure, SeriesFetchFailure
from econ_timeline.shared.schema import ReleaseEvent
from econ_timeline.shared.utils import calendar_window, setup_logger, utc_now_iso

PROVIDER_NAMES = ("fred", "fomc", "ecb", "treasury", "fed-events", "eia", "holidays", "china")


def build_default_registry(
    today: date | None = None, log_file: Path | None = None
) -> dict[str, BaseScheduleCollector]:
    """Ordered provider registry. Order decides which duplicate survives."""
    return {
        "fred": FREDReleaseCollector(log_file=log_file),
        "fomc": CentralBankCollector("fomc", log_file=log_file),
        "ecb": CentralBankCollector("ecb", log_file=log_file),
        "treasury": TreasuryAuctionCollector(log_file=log_file),
        "fed-events": FedEventsCollector(today=today, log_file=log_file),
        "eia": EIAScheduleCollector(log_file=log_file),
        "holidays": USMarketHolidaysCollector(log_file=log_file),
        "china": ChinaScheduleCollector(log_file=log_file),
    }


@dataclass
class RunResult:
    """Outcome of one orchestrator run."""

    mode: str
    snapshot: dict[str, Any]
    written_paths: list[Path] = field(default_factory=list)
    provider_failures: list[ProviderFailure] = field(default_factory=list)
    series_failures: list[SeriesFetchFailure] = field(default_factory=list)

    @property
    def event_count(self) -> int:
        return len(self.snapshot.get("events", []))


class CalendarOrchestrator:
    """Runs the provider registry and publishes the consolidated snapshot."""

    def __init__(
        self,
        collectors: dict[str, BaseScheduleCollector],
        normalizer: EventNormalizer | None = None,
        enricher: DataEnricher | None = None,
        publisher: SnapshotPublisher | None = None,
        today: date | None = None,
        manifest_dir: Path | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            collectors: Ordered provider name -> collector map.
            normalizer: Event normalizer (defaults to one over the bundled catalog).
            enricher: Data enricher; None disables data enrichment.
            publisher: Snapshot publisher (defaults to Config output paths).
            today: Reference date for the collection window.
            manifest_dir: Where to write a JSON run manifest; None skips it.
            log_file: Optional path for file-based logging.
        """
        self.collectors = collectors
        self.normalizer = normalizer or EventNormalizer(log_file=log_file)
        self.enricher = enricher
        self.publisher = publisher or SnapshotPublisher(log_file=log_file)
        self.today = today
        self.manifest_dir = manifest_dir
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def window(self) -> tuple[date, date]:
        """Inclusive collection window around today."""
        return calendar_window(
            self.today or date.today(), Config.WINDOW_MONTHS_BACK, Config.WINDOW_MONTHS_AHEAD
        )

    def _select(self, source: str | None) -> dict[str, BaseScheduleCollector]:
        if source is None:
            return self.collectors
        if source not in self.collectors:
            raise ValueError(
                f"Unknown source '{source}'. Available: {', '.join(self.collectors)}"
            )
        return {source: self.collectors[source]}

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def collect(
        self, start_date: date, end_date: date, source: str | None = None
    ) -> tuple[list[ReleaseEvent], list[ProviderFailure]]:
        """Run providers in order, isolating failures.

        Returns:
            (normalized events in provider order, provider failures)
        """
        events: list[ReleaseEvent] = []
        failures: list[ProviderFailure] = []

        for name, collector in self._select(source).items():
            try:
                collected = collector.collect(start_date, end_date)
            except Exception as e:
                failure = ProviderFailure(name, str(e))
                self.logger.error("%s", failure, exc_info=True)
                failures.append(failure)
                continue

            normalized = self.normalizer.normalize(collected, source=name)
            self.logger.info("%s: %d events", name, len(normalized))
            events.extend(normalized)

        return events, failures

    def run(self, source: str | None = None, include_data: bool = True) -> RunResult:
        """Full (or single-provider) rebuild.

        Args:
            source: Run only this provider; None runs the whole registry.
            include_data: Attach series data when an enricher is configured.

        Raises:
            ValueError: If source is not a registered provider.
            FatalRunFailure: If the snapshot could not be written anywhere.
        """
        selected = list(self._select(source))
        start, end = self.window()
        mode = "single" if source else ("full" if include_data else "full-no-data")
        self.logger.info(
            "Building calendar (%s) from %s to %s with providers: %s",
            mode,
            start,
            end,
            ", ".join(selected),
        )

        collected, failures = self.collect(start, end, source)
        events = deduplicate_events(sort_events(collected))
        self.logger.info(
            "Consolidated %d events (%d duplicates removed)",
            len(events),
            len(collected) - len(events),
        )

        data_included = bool(include_data and self.enricher is not None)
        series_failures: list[SeriesFetchFailure] = []
        if data_included:
            self.enricher.enrich(events)
            series_failures = list(self.enricher.failures)

        snapshot = self.publisher.build_snapshot(events, selected, data_included)
        written = self.publisher.publish(snapshot)

        result = RunResult(mode, snapshot, written, failures, series_failures)
        self.log_summary(events)
        self.write_manifest(result)
        return result

    def refresh(self) -> RunResult:
        """Quick refresh: re-fetch series values into the existing snapshot.

        Raises:
            FatalRunFailure: If there is no enricher or no usable snapshot.
        """
        if self.enricher is None:
            raise FatalRunFailure("Quick refresh requires a data enricher")

        snapshot = self.publisher.load_snapshot()
        self.logger.info(
            "Refreshing data for %d events in existing snapshot", len(snapshot["events"])
        )
        refreshed = self.enricher.refresh(snapshot)
        written = self.publisher.publish(refreshed)

        result = RunResult("data-only", refreshed, written, [], list(self.enricher.failures))
        self.write_manifest(result)
        return result

    def health_check(self, source: str | None = None) -> dict[str, bool]:
        """Run each provider's health check."""
        results = {}
        for name, collector in self._select(source).items():
            results[name] = collector.health_check()
            self.logger.info("%s health check: %s", name, "PASSED" if results[name] else "FAILED")
        return results

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def log_summary(self, events: list[ReleaseEvent], upcoming: int = 10) -> None:
        """Log counts by source and category plus the next high-impact events."""
        if not events:
            self.logger.warning("No events collected")
            return

        df = pd.DataFrame(
            [
                {"date": e.date, "time": e.time, "title": e.title, "impact": e.impact,
                 "category": e.category, "source": e.source}
                for e in events
            ]
        )
        self.logger.info("Events by source:")
        for name, count in df["source"].value_counts().items():
            self.logger.info("  %-12s %d", name, count)
        self.logger.info("Events by category:")
        for name, count in df["category"].value_counts().items():
            self.logger.info("  %-14s %d", name, count)

        today = (self.today or date.today()).isoformat()
        high = df[(df["impact"] == "high") & (df["date"] >= today)].head(upcoming)
        if not high.empty:
            self.logger.info("Upcoming high-impact events:")
            for row in high.itertuples(index=False):
                self.logger.info("  %s %s  %s", row.date, row.time, row.title)

    def write_manifest(self, result: RunResult) -> Path | None:
        """Write a JSON run manifest next to the data directory."""
        if self.manifest_dir is None:
            return None

        run_time_utc = utc_now_iso()
        manifest = {
            "run_time_utc": run_time_utc,
            "pipeline": "calendar",
            "mode": result.mode,
            "sources": result.snapshot.get("sources", []),
            "events": result.event_count,
            "data_included": result.snapshot.get("dataIncluded", False),
            "written": [str(p) for p in result.written_paths],
            "provider_failures": [
                {"provider": f.provider, "message": f.message} for f in result.provider_failures
            ],
            "series_failures": [
                {"series_id": f.series_id, "message": f.message} for f in result.series_failures
            ],
        }

        self.manifest_dir.mkdir(parents=True, exist_ok=True)
        manifest_path = self.manifest_dir / f"calendar_run_{run_time_utc.replace(':', '-')}.json"
        with open(manifest_path, "w") as f:
            json.dump(manifest, f, indent=2)
        return manifest_path
