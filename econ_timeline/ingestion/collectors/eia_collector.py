"""EIA energy report schedule.

Crude oil inventories (Weekly Petroleum Status Report) publish Wednesdays at
10:30 ET; natural gas storage publishes the following day at 10:30 ET. Holiday
shifts are not modeled.

The monthly Short-Term Energy Outlook comes from the ``steo`` release table,
since EIA moves it around the second Tuesday of the month.
"""

from collections.abc import Iterator
from datetime import date, timedelta
from pathlib import Path

from econ_timeline.ingestion.collectors.base_collector import BaseScheduleCollector
from econ_timeline.ingestion.collectors.calendar_math import WEDNESDAY, weekly_dates
from econ_timeline.ingestion.collectors.schedule_tables import load_release_table
from econ_timeline.shared.schema import ReleaseEvent
from econ_timeline.shared.utils import parse_iso_date


class EIAScheduleCollector(BaseScheduleCollector):
    """Weekly and monthly EIA energy report calendar."""

    SOURCE_NAME = "eia"
    RELEASE_TIME_ET = "10:30"
    CRUDE_URL = "https://www.eia.gov/petroleum/supply/weekly/"
    NATGAS_URL = "https://www.eia.gov/naturalgas/storage/"

    def __init__(self, tables_dir: Path | None = None, log_file: Path | None = None) -> None:
        super().__init__(log_file=log_file)
        self._tables_dir = tables_dir

    def _generate(self, start_date: date, end_date: date) -> Iterator[ReleaseEvent]:
        # Start a week early so a Thursday release at the window start is kept
        for wednesday in weekly_dates(start_date - timedelta(days=7), end_date, WEDNESDAY):
            yield self._event(
                wednesday,
                self.RELEASE_TIME_ET,
                "Crude Oil Inventories",
                "medium",
                "energy",
                source_url=self.CRUDE_URL,
            )
            yield self._event(
                wednesday + timedelta(days=1),
                self.RELEASE_TIME_ET,
                "Natural Gas Storage",
                "low",
                "energy",
                source_url=self.NATGAS_URL,
            )

        yield from self._outlook_events()

    def _outlook_events(self) -> Iterator[ReleaseEvent]:
        steo = load_release_table("steo", self._tables_dir)
        for entry in steo["releases"]:
            extra = {"tentative": True} if entry.get("tentative") else {}
            yield self._event(
                parse_iso_date(entry["date"]),
                steo["time"],
                steo["title"],
                "low",
                "energy",
                source_url=steo["sourceUrl"],
                **extra,
            )

    def health_check(self) -> bool:
        """Verify the outlook release table loads."""
        try:
            load_release_table("steo", self._tables_dir)
        except (OSError, ValueError, TypeError) as e:
            self.logger.error("STEO release table failed to load: %s", e)
            return False
        return True
