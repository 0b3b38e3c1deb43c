"""Central bank meeting calendar collector.

Expands a versioned meeting table (``data/schedules/<name>.json``) into
calendar events. Each meeting yields up to four events:

    - the rate decision (always)
    - the press conference (when the meeting has one)
    - the economic projections (quarterly projection meetings)
    - the minutes/accounts, released on ``minutesReleaseDate`` or
      ``minutesLagDays`` after the meeting

Minutes are emitted whenever their own release date falls in the window,
even if the meeting itself is outside it.

Example:
    >>> from datetime import date
    >>> collector = CentralBankCollector("fomc")
    >>> events = collector.collect(date(2025, 9, 1), date(2025, 9, 30))
    >>> [e.title for e in events]
    ['FOMC Rate Decision', 'FOMC Economic Projections', 'Fed Chair Press Conference']
"""

from collections.abc import Iterator
from datetime import date, timedelta
from pathlib import Path

from econ_timeline.ingestion.collectors.base_collector import BaseScheduleCollector
from econ_timeline.ingestion.collectors.schedule_tables import load_meeting_table
from econ_timeline.shared.schema import ReleaseEvent
from econ_timeline.shared.utils import parse_iso_date

EVENT_IMPACTS = {
    "decision": "high",
    "pressConference": "high",
    "projections": "high",
    "minutes": "medium",
}


class CentralBankCollector(BaseScheduleCollector):
    """Collector driven by a static central bank meeting table."""

    def __init__(
        self,
        table_name: str,
        tables_dir: Path | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            table_name: Meeting table to expand ("fomc", "ecb").
            tables_dir: Override for the schedule tables directory.
            log_file: Optional path for file-based logging.
        """
        super().__init__(log_file=log_file)
        self.table_name = table_name
        self._tables_dir = tables_dir

    @property
    def table(self) -> dict:
        return load_meeting_table(self.table_name, self._tables_dir)

    @property
    def SOURCE_NAME(self) -> str:  # noqa: N802
        return self.table["source"]

    # ------------------------------------------------------------------
    # BaseScheduleCollector interface
    # ------------------------------------------------------------------

    def _generate(self, start_date: date, end_date: date) -> Iterator[ReleaseEvent]:
        table = self.table

        for meeting in table["meetings"]:
            meeting_day = parse_iso_date(meeting["date"])
            minutes_day = self._minutes_date(meeting, meeting_day, table["minutesLagDays"])
            extra = {"tentative": True} if meeting.get("tentative") else {}

            if start_date <= meeting_day <= end_date:
                yield self._meeting_event(table, "decision", meeting_day, **extra)
                if meeting["projections"]:
                    yield self._meeting_event(table, "projections", meeting_day, **extra)
                if meeting["pressConference"]:
                    yield self._meeting_event(table, "pressConference", meeting_day, **extra)

            if start_date <= minutes_day <= end_date:
                yield self._meeting_event(
                    table, "minutes", minutes_day, meetingDate=meeting["date"], **extra
                )

    def health_check(self) -> bool:
        """Verify the meeting table loads and validates."""
        try:
            self.table
            return True
        except (OSError, ValueError, TypeError) as e:
            self.logger.error("%s meeting table failed to load: %s", self.table_name, e)
            return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _minutes_date(meeting: dict, meeting_day: date, lag_days: int) -> date:
        explicit = meeting.get("minutesReleaseDate")
        if explicit:
            return parse_iso_date(explicit)
        return meeting_day + timedelta(days=lag_days)

    def _meeting_event(self, table: dict, kind: str, day: date, **extra) -> ReleaseEvent:
        return self._event(
            day,
            table["times"][kind],
            table["titles"][kind],
            EVENT_IMPACTS[kind],
            "central_bank",
            source_url=table["sourceUrl"],
            timezone=table["timezone"],
            currency=table["currency"],
            country=table["country"],
            **extra,
        )
