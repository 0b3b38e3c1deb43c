"""Federal Reserve events collector.

Three kinds of Fed events beyond FOMC meetings:

    - Beige Book: published at 14:00 ET on the Wednesday on or before the
      date two weeks ahead of each FOMC decision (derived from the FOMC
      meeting table)
    - Jackson Hole symposium and semiannual Congressional testimony (static
      table ``data/schedules/fed_events.json``)
    - Speeches by Board members, scraped from the monthly calendar pages on
      federalreserve.gov for the current and next month

Scraping is best effort: a page that cannot be fetched or parsed is logged
and skipped; the static events are still returned.
"""

import calendar
import re
from collections.abc import Iterator
from datetime import date, timedelta
from pathlib import Path

import requests
from bs4 import BeautifulSoup

from econ_timeline.ingestion.collectors.base_collector import BaseScheduleCollector
from econ_timeline.ingestion.collectors.calendar_math import WEDNESDAY, weekday_on_or_before
from econ_timeline.ingestion.collectors.schedule_tables import (
    load_fed_events_table,
    load_meeting_table,
)
from econ_timeline.shared.config import Config
from econ_timeline.shared.http import create_session, get_rate_limiter
from econ_timeline.shared.schema import ReleaseEvent
from econ_timeline.shared.utils import parse_iso_date

JACKSON_HOLE_URL = "https://www.kansascityfed.org/research/jackson-hole-economic-symposium/"
MONTH_NAMES = "|".join(calendar.month_name[1:])
DATE_HEADING_RE = re.compile(rf"^\s*(?:\w+day,\s+)?({MONTH_NAMES})\s+(\d{{1,2}})(?:,\s*\d{{4}})?\s*$")
TIME_RE = re.compile(r"(\d{1,2}):(\d{2})\s*([ap])\.?m\.?", re.IGNORECASE)
SPEAKER_RE = re.compile(
    r"\b(Vice Chair for Supervision|Vice Chair|Chair|Governor)\s+"
    r"((?:[A-Z][a-zA-Z.\-']*\s?)+)\s*$"
)


def beige_book_date(decision_day: date) -> date:
    """Beige Book release for an FOMC meeting decided on ``decision_day``."""
    return weekday_on_or_before(decision_day - timedelta(days=14), WEDNESDAY)


def parse_speech_time(text: str) -> str | None:
    """Convert "10:30 a.m." style text to a 24-hour "HH:MM" clock."""
    match = TIME_RE.search(text)
    if not match:
        return None
    hour, minute, meridiem = int(match.group(1)), int(match.group(2)), match.group(3).lower()
    if hour == 12:
        hour = 0
    if meridiem == "p":
        hour += 12
    return f"{hour:02d}:{minute:02d}"


class FedEventsCollector(BaseScheduleCollector):
    """Collector for Beige Book, testimony, Jackson Hole and Fed speeches."""

    SOURCE_NAME = "fed-events"
    CALENDAR_URL = "https://www.federalreserve.gov/newsevents/{year}-{month}.htm"
    SPEECH_MONTHS = 2

    def __init__(
        self,
        scrape_speeches: bool = True,
        today: date | None = None,
        session: requests.Session | None = None,
        tables_dir: Path | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            scrape_speeches: Fetch Board member speeches from federalreserve.gov.
            today: Reference date for choosing which calendar months to scrape.
            session: Optional pre-built HTTP session.
            tables_dir: Override for the schedule tables directory.
            log_file: Optional path for file-based logging.
        """
        super().__init__(log_file=log_file)
        self.scrape_speeches = scrape_speeches
        self._today = today
        self._tables_dir = tables_dir
        self._session = session or create_session()
        self._limiter = get_rate_limiter("www.federalreserve.gov", 1.0)

    # ------------------------------------------------------------------
    # BaseScheduleCollector interface
    # ------------------------------------------------------------------

    def _generate(self, start_date: date, end_date: date) -> Iterator[ReleaseEvent]:
        table = load_fed_events_table(self._tables_dir)
        yield from self._beige_book_events(table)
        yield from self._static_events(table)
        if self.scrape_speeches:
            yield from self._speech_events(start_date, end_date)

    def health_check(self) -> bool:
        """Verify the static tables load and the Fed calendar page responds."""
        try:
            load_fed_events_table(self._tables_dir)
            load_meeting_table("fomc", self._tables_dir)
        except (OSError, ValueError, TypeError) as e:
            self.logger.error("Fed events tables failed to load: %s", e)
            return False
        if not self.scrape_speeches:
            return True
        today = self._today or date.today()
        try:
            response = self._session.head(self._calendar_url(today.year, today.month), timeout=Config.REQUEST_TIMEOUT)
            return response.status_code < 400
        except requests.RequestException as e:
            self.logger.error("Fed calendar health check failed: %s", e)
            return False

    # ------------------------------------------------------------------
    # Static events
    # ------------------------------------------------------------------

    def _beige_book_events(self, table: dict) -> Iterator[ReleaseEvent]:
        beige_book = table["beigeBook"]
        fomc = load_meeting_table("fomc", self._tables_dir)
        for meeting in fomc["meetings"]:
            yield self._event(
                beige_book_date(parse_iso_date(meeting["date"])),
                beige_book["time"],
                beige_book["title"],
                "medium",
                "central_bank",
                source_url=beige_book.get("sourceUrl", table["sourceUrl"]),
            )

    def _static_events(self, table: dict) -> Iterator[ReleaseEvent]:
        for entry in table["jacksonHole"]:
            extra = {"tentative": True} if entry.get("tentative") else {}
            start = self._event(
                parse_iso_date(entry["start"]),
                entry["startTime"],
                "Jackson Hole Symposium Begins",
                "medium",
                "central_bank",
                source_url=JACKSON_HOLE_URL,
                **extra,
            )
            start.description = "Annual Kansas City Fed economic policy symposium in Jackson Hole, Wyoming."
            yield start
            yield self._event(
                parse_iso_date(entry["date"]),
                entry["time"],
                "Jackson Hole Symposium - Fed Chair Speech",
                "high",
                "central_bank",
                source_url=JACKSON_HOLE_URL,
                **extra,
            )

        for entry in table["testimony"]:
            extra = {"tentative": True} if entry.get("tentative") else {}
            yield self._event(
                parse_iso_date(entry["date"]),
                entry["time"],
                f"Fed Chair Testimony ({entry['chamber']})",
                "high",
                "central_bank",
                source_url=table["sourceUrl"],
                **extra,
            )

    # ------------------------------------------------------------------
    # Speeches (federalreserve.gov monthly calendar)
    # ------------------------------------------------------------------

    def _calendar_url(self, year: int, month: int) -> str:
        return self.CALENDAR_URL.format(year=year, month=calendar.month_name[month].lower())

    def _speech_months(self, start_date: date, end_date: date) -> list[tuple[int, int]]:
        first = max(start_date, (self._today or date.today()).replace(day=1))
        months = []
        year, month = first.year, first.month
        while len(months) < self.SPEECH_MONTHS and (year, month) <= (end_date.year, end_date.month):
            months.append((year, month))
            year, month = (year + 1, 1) if month == 12 else (year, month + 1)
        return months

    def _speech_events(self, start_date: date, end_date: date) -> Iterator[ReleaseEvent]:
        for year, month in self._speech_months(start_date, end_date):
            url = self._calendar_url(year, month)
            self._limiter.acquire()
            try:
                response = self._session.get(url, timeout=Config.REQUEST_TIMEOUT)
                response.raise_for_status()
            except requests.RequestException as e:
                self.logger.warning("Could not fetch Fed calendar %s: %s", url, e)
                continue

            speeches = self.parse_speeches(response.text, year, url)
            self.logger.debug("Parsed %d speeches from %s", len(speeches), url)
            yield from speeches

    def parse_speeches(self, html: str, year: int, url: str) -> list[ReleaseEvent]:
        """Extract Board member speeches from a Fed monthly calendar page.

        Args:
            html: Page HTML.
            year: Calendar year of the page (headings omit it).
            url: Page URL, recorded as the event source URL.

        Returns:
            One event per speech with a recognizable date, time and speaker.
        """
        soup = BeautifulSoup(html, "html.parser")
        events: list[ReleaseEvent] = []
        seen: set[tuple[str, str]] = set()

        for block in soup.find_all(["div", "li", "tr"]):
            # innermost blocks only, so each entry is read once
            if block.find(["div", "li", "tr"]):
                continue
            text = " ".join(block.get_text(" ").split())
            if "speech" not in text.lower():
                continue

            speaker = next(
                (m for m in map(SPEAKER_RE.search, block.stripped_strings) if m), None
            )
            clock = parse_speech_time(text) or self._nearby_time(block)
            heading = block.find_previous(string=DATE_HEADING_RE)
            if not (speaker and clock and heading):
                continue

            match = DATE_HEADING_RE.match(heading)
            month = list(calendar.month_name).index(match.group(1))
            try:
                day = date(year, month, int(match.group(2)))
            except ValueError:
                self.logger.warning("Skipping speech under invalid date heading %r", heading.strip())
                continue

            role, name = speaker.group(1), speaker.group(2).strip()
            surname = name.split()[-1]
            is_chair = role == "Chair"
            title = f"Fed Chair {surname} Speaks" if is_chair else f"FOMC Member {surname} Speaks"
            if (day.isoformat(), title) in seen:
                continue
            seen.add((day.isoformat(), title))

            event = self._event(
                day,
                clock,
                title,
                "high" if is_chair else "medium",
                "central_bank",
                source_url=url,
                speaker=f"{role} {name}",
            )
            events.append(event)

        return events

    @staticmethod
    def _nearby_time(block) -> str | None:
        previous = block.find_previous(string=TIME_RE)
        return parse_speech_time(previous) if previous else None
