"""FRED release-date collector.

Looks up scheduled (and past) release dates for a curated set of FRED
releases and turns them into calendar events. Each tracked title carries its
own impact, category and Eastern-time release clock; the API only supplies
dates.

A release id shared by several titles (the Employment Situation publishes
both Non-Farm Payrolls and the Unemployment Rate) is fetched once.

Failure semantics: a release whose lookup fails (HTTP error after retries,
timeout, malformed payload) is logged with its id and contributes no events.
collect() itself does not raise for upstream problems.

API Documentation: https://fred.stlouisfed.org/docs/api/fred/release_dates.html
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date
from pathlib import Path

import requests

from econ_timeline.ingestion.collectors.base_collector import BaseScheduleCollector
from econ_timeline.shared.config import Config
from econ_timeline.shared.http import create_session, get_rate_limiter
from econ_timeline.shared.schema import ReleaseEvent
from econ_timeline.shared.utils import parse_iso_date


@dataclass(frozen=True)
class FREDRelease:
    """Immutable descriptor for a tracked FRED release title."""

    release_id: int
    title: str
    impact: str
    category: str
    time_et: str  # local release clock, US/Eastern


class FREDReleaseCollector(BaseScheduleCollector):
    """Collector for FRED release schedules.

    Uses the FRED REST API directly (fredapi does not expose release dates).
    Requests go through a retrying session and the shared FRED rate limiter
    (120 calls/min upstream).
    """

    SOURCE_NAME = "fred"
    BASE_URL = "https://api.stlouisfed.org/fred"
    RELEASE_URL = "https://fred.stlouisfed.org/release?rid={release_id}"
    DATES_LIMIT = 200
    REALTIME_END = "9999-12-31"

    RELEASES: tuple[FREDRelease, ...] = (
        FREDRelease(50, "Non-Farm Payrolls", "high", "employment", "08:30"),
        FREDRelease(50, "Unemployment Rate", "high", "employment", "08:30"),
        FREDRelease(10, "CPI m/m", "high", "inflation", "08:30"),
        FREDRelease(10, "Core CPI m/m", "high", "inflation", "08:30"),
        FREDRelease(53, "GDP q/q", "high", "growth", "08:30"),
        FREDRelease(9, "Retail Sales m/m", "high", "consumer", "08:30"),
        FREDRelease(54, "Core PCE Price Index m/m", "high", "inflation", "08:30"),
        FREDRelease(95, "Durable Goods Orders m/m", "high", "manufacturing", "08:30"),
        FREDRelease(46, "PPI m/m", "medium", "inflation", "08:30"),
        FREDRelease(13, "Industrial Production m/m", "medium", "manufacturing", "09:15"),
        FREDRelease(27, "Housing Starts", "medium", "housing", "08:30"),
        FREDRelease(27, "Building Permits", "medium", "housing", "08:30"),
        FREDRelease(97, "New Home Sales", "medium", "housing", "10:00"),
        FREDRelease(51, "Trade Balance", "medium", "trade", "08:30"),
        FREDRelease(192, "JOLTS Job Openings", "medium", "employment", "10:00"),
        FREDRelease(91, "UoM Consumer Sentiment", "medium", "sentiment", "10:00"),
        FREDRelease(351, "Philly Fed Manufacturing Index", "medium", "manufacturing", "08:30"),
        FREDRelease(321, "Empire State Manufacturing Index", "medium", "manufacturing", "08:30"),
        FREDRelease(47, "Nonfarm Productivity q/q", "medium", "employment", "08:30"),
        FREDRelease(11, "Employment Cost Index q/q", "medium", "employment", "08:30"),
        FREDRelease(180, "Unemployment Claims", "medium", "employment", "08:30"),
        FREDRelease(25, "Business Inventories m/m", "low", "trade", "10:00"),
        FREDRelease(14, "Consumer Credit m/m", "low", "consumer", "15:00"),
        FREDRelease(188, "Import Price Index m/m", "low", "inflation", "08:30"),
        FREDRelease(49, "Current Account", "low", "trade", "08:30"),
    )

    def __init__(
        self,
        api_key: str | None = None,
        session: requests.Session | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the FRED release collector.

        Args:
            api_key: FRED API key (defaults to Config.FRED_API_KEY).
            session: Optional pre-built HTTP session.
            log_file: Optional path for file-based logging.
        """
        super().__init__(log_file=log_file)
        self._api_key = api_key or Config.FRED_API_KEY
        self._session = session or create_session()
        self._limiter = get_rate_limiter(self.BASE_URL, Config.FRED_REQUESTS_PER_SECOND)

    # ------------------------------------------------------------------
    # BaseScheduleCollector interface
    # ------------------------------------------------------------------

    def _generate(self, start_date: date, end_date: date) -> Iterator[ReleaseEvent]:
        if not self._api_key:
            self.logger.error("FRED_API_KEY not set; skipping FRED release schedules")
            return

        release_dates: dict[int, list[date]] = {}
        for release in self.RELEASES:
            if release.release_id not in release_dates:
                release_dates[release.release_id] = self._release_dates_or_empty(
                    release.release_id, start_date
                )

            for day in release_dates[release.release_id]:
                if start_date <= day <= end_date:
                    yield self._event(
                        day,
                        release.time_et,
                        release.title,
                        release.impact,
                        release.category,
                        source_url=self.RELEASE_URL.format(release_id=release.release_id),
                        fredReleaseId=release.release_id,
                    )

    def health_check(self) -> bool:
        """Verify the FRED API is reachable with the configured key."""
        if not self._api_key:
            self.logger.error("FRED health check failed: no API key")
            return False
        try:
            self._get("release", {"release_id": self.RELEASES[0].release_id})
            return True
        except (requests.RequestException, ValueError) as e:
            self.logger.error("FRED health check failed: %s", e)
            return False

    # ------------------------------------------------------------------
    # FRED API
    # ------------------------------------------------------------------

    def get_release_dates(self, release_id: int, start_date: date | None = None) -> list[date]:
        """Fetch the release dates for one FRED release, including future ones.

        FRED defaults the real-time period to the current calendar year, so
        the window start is passed explicitly to reach back across January 1.

        Args:
            release_id: FRED release id.
            start_date: Earliest date of interest (defaults to today).

        Raises:
            requests.RequestException: On transport errors or non-2xx after retries.
            ValueError: If the payload is not the expected shape.
        """
        payload = self._get(
            "release/dates",
            {
                "release_id": release_id,
                "realtime_start": (start_date or date.today()).isoformat(),
                "realtime_end": self.REALTIME_END,
                "include_release_dates_with_no_data": "true",
                "sort_order": "desc",
                "limit": self.DATES_LIMIT,
            },
        )
        entries = payload.get("release_dates")
        if not isinstance(entries, list):
            raise ValueError(f"release {release_id}: 'release_dates' missing from response")

        dates = []
        for entry in entries:
            day = parse_iso_date(entry.get("date")) if isinstance(entry, dict) else None
            if day is None:
                self.logger.warning("release %s: skipping malformed entry %r", release_id, entry)
                continue
            dates.append(day)
        return sorted(set(dates))

    def _release_dates_or_empty(self, release_id: int, start_date: date) -> list[date]:
        try:
            dates = self.get_release_dates(release_id, start_date)
            self.logger.debug("release %s: %d dates", release_id, len(dates))
            return dates
        except (requests.RequestException, ValueError) as e:
            self.logger.error("Failed to fetch FRED release %s: %s", release_id, e)
            return []

    def _get(self, endpoint: str, params: dict) -> dict:
        self._limiter.acquire()
        response = self._session.get(
            f"{self.BASE_URL}/{endpoint}",
            params={**params, "api_key": self._api_key, "file_type": "json"},
            timeout=Config.REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected FRED payload type: {type(payload).__name__}")
        return payload
