"""Upstream observation clients for series enrichment.

Each client fetches the most recent observations of one series and returns
them newest first. Failures surface as SeriesFetchFailure after retries.

Retry policy: transient failures (timeouts, connection errors, throttling,
5xx) are retried with exponential backoff; 4xx and malformed payloads are not.
"""

import http.client
import time
import xml.etree.ElementTree as ET
from datetime import date, timedelta
from pathlib import Path
from typing import Protocol
from urllib.error import HTTPError

import pandas as pd
import requests
from fredapi import Fred

from econ_timeline.enrichment.series_mapping import Observation
from econ_timeline.shared.config import Config
from econ_timeline.shared.errors import SeriesFetchFailure
from econ_timeline.shared.http import create_session, get_rate_limiter
from econ_timeline.shared.utils import setup_logger

TRANSIENT_MESSAGES = (
    "too many requests",
    "internal server error",
    "service unavailable",
    "bad gateway",
    "gateway timeout",
)


def is_transient(error: Exception) -> bool:
    """Whether an upstream error is worth retrying."""
    code = getattr(error, "code", None)
    if isinstance(error, HTTPError) and isinstance(code, int):
        return code == 429 or code >= 500
    if isinstance(error, OSError):
        # URLError, timeouts, connection resets
        return True
    if isinstance(error, ValueError):
        message = str(error).lower()
        return any(text in message for text in TRANSIENT_MESSAGES)
    return False


class ObservationClient(Protocol):
    """Fetches the newest observations of a series."""

    PROVIDER: str

    def fetch(self, series_id: str, count: int = 3) -> list[Observation]: ...


class FREDObservationClient:
    """FRED observations via fredapi.

    Uses a two-year lookback, which covers three observations of every
    weekly, monthly and quarterly series in the mapping table.
    """

    PROVIDER = "fred"
    BASE_URL = "https://api.stlouisfed.org/fred"
    LOOKBACK_DAYS = 730

    def __init__(
        self,
        api_key: str | None = None,
        fred: Fred | None = None,
        max_retries: int | None = None,
        retry_backoff: float | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: FRED API key (defaults to Config.FRED_API_KEY).
            fred: Optional pre-built fredapi client.
            max_retries: Retry ceiling for transient failures.
            retry_backoff: Base backoff in seconds (doubles each attempt).
            log_file: Optional path for file-based logging.
        """
        self.logger = setup_logger(self.__class__.__name__, log_file)
        self._api_key = api_key or Config.FRED_API_KEY
        self._fred = fred or (Fred(api_key=self._api_key) if self._api_key else None)
        self.max_retries = Config.MAX_RETRIES if max_retries is None else max_retries
        self.retry_backoff = Config.RETRY_BACKOFF if retry_backoff is None else retry_backoff
        self._limiter = get_rate_limiter(self.BASE_URL, Config.FRED_REQUESTS_PER_SECOND)

    def fetch(self, series_id: str, count: int = 3) -> list[Observation]:
        """Fetch the newest ``count`` non-missing observations.

        Raises:
            SeriesFetchFailure: On missing key, non-transient errors, empty data,
                or transient errors that outlast the retries.
        """
        if self._fred is None:
            raise SeriesFetchFailure(series_id, "FRED API key not configured")

        start = (date.today() - timedelta(days=self.LOOKBACK_DAYS)).isoformat()
        for attempt in range(self.max_retries + 1):
            self._limiter.acquire()
            try:
                series = self._fred.get_series(series_id, observation_start=start)
                break
            except (ValueError, OSError, ET.ParseError, http.client.HTTPException) as e:
                if not is_transient(e) or attempt == self.max_retries:
                    raise SeriesFetchFailure(series_id, str(e)) from e
                wait = self.retry_backoff * (2**attempt)
                self.logger.warning(
                    "%s attempt %d/%d failed (%s), retrying in %.1fs",
                    series_id,
                    attempt + 1,
                    self.max_retries + 1,
                    e,
                    wait,
                )
                time.sleep(wait)

        return self._latest(series_id, series, count)

    @staticmethod
    def _latest(series_id: str, series: pd.Series, count: int) -> list[Observation]:
        if not isinstance(series, pd.Series):
            raise SeriesFetchFailure(series_id, f"unexpected payload {type(series).__name__}")
        clean = pd.to_numeric(series, errors="coerce").dropna().sort_index().tail(count)
        if clean.empty:
            raise SeriesFetchFailure(series_id, "no observations returned")
        return [
            Observation(date=pd.Timestamp(idx).strftime("%Y-%m-%d"), value=float(value))
            for idx, value in clean.iloc[::-1].items()
        ]


class EIAObservationClient:
    """EIA API v2 weekly observations over the shared retrying session."""

    PROVIDER = "eia"
    BASE_URL = "https://api.eia.gov/v2"
    ROUTES = {
        "WCESTUS1": "petroleum/stoc/wstk",
        "NW2_EPG0_SWO_R48_BCF": "natural-gas/stor/wkly",
    }

    def __init__(
        self,
        api_key: str | None = None,
        session: requests.Session | None = None,
        log_file: Path | None = None,
    ) -> None:
        self.logger = setup_logger(self.__class__.__name__, log_file)
        self._api_key = api_key or Config.EIA_API_KEY
        self._session = session or create_session()
        self._limiter = get_rate_limiter(self.BASE_URL, Config.EIA_REQUESTS_PER_SECOND)

    def fetch(self, series_id: str, count: int = 3) -> list[Observation]:
        """Fetch the newest ``count`` weekly observations.

        Raises:
            SeriesFetchFailure: On missing key, unknown series, HTTP errors after
                retries, or a malformed payload.
        """
        if not self._api_key:
            raise SeriesFetchFailure(series_id, "EIA API key not configured")
        route = self.ROUTES.get(series_id)
        if route is None:
            raise SeriesFetchFailure(series_id, "no EIA route for series")

        params = {
            "api_key": self._api_key,
            "frequency": "weekly",
            "data[0]": "value",
            "facets[series][]": series_id,
            "sort[0][column]": "period",
            "sort[0][direction]": "desc",
            "length": count,
        }
        self._limiter.acquire()
        try:
            response = self._session.get(
                f"{self.BASE_URL}/{route}/data/", params=params, timeout=Config.REQUEST_TIMEOUT
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise SeriesFetchFailure(series_id, str(e)) from e

        rows = (payload.get("response") or {}).get("data") if isinstance(payload, dict) else None
        if not isinstance(rows, list) or not rows:
            raise SeriesFetchFailure(series_id, "malformed EIA payload")

        observations = []
        for row in rows[:count]:
            try:
                observations.append(Observation(date=str(row["period"]), value=float(row["value"])))
            except (KeyError, TypeError, ValueError) as e:
                raise SeriesFetchFailure(series_id, f"malformed EIA row {row!r}") from e
        return observations
