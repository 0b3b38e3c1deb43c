"""Tests for the data enrichment service."""

import copy
import http.client
import threading
from datetime import datetime

import pytest
import pytz

from econ_timeline.enrichment.data_enricher import DataEnricher, resolve_actual_previous
from econ_timeline.enrichment.series_mapping import Observation, SeriesReading
from econ_timeline.ingestion.preprocessors.indicator_catalog import IndicatorCatalog
from econ_timeline.shared.errors import SeriesFetchFailure
from econ_timeline.shared.schema import DATA_FIELDS

SAMPLE_OBSERVATIONS = {
    "CPIAUCSL": [
        Observation("2025-05-01", 320.0),
        Observation("2025-04-01", 319.04),
        Observation("2025-03-01", 318.4),
    ],
    "UNRATE": [
        Observation("2025-05-01", 4.2),
        Observation("2025-04-01", 4.1),
        Observation("2025-03-01", 4.0),
    ],
}


class FakeObservationClient:
    """Serves canned observations and records every fetch."""

    PROVIDER = "fred"

    def __init__(self, data):
        self.data = data
        self.calls = []
        self.counts = {}
        self._lock = threading.Lock()

    def fetch(self, series_id, count=3):
        with self._lock:
            self.calls.append(series_id)
            self.counts[series_id] = count
        if series_id not in self.data:
            raise SeriesFetchFailure(series_id, "Bad Request.  The series does not exist.")
        return self.data[series_id][:count]


class TruncatingObservationClient(FakeObservationClient):
    """Fails one series with a transport-level error."""

    def __init__(self, data, broken):
        super().__init__(data)
        self.broken = broken

    def fetch(self, series_id, count=3):
        if series_id == self.broken:
            raise http.client.IncompleteRead(b"4.2")
        return super().fetch(series_id, count)


@pytest.fixture(scope="module")
def catalog():
    return IndicatorCatalog()


@pytest.fixture
def client():
    return FakeObservationClient(SAMPLE_OBSERVATIONS)


@pytest.fixture
def enricher(catalog, client, fixed_now):
    return DataEnricher(
        catalog=catalog,
        clients={"fred": client, "eia": client},
        max_workers=4,
        clock=lambda: fixed_now,
    )


class TestResolveActualPrevious:
    """Test the released/upcoming split."""

    READING = SeriesReading("UNRATE", "4.2%", "4.1%", "2025-05-01", "2025-04-01")

    def test_released(self, fixed_now):
        assert resolve_actual_previous("2025-06-06", "12:30", self.READING, fixed_now) == ("4.2%", "4.1%")

    def test_upcoming(self, fixed_now):
        assert resolve_actual_previous("2025-07-03", "12:30", self.READING, fixed_now) == (None, "4.2%")

    def test_exactly_now_counts_as_released(self, fixed_now):
        assert resolve_actual_previous("2025-06-15", "12:00", self.READING, fixed_now)[0] == "4.2%"

    def test_untimed_event_today(self, fixed_now):
        assert resolve_actual_previous("2025-06-15", "All Day", self.READING, fixed_now)[0] == "4.2%"

    def test_invalid_date_treated_as_upcoming(self, fixed_now):
        assert resolve_actual_previous("bad", "12:30", self.READING, fixed_now) == (None, "4.2%")


class TestEnrich:
    """Test full-run enrichment."""

    def test_released_and_upcoming_events(self, enricher, make_event):
        past = make_event(title="CPI m/m", day="2025-06-11")
        future = make_event(title="CPI m/m", day="2025-07-15")

        enricher.enrich([past, future])

        assert (past.actual, past.previous) == ("+0.3%", "+0.2%")
        assert (future.actual, future.previous) == (None, "+0.3%")
        assert past.series_id == "CPIAUCSL"
        assert past.latest_value == "+0.3%"
        assert past.latest_date == "2025-05-01"
        assert past.indicator_id == "us_cpi_mom"
        assert past.data_updated_at == "2025-06-15T12:00:00Z"

    def test_each_series_fetched_once(self, enricher, client, make_event):
        events = [make_event(title="CPI m/m", day=f"2025-0{m}-11") for m in range(1, 8)]
        events.append(make_event(title="Unemployment Rate", day="2025-06-06"))

        enricher.enrich(events)

        assert sorted(client.calls) == ["CPIAUCSL", "UNRATE"]

    def test_fetch_depth_follows_semantics(self, enricher, client, make_event):
        enricher.enrich([make_event(title="CPI m/m"), make_event(title="Unemployment Rate", day="2025-06-06")])

        assert client.counts == {"CPIAUCSL": 3, "UNRATE": 2}

    def test_failed_series_is_isolated(self, enricher, make_event):
        cpi = make_event(title="CPI m/m")
        nfp = make_event(title="Non-Farm Payrolls", day="2025-06-06")

        enricher.enrich([cpi, nfp])

        assert cpi.actual == "+0.3%"
        assert nfp.actual is None
        assert nfp.series_id is None
        assert [f.series_id for f in enricher.failures] == ["PAYEMS"]

    def test_unexpected_client_error_is_isolated(self, catalog, fixed_now, make_event):
        client = TruncatingObservationClient(SAMPLE_OBSERVATIONS, broken="UNRATE")
        enricher = DataEnricher(catalog=catalog, clients={"fred": client}, clock=lambda: fixed_now)
        cpi = make_event(title="CPI m/m")
        unrate = make_event(title="Unemployment Rate", day="2025-06-06")

        enricher.enrich([cpi, unrate])

        assert cpi.actual == "+0.3%"
        assert unrate.actual is None
        assert [f.series_id for f in enricher.failures] == ["UNRATE"]
        assert "IncompleteRead" in enricher.failures[0].message

    def test_unmapped_events_untouched(self, enricher, client, make_event):
        holiday = make_event(title="Juneteenth (Market Closed)", time="All Day", impact="holiday")

        enricher.enrich([holiday])

        assert holiday.actual is None
        assert holiday.data_updated_at is None
        assert client.calls == []

    def test_missing_client(self, catalog, fixed_now, make_event):
        enricher = DataEnricher(catalog=catalog, clients={}, clock=lambda: fixed_now)
        event = make_event(title="CPI m/m")

        enricher.enrich([event])

        assert event.actual is None
        assert "no client" in enricher.failures[0].message


class TestRefresh:
    """Test quick refresh of an existing snapshot."""

    def _snapshot(self):
        return {
            "lastUpdated": "2025-06-01T00:00:00.000Z",
            "version": "2.0",
            "region": "US",
            "sources": ["fred", "holidays"],
            "dataIncluded": False,
            "events": [
                {
                    "date": "2025-06-06",
                    "time": "12:30",
                    "title": "Unemployment Rate",
                    "impact": "high",
                    "indicatorId": "us_unemployment_rate",
                    "description": "Hand-edited description",
                    "customKey": 7,
                    "forecast": "4.2%",
                    "previous": None,
                    "actual": None,
                },
                {
                    "date": "2025-06-19",
                    "time": "All Day",
                    "title": "Juneteenth (Market Closed)",
                    "impact": "holiday",
                    "forecast": None,
                    "previous": None,
                    "actual": None,
                },
            ],
        }

    def test_patches_only_data_fields(self, enricher):
        original = self._snapshot()
        before = copy.deepcopy(original)

        refreshed = enricher.refresh(original)

        assert original == before
        unrate = refreshed["events"][0]
        assert (unrate["actual"], unrate["previous"]) == ("4.2%", "4.1%")
        assert unrate["latestValue"] == "4.2%"
        assert unrate["seriesId"] == "UNRATE"
        assert unrate["dataUpdatedAt"] == "2025-06-15T12:00:00Z"
        assert unrate["description"] == "Hand-edited description"
        assert unrate["customKey"] == 7
        assert unrate["forecast"] == "4.2%"
        assert refreshed["events"][1] == before["events"][1]

    def test_refresh_writes_only_data_fields(self, enricher):
        before = self._snapshot()

        refreshed = enricher.refresh(self._snapshot())

        old, new = before["events"][0], refreshed["events"][0]
        changed = {key for key in set(old) | set(new) if old.get(key) != new.get(key)}
        assert changed
        assert changed <= set(DATA_FIELDS)

    def test_malformed_snapshot_event_skipped(self, enricher):
        snapshot = self._snapshot()
        del snapshot["events"][0]["time"]

        refreshed = enricher.refresh(snapshot)

        assert refreshed["events"][0] == snapshot["events"][0]
        assert refreshed["dataIncluded"] is False

    def test_snapshot_metadata(self, enricher):
        refreshed = enricher.refresh(self._snapshot())

        assert refreshed["dataIncluded"] is True
        assert refreshed["dataRefreshedAt"] == "2025-06-15T12:00:00Z"
        assert refreshed["lastUpdated"] == "2025-06-15T12:00:00Z"
        assert refreshed["sources"] == ["fred", "holidays"]

    def test_identifies_events_without_indicator_id(self, enricher):
        snapshot = self._snapshot()
        del snapshot["events"][0]["indicatorId"]

        refreshed = enricher.refresh(snapshot)

        assert refreshed["events"][0]["latestValue"] == "4.2%"

    def test_nothing_patched(self, catalog, fixed_now):
        enricher = DataEnricher(
            catalog=catalog, clients={"fred": FakeObservationClient({})}, clock=lambda: fixed_now
        )
        refreshed = enricher.refresh(self._snapshot())

        assert refreshed["dataIncluded"] is False
        assert refreshed["events"][0]["actual"] is None
