"""Tests for the table-driven central bank collector."""

import json
from datetime import date

import pytest

from econ_timeline.ingestion.collectors.central_bank_collector import CentralBankCollector
from econ_timeline.ingestion.collectors.schedule_tables import load_meeting_table


class TestBundledTables:
    """The shipped tables load and validate."""

    @pytest.mark.parametrize("name", ["fomc", "ecb"])
    def test_table_loads(self, name):
        table = load_meeting_table(name)
        assert table["name"] == name
        assert len(table["meetings"]) >= 16

    def test_fomc_2026_meetings(self):
        dates = [m["date"] for m in load_meeting_table("fomc")["meetings"] if m["date"].startswith("2026")]
        assert dates == [
            "2026-01-28",
            "2026-03-18",
            "2026-04-29",
            "2026-06-17",
            "2026-07-29",
            "2026-09-16",
            "2026-10-28",
            "2026-12-09",
        ]


class TestFOMC:
    """Test FOMC meeting expansion."""

    def test_projection_meeting(self):
        collector = CentralBankCollector("fomc")
        events = collector.collect(date(2025, 6, 1), date(2025, 6, 30))

        assert {(e.title, e.date, e.time) for e in events} == {
            ("FOMC Rate Decision", "2025-06-18", "18:00"),
            ("FOMC Economic Projections", "2025-06-18", "18:00"),
            ("Fed Chair Press Conference", "2025-06-18", "18:30"),
        }
        assert all(e.source == "fed" for e in events)
        assert all(e.category == "central_bank" for e in events)
        assert all(e.impact == "high" for e in events)

    def test_minutes_emitted_without_meeting_in_window(self):
        collector = CentralBankCollector("fomc")
        events = collector.collect(date(2025, 7, 1), date(2025, 7, 15))

        assert len(events) == 1
        minutes = events[0]
        assert minutes.title == "FOMC Meeting Minutes"
        assert minutes.date == "2025-07-09"
        assert minutes.impact == "medium"
        assert minutes.extra["meetingDate"] == "2025-06-18"

    def test_winter_meeting_time(self):
        collector = CentralBankCollector("fomc")
        events = collector.collect(date(2026, 1, 28), date(2026, 1, 28))
        decision = next(e for e in events if e.title == "FOMC Rate Decision")
        assert decision.time == "19:00"

    def test_tentative_meetings_flagged(self):
        collector = CentralBankCollector("fomc")
        events = collector.collect(date(2027, 1, 1), date(2027, 1, 31))
        assert events
        assert all(e.extra.get("tentative") is True for e in events)

    def test_health_check(self):
        assert CentralBankCollector("fomc").health_check() is True


class TestECB:
    """Test ECB meeting expansion."""

    def test_july_2025(self):
        collector = CentralBankCollector("ecb")
        events = collector.collect(date(2025, 7, 1), date(2025, 7, 31))

        by_title = {e.title: e for e in events}
        assert set(by_title) == {
            "ECB Monetary Policy Meeting Accounts",
            "ECB Interest Rate Decision",
            "ECB Press Conference",
        }
        assert by_title["ECB Interest Rate Decision"].time == "12:15"
        assert by_title["ECB Monetary Policy Meeting Accounts"].date == "2025-07-03"
        assert all(e.currency == "EUR" and e.country == "EU" for e in events)
        assert collector.SOURCE_NAME == "ecb"


class TestCustomTable:
    """Test table overrides and failure modes."""

    def _write(self, directory, name, meetings, lag=21):
        table = {
            "version": 1,
            "name": name,
            "source": "boe",
            "sourceUrl": "https://www.bankofengland.co.uk/monetary-policy",
            "timezone": "Europe/London",
            "currency": "GBP",
            "country": "GB",
            "titles": {
                "decision": "BoE Rate Decision",
                "pressConference": "BoE Press Conference",
                "projections": "BoE Monetary Policy Report",
                "minutes": "BoE MPC Minutes",
            },
            "times": {"decision": "12:00", "pressConference": "12:30", "projections": "12:00", "minutes": "12:00"},
            "minutesLagDays": lag,
            "meetings": meetings,
        }
        (directory / f"{name}.json").write_text(json.dumps(table))

    def test_minutes_lag_without_explicit_date(self, tmp_path):
        self._write(tmp_path, "boe", [{"date": "2025-02-06", "pressConference": False, "projections": False}], lag=14)
        collector = CentralBankCollector("boe", tables_dir=tmp_path)

        events = collector.collect(date(2025, 2, 1), date(2025, 2, 28))

        assert [(e.title, e.date) for e in events] == [
            ("BoE Rate Decision", "2025-02-06"),
            ("BoE MPC Minutes", "2025-02-20"),
        ]
        assert events[0].time == "12:00"
        assert events[0].currency == "GBP"
        assert events[0].source == "boe"

    def test_malformed_table_raises(self, tmp_path):
        self._write(tmp_path, "broken", [{"date": "2025-02-06"}])
        collector = CentralBankCollector("broken", tables_dir=tmp_path)

        with pytest.raises(ValueError, match="missing fields"):
            collector.collect(date(2025, 2, 1), date(2025, 2, 28))
        assert collector.health_check() is False

    def test_missing_table(self, tmp_path):
        collector = CentralBankCollector("nope", tables_dir=tmp_path)
        assert collector.health_check() is False

    def test_inverted_window(self):
        with pytest.raises(ValueError, match="must be before"):
            CentralBankCollector("fomc").collect(date(2025, 2, 1), date(2025, 1, 1))
