"""
Root pytest configuration.

Shared fixtures for schedule collectors, enrichment and publishing tests.
Nothing here touches the network: HTTP sessions and upstream clients are
mocks, and every test gets its own data and log directories.
"""

from datetime import date, datetime
from unittest.mock import Mock

import pytest
import pytz

from econ_timeline.enrichment.series_mapping import Observation
from econ_timeline.shared.http import reset_rate_limiters
from econ_timeline.shared.schema import ReleaseEvent


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path, monkeypatch):
    """Point data, snapshot and log paths at a per-test temp directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr("econ_timeline.shared.config.Config.DATA_DIR", data_dir)
    monkeypatch.setattr(
        "econ_timeline.shared.config.Config.SNAPSHOT_PATH", data_dir / "calendar-data.json"
    )
    monkeypatch.setattr("econ_timeline.shared.config.Config.EXTRA_OUTPUT_PATHS", [])
    monkeypatch.setattr("econ_timeline.shared.config.Config.LOGS_DIR", tmp_path / "logs")
    return data_dir


@pytest.fixture(autouse=True)
def fresh_rate_limiters():
    reset_rate_limiters()
    yield
    reset_rate_limiters()


@pytest.fixture
def fixed_now():
    """Reference clock: 2025-06-15 12:00 UTC."""
    return datetime(2025, 6, 15, 12, 0, tzinfo=pytz.UTC)


@pytest.fixture
def make_event():
    """Factory for ReleaseEvent with sensible defaults."""

    def _make(title="CPI m/m", day="2025-06-11", time="12:30", **kwargs):
        kwargs.setdefault("impact", "high")
        kwargs.setdefault("source", "fred")
        return ReleaseEvent(date=day, time=time, title=title, **kwargs)

    return _make


@pytest.fixture
def json_response():
    """Factory for a mocked requests.Response carrying a JSON payload."""

    def _make(payload, status_code=200):
        response = Mock()
        response.status_code = status_code
        response.json.return_value = payload
        response.raise_for_status.return_value = None
        return response

    return _make


@pytest.fixture
def observations():
    """Factory: values newest first -> Observation list with monthly dates."""

    def _make(*values):
        months = [date(2025, 5, 1), date(2025, 4, 1), date(2025, 3, 1), date(2025, 2, 1)]
        return [Observation(months[i].isoformat(), float(v)) for i, v in enumerate(values)]

    return _make
