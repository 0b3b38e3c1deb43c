"""Tests for snapshot building and publishing."""

import json
from unittest.mock import patch

import pytest

from econ_timeline.publishing.snapshot_publisher import SnapshotPublisher
from econ_timeline.shared.errors import FatalRunFailure


@pytest.fixture
def snapshot(make_event):
    events = [make_event(), make_event(title="PPI m/m", day="2025-06-12")]
    return SnapshotPublisher.build_snapshot(events, ["fred"], data_included=False)


class TestBuildSnapshot:
    def test_document_shape(self, snapshot):
        assert set(snapshot) == {"lastUpdated", "version", "region", "sources", "dataIncluded", "events"}
        assert snapshot["version"] == "2.0"
        assert snapshot["region"] == "US"
        assert snapshot["sources"] == ["fred"]
        assert snapshot["dataIncluded"] is False
        assert snapshot["lastUpdated"].endswith("Z")
        assert [e["title"] for e in snapshot["events"]] == ["CPI m/m", "PPI m/m"]


class TestPublish:
    """Test multi-destination atomic writes."""

    def test_writes_every_destination(self, tmp_path, snapshot):
        (tmp_path / "client").mkdir()
        targets = [tmp_path / "calendar-data.json", tmp_path / "client" / "calendar-data.json"]

        written = SnapshotPublisher(targets).publish(snapshot)

        assert written == targets
        for target in targets:
            assert json.loads(target.read_text(encoding="utf-8")) == snapshot
        assert not list(tmp_path.glob("**/*.tmp"))

    def test_missing_directory_skipped(self, tmp_path, snapshot):
        present = tmp_path / "calendar-data.json"
        missing = tmp_path / "not-there" / "calendar-data.json"

        written = SnapshotPublisher([missing, present]).publish(snapshot)

        assert written == [present]
        assert not missing.parent.exists()

    def test_write_error_does_not_block_others(self, tmp_path, snapshot):
        targets = [tmp_path / "a.json", tmp_path / "b.json"]

        with patch.object(SnapshotPublisher, "_write_atomic", side_effect=[OSError("disk full"), None]):
            written = SnapshotPublisher(targets).publish(snapshot)

        assert written == [targets[1]]

    def test_no_destination_written_is_fatal(self, tmp_path, snapshot):
        publisher = SnapshotPublisher([tmp_path / "missing" / "calendar-data.json"])
        with pytest.raises(FatalRunFailure, match="could not be written"):
            publisher.publish(snapshot)

    def test_overwrites_existing(self, tmp_path, snapshot):
        target = tmp_path / "calendar-data.json"
        target.write_text("stale")

        SnapshotPublisher([target]).publish(snapshot)

        assert json.loads(target.read_text())["events"][0]["title"] == "CPI m/m"

    def test_defaults_to_config_paths(self, isolated_paths):
        assert SnapshotPublisher().destinations == [isolated_paths / "calendar-data.json"]


class TestLoadSnapshot:
    """Test reading the existing snapshot for quick refresh."""

    def test_round_trip(self, tmp_path, snapshot):
        target = tmp_path / "calendar-data.json"
        publisher = SnapshotPublisher([target])
        publisher.publish(snapshot)

        assert publisher.load_snapshot() == snapshot

    def test_missing(self, tmp_path):
        with pytest.raises(FatalRunFailure, match="run a full build first"):
            SnapshotPublisher([tmp_path / "calendar-data.json"]).load_snapshot()

    def test_corrupt_json(self, tmp_path):
        target = tmp_path / "calendar-data.json"
        target.write_text("{not json")
        with pytest.raises(FatalRunFailure, match="unusable"):
            SnapshotPublisher([target]).load_snapshot()

    def test_wrong_shape(self, tmp_path):
        target = tmp_path / "calendar-data.json"
        target.write_text(json.dumps({"events": []}))
        with pytest.raises(FatalRunFailure, match="unusable"):
            SnapshotPublisher([target]).load_snapshot()
