"""Snapshot publishing."""

from econ_timeline.publishing.snapshot_publisher import SnapshotPublisher

__all__ = ["SnapshotPublisher"]
