"""Snapshot publisher.

Serializes the consolidated calendar and writes it to one or more
destinations. Each destination is independent:

- a destination whose directory does not exist is skipped
- a write error is logged and the remaining destinations are still written
- the run fails only if no destination could be written

Writes go to a temporary file next to the target and are moved into place,
so readers never observe a half-written snapshot.
"""

import json
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from econ_timeline.shared.config import Config
from econ_timeline.shared.errors import FatalRunFailure
from econ_timeline.shared.schema import ReleaseEvent
from econ_timeline.shared.utils import setup_logger, utc_now_iso
from econ_timeline.shared.validate import validate_snapshot


class SnapshotPublisher:
    """Build and write calendar snapshots."""

    def __init__(self, destinations: Iterable[Path] | None = None, log_file: Path | None = None) -> None:
        """Initialize the publisher.

        Args:
            destinations: Output file paths (defaults to Config.output_paths()).
            log_file: Optional path for file-based logging.
        """
        self.destinations = list(destinations) if destinations is not None else Config.output_paths()
        self.logger = setup_logger(self.__class__.__name__, log_file)

    @staticmethod
    def build_snapshot(
        events: Iterable[ReleaseEvent],
        sources: Iterable[str],
        data_included: bool,
    ) -> dict[str, Any]:
        """Assemble the snapshot document.

        Args:
            events: Sorted, deduplicated events.
            sources: Provider names that were run.
            data_included: Whether enrichment ran.

        Returns:
            Snapshot dict ready for JSON serialization.
        """
        return {
            "lastUpdated": utc_now_iso(),
            "version": Config.SNAPSHOT_VERSION,
            "region": Config.SNAPSHOT_REGION,
            "sources": list(sources),
            "dataIncluded": data_included,
            "events": [event.to_dict() for event in events],
        }

    def publish(self, snapshot: dict[str, Any]) -> list[Path]:
        """Write the snapshot to every reachable destination.

        Returns:
            Paths that were written.

        Raises:
            FatalRunFailure: If no destination could be written.
        """
        payload = json.dumps(snapshot, indent=2, ensure_ascii=False)
        written = []
        for path in self.destinations:
            if not path.parent.is_dir():
                self.logger.info("Skipping %s: directory does not exist", path)
                continue
            try:
                self._write_atomic(path, payload)
            except OSError as e:
                self.logger.error("Failed to write snapshot to %s: %s", path, e)
                continue
            self.logger.info("Wrote %d events to %s", len(snapshot.get("events", [])), path)
            written.append(path)

        if not written:
            raise FatalRunFailure(
                f"Snapshot could not be written to any of {len(self.destinations)} destination(s)"
            )
        return written

    @staticmethod
    def _write_atomic(path: Path, payload: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.write("\n")
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load_snapshot(self, path: Path | None = None) -> dict[str, Any]:
        """Read the existing snapshot (defaults to the primary destination).

        Raises:
            FatalRunFailure: If the snapshot is missing, unreadable or malformed.
        """
        path = path or self.destinations[0]
        if not path.exists():
            raise FatalRunFailure(f"No existing snapshot at {path}; run a full build first")
        try:
            with path.open(encoding="utf-8") as f:
                snapshot = json.load(f)
            validate_snapshot(snapshot)
        except (OSError, ValueError, TypeError) as e:
            raise FatalRunFailure(f"Existing snapshot at {path} is unusable: {e}") from e
        return snapshot
