"""Loader for the versioned schedule tables shipped in ``econ_timeline/data``.

Tables are JSON documents validated at load time, so an edit that breaks the
format fails loudly instead of silently dropping meetings.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from econ_timeline.shared.validate import (
    validate_dated_entries,
    validate_meeting_table,
    validate_schedule_header,
    validate_symposium_entries,
)

SCHEDULES_DIR = Path(__file__).resolve().parents[2] / "data" / "schedules"


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Schedule table not found: {path}")
    with path.open(encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Schedule table {path.name} is not valid JSON: {e}") from e


@lru_cache(maxsize=None)
def _load_meeting_table_cached(path: Path) -> dict[str, Any]:
    table = _read_json(path)
    validate_meeting_table(table, path.stem)
    return table


def load_meeting_table(name: str, directory: Path | None = None) -> dict[str, Any]:
    """Load and validate a central bank meeting table.

    Args:
        name: Table name (file stem), e.g. "fomc".
        directory: Override for the schedules directory.

    Returns:
        The validated table.

    Raises:
        FileNotFoundError: If the table does not exist.
        ValueError: If the table is malformed.
        TypeError: If a field has the wrong type.
    """
    return _load_meeting_table_cached((directory or SCHEDULES_DIR) / f"{name}.json")


def load_fed_events_table(directory: Path | None = None) -> dict[str, Any]:
    """Load and validate the Fed events table (Jackson Hole, testimony)."""
    path = (directory or SCHEDULES_DIR) / "fed_events.json"
    table = _read_json(path)
    validate_schedule_header(table, path.stem)
    validate_symposium_entries(table.get("jacksonHole"), "fed_events.jacksonHole")
    validate_dated_entries(
        table.get("testimony"), "fed_events.testimony", {"time": str, "chamber": str}
    )
    beige_book = table.get("beigeBook")
    if not isinstance(beige_book, dict) or not {"title", "time"} <= set(beige_book):
        raise ValueError("fed_events.beigeBook must define 'title' and 'time'")
    return table


def load_release_table(name: str, directory: Path | None = None) -> dict[str, Any]:
    """Load and validate a single-title release table (e.g. ``steo``)."""
    path = (directory or SCHEDULES_DIR) / f"{name}.json"
    table = _read_json(path)
    validate_schedule_header(table, path.stem)
    validate_dated_entries(table.get("releases"), f"{name}.releases", {})
    if not isinstance(table.get("title"), str) or not isinstance(table.get("time"), str):
        raise ValueError(f"{name} must define 'title' and 'time'")
    return table
