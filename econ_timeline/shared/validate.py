"""Validation for release events, schedule tables and snapshots.

Validators raise ValueError (bad values) or TypeError (bad types) and never
coerce or fill anything.
"""

from typing import Any

from econ_timeline.shared.schema import (
    IMPACTS,
    SNAPSHOT_SCHEMA,
    TIME_SENTINELS,
    ReleaseEvent,
)
from econ_timeline.shared.utils import parse_clock, parse_iso_date

# ---------------------------------------------------------------
# Schedule tables (versioned JSON under econ_timeline/data/schedules)
# ---------------------------------------------------------------

SCHEDULE_TABLE_SCHEMA = {
    "version": int,
    "name": str,
    "timezone": str,
    "sourceUrl": str,
    "currency": str,
    "country": str,
    "source": str,
}

MEETING_TABLE_SCHEMA = {
    **SCHEDULE_TABLE_SCHEMA,
    "titles": dict,
    "times": dict,
    "minutesLagDays": int,
    "meetings": list,
}

MEETING_SCHEMA = {
    "date": str,
    "pressConference": bool,
    "projections": bool,
}

OPTIONAL_MEETING_FIELDS = {
    "minutesReleaseDate": str,
    "tentative": bool,
}

MEETING_TITLE_KEYS = ("decision", "pressConference", "projections", "minutes")
SUPPORTED_TABLE_VERSIONS = {1}


def _check_fields(obj: Any, schema: dict[str, type], where: str) -> None:
    if not isinstance(obj, dict):
        raise TypeError(f"{where} must be an object, got {type(obj).__name__}")
    missing = set(schema) - set(obj)
    if missing:
        raise ValueError(f"{where} is missing fields: {sorted(missing)}")
    for key, expected in schema.items():
        # bool is an int subclass; keep version/lag fields strictly numeric
        value = obj[key]
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise TypeError(f"{where}.{key} must be {expected.__name__}")


def _check_date(value: Any, where: str) -> None:
    if parse_iso_date(value) is None:
        raise ValueError(f"{where} is not an ISO date (YYYY-MM-DD): {value!r}")


def _check_clock(value: Any, where: str) -> None:
    if not isinstance(value, str) or parse_clock(value) is None:
        raise ValueError(f"{where} is not an HH:MM time: {value!r}")


def validate_schedule_header(table: Any, name: str) -> None:
    """Validate the header fields shared by every schedule table."""
    _check_fields(table, SCHEDULE_TABLE_SCHEMA, name)
    if table["version"] not in SUPPORTED_TABLE_VERSIONS:
        raise ValueError(f"{name}: unsupported table version {table['version']}")


def validate_meeting_table(table: Any, name: str) -> None:
    """Validate a central bank meeting table.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If a field is missing or malformed.
    """
    validate_schedule_header(table, name)
    _check_fields(table, MEETING_TABLE_SCHEMA, name)

    missing_titles = set(MEETING_TITLE_KEYS) - set(table["titles"])
    if missing_titles:
        raise ValueError(f"{name}.titles is missing: {sorted(missing_titles)}")
    for key in MEETING_TITLE_KEYS:
        if key not in table["times"]:
            raise ValueError(f"{name}.times is missing '{key}'")
        _check_clock(table["times"][key], f"{name}.times.{key}")
    if table["minutesLagDays"] < 0:
        raise ValueError(f"{name}.minutesLagDays must be non-negative")

    seen: set[str] = set()
    for index, meeting in enumerate(table["meetings"]):
        where = f"{name}.meetings[{index}]"
        _check_fields(meeting, MEETING_SCHEMA, where)
        _check_date(meeting["date"], f"{where}.date")
        if meeting["date"] in seen:
            raise ValueError(f"{where}: duplicate meeting date {meeting['date']}")
        seen.add(meeting["date"])
        for key, expected in OPTIONAL_MEETING_FIELDS.items():
            if key in meeting and not isinstance(meeting[key], expected):
                raise TypeError(f"{where}.{key} must be {expected.__name__}")
        if "minutesReleaseDate" in meeting:
            _check_date(meeting["minutesReleaseDate"], f"{where}.minutesReleaseDate")
            if meeting["minutesReleaseDate"] <= meeting["date"]:
                raise ValueError(f"{where}: minutes must be released after the meeting")


def validate_dated_entries(entries: Any, where: str, fields: dict[str, type]) -> None:
    """Validate a list of ``{"date": ..., ...}`` entries in a schedule table."""
    if not isinstance(entries, list):
        raise TypeError(f"{where} must be a list")
    for index, entry in enumerate(entries):
        _check_fields(entry, {"date": str, **fields}, f"{where}[{index}]")
        _check_date(entry["date"], f"{where}[{index}].date")
        if "time" in entry:
            _check_clock(entry["time"], f"{where}[{index}].time")


def validate_symposium_entries(entries: Any, where: str) -> None:
    """Validate Jackson Hole rows: Chair speech date plus symposium start."""
    validate_dated_entries(entries, where, {"time": str, "start": str, "startTime": str})
    for index, entry in enumerate(entries):
        _check_date(entry["start"], f"{where}[{index}].start")
        _check_clock(entry["startTime"], f"{where}[{index}].startTime")
        if entry["start"] > entry["date"]:
            raise ValueError(f"{where}[{index}]: symposium cannot start after the Chair speech")


# ---------------------------------------------------------------
# Events and snapshots
# ---------------------------------------------------------------


def event_issues(event: ReleaseEvent) -> list[str]:
    """List every invariant an event violates (empty when valid)."""
    issues = []
    if parse_iso_date(event.date) is None:
        issues.append(f"invalid date {event.date!r}")
    if event.time not in TIME_SENTINELS and parse_clock(event.time) is None:
        issues.append(f"invalid time {event.time!r}")
    if not event.title or not event.title.strip():
        issues.append("empty title")
    if event.impact not in IMPACTS:
        issues.append(f"invalid impact {event.impact!r}")
    if not event.source:
        issues.append("missing source")
    return issues


def validate_snapshot(snapshot: Any) -> None:
    """Validate a snapshot document read back from disk."""
    _check_fields(snapshot, {k: v for k, v in SNAPSHOT_SCHEMA.items() if k != "region"}, "snapshot")
    seen: set[tuple[str, str]] = set()
    for index, event in enumerate(snapshot["events"]):
        if not isinstance(event, dict):
            raise TypeError(f"snapshot.events[{index}] must be an object")
        for key in ("date", "title"):
            if key not in event:
                raise ValueError(f"snapshot.events[{index}] is missing '{key}'")
        key = (event["date"], event["title"])
        if key in seen:
            raise ValueError(f"snapshot has duplicate event {key}")
        seen.add(key)
