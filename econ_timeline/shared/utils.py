"""Shared utility functions for EconTimeline."""

import logging
from datetime import date, datetime, time
from pathlib import Path

import pandas as pd
import pytz

TIME_FORMAT = "%H:%M"
DATE_FORMAT = "%Y-%m-%d"


def setup_logger(
    name: str, log_file: Path | None = None, level: int | str = logging.INFO
) -> logging.Logger:
    """Set up logger with console and file handlers.

    Calling this twice for the same name reuses the existing handlers.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int constant or string name like 'DEBUG', 'INFO')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Convert string level to int if needed
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        logger.setLevel(numeric_level)
    else:
        logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Console handler
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        target = str(log_file.resolve())
        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in logger.handlers
        ):
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def to_utc(dt: datetime, from_tz: str = "US/Eastern") -> datetime:
    """Convert datetime to UTC."""
    if dt.tzinfo is None:
        dt = pytz.timezone(from_tz).localize(dt)
    return dt.astimezone(pytz.UTC)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(pytz.UTC)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def local_to_utc_slot(day: date, clock: str, from_tz: str = "US/Eastern") -> tuple[date, str]:
    """Convert a local wall-clock release time to a UTC (date, "HH:MM") pair.

    Uses the zone's offset on that specific day, so 08:30 ET maps to 13:30 UTC
    in winter and 12:30 UTC in summer.

    Example:
        >>> local_to_utc_slot(date(2025, 7, 3), "08:30")
        (datetime.date(2025, 7, 3), '12:30')
    """
    local = datetime.combine(day, datetime.strptime(clock, TIME_FORMAT).time())
    utc_dt = to_utc(local, from_tz=from_tz)
    return utc_dt.date(), utc_dt.strftime(TIME_FORMAT)


def parse_clock(value: str | None) -> time | None:
    """Parse an ``HH:MM`` 24-hour clock string, returning None when invalid."""
    if not value:
        return None
    try:
        return datetime.strptime(value, TIME_FORMAT).time()
    except ValueError:
        return None


def parse_iso_date(value: str | None) -> date | None:
    """Parse a ``YYYY-MM-DD`` string, returning None when invalid."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping to the end of shorter months."""
    return (pd.Timestamp(day) + pd.DateOffset(months=months)).date()


def calendar_window(
    today: date, months_back: int, months_ahead: int
) -> tuple[date, date]:
    """Inclusive [start, end] collection window around today."""
    return add_months(today, -months_back), add_months(today, months_ahead)
