"""Configuration management for EconTimeline."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _split_paths(raw: str | None) -> list[Path]:
    if not raw:
        return []
    return [Path(p) for p in raw.split(os.pathsep) if p.strip()]


class Config:
    """Application configuration."""

    # Project paths
    ROOT_DIR = Path(__file__).parent.parent.parent
    DATA_DIR = Path(os.getenv("ECON_TIMELINE_DATA_DIR", str(ROOT_DIR / "data")))
    LOGS_DIR = ROOT_DIR / "logs"

    # Snapshot output
    SNAPSHOT_PATH = DATA_DIR / "calendar-data.json"
    EXTRA_OUTPUT_PATHS: list[Path] = _split_paths(os.getenv("CALENDAR_OUTPUT_PATHS"))
    SNAPSHOT_VERSION = "2.0"
    SNAPSHOT_REGION = "US"

    # API Keys
    FRED_API_KEY: str | None = os.getenv("FRED_API_KEY")
    EIA_API_KEY: str | None = os.getenv("EIA_API_KEY")

    # Calendar window (months relative to today)
    WINDOW_MONTHS_BACK: int = int(os.getenv("WINDOW_MONTHS_BACK", "3"))
    WINDOW_MONTHS_AHEAD: int = int(os.getenv("WINDOW_MONTHS_AHEAD", "6"))

    # HTTP settings
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))
    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))
    RETRY_BACKOFF: float = float(os.getenv("RETRY_BACKOFF", "1.0"))
    USER_AGENT = "EconTimeline/2.0 (Economic Calendar Aggregator)"

    # Enrichment throughput
    FRED_REQUESTS_PER_SECOND: float = float(os.getenv("FRED_REQUESTS_PER_SECOND", "2.0"))
    EIA_REQUESTS_PER_SECOND: float = float(os.getenv("EIA_REQUESTS_PER_SECOND", "1.0"))
    FETCH_WORKERS: int = int(os.getenv("FETCH_WORKERS", "4"))

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not cls.FRED_API_KEY:
            raise ValueError("FRED_API_KEY not set in environment")
        if cls.WINDOW_MONTHS_BACK < 0 or cls.WINDOW_MONTHS_AHEAD < 0:
            raise ValueError("Calendar window months must be non-negative")
        if cls.FETCH_WORKERS < 1:
            raise ValueError("FETCH_WORKERS must be at least 1")

    @classmethod
    def output_paths(cls, extra: list[Path] | None = None) -> list[Path]:
        """Primary snapshot path followed by any configured extra destinations."""
        paths = [cls.SNAPSHOT_PATH, *cls.EXTRA_OUTPUT_PATHS, *(extra or [])]
        unique: list[Path] = []
        for path in paths:
            if path not in unique:
                unique.append(path)
        return unique


config = Config()
