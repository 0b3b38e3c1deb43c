"""Economic calendar build script.

Modes:
    Full rebuild (default): collect all providers, enrich with series data,
    publish the snapshot.

    --no-data: full rebuild without series data.

    --data-only: quick refresh of the existing snapshot's data values. Exits
    with status 1 if no snapshot exists yet.

    --source NAME: rebuild from a single provider (debugging).

Usage:
    python scripts/build_calendar.py
    python scripts/build_calendar.py --no-data
    python scripts/build_calendar.py --data-only
    python scripts/build_calendar.py --source fomc --no-data
    python scripts/build_calendar.py --output client/public/calendar-data.json
    python scripts/build_calendar.py --health-check

Example:
    $ python scripts/build_calendar.py --no-data
    [INFO] Building calendar (full-no-data) from 2026-07-17 to 2027-04-17
    [INFO] fred: 412 events
    [INFO] fomc: 14 events
    ...
    [INFO] Wrote 1187 events to data/calendar-data.json
"""

import argparse
import sys
from datetime import date
from pathlib import Path

from econ_timeline.enrichment.data_enricher import DataEnricher
from econ_timeline.ingestion.preprocessors import EventNormalizer, IndicatorCatalog
from econ_timeline.pipelines.calendar.orchestrator import (
    PROVIDER_NAMES,
    CalendarOrchestrator,
    build_default_registry,
)
from econ_timeline.publishing.snapshot_publisher import SnapshotPublisher
from econ_timeline.shared.config import Config
from econ_timeline.shared.errors import FatalRunFailure
from econ_timeline.shared.utils import setup_logger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Build the consolidated economic calendar snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--no-data",
        action="store_true",
        help="Rebuild the calendar without fetching series data",
    )
    mode.add_argument(
        "--data-only",
        action="store_true",
        help="Only refresh data values in the existing snapshot",
    )

    parser.add_argument(
        "--source",
        choices=PROVIDER_NAMES,
        help="Run a single provider",
    )

    parser.add_argument(
        "--output",
        type=Path,
        action="append",
        default=[],
        metavar="PATH",
        help=f"Additional snapshot destination (repeatable). Primary: {Config.SNAPSHOT_PATH}",
    )

    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        metavar="YYYY-MM-DD",
        help="Reference date for the collection window. Default: today",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run provider health checks and exit",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)
    if args.data_only and args.source:
        parser.error("--data-only refreshes the whole snapshot and cannot be combined with --source")
    return args


def build_orchestrator(args: argparse.Namespace, log_file: Path | None = None) -> CalendarOrchestrator:
    """Wire collectors, services and publisher from CLI arguments."""
    catalog = IndicatorCatalog()
    Config.SNAPSHOT_PATH.parent.mkdir(parents=True, exist_ok=True)

    enricher = None
    if not args.no_data:
        enricher = DataEnricher(catalog=catalog, log_file=log_file)

    return CalendarOrchestrator(
        collectors=build_default_registry(today=args.date, log_file=log_file),
        normalizer=EventNormalizer(catalog=catalog, log_file=log_file),
        enricher=enricher,
        publisher=SnapshotPublisher(Config.output_paths(args.output), log_file=log_file),
        today=args.date,
        manifest_dir=Config.DATA_DIR / "manifests",
        log_file=log_file,
    )


def main(argv: list[str] | None = None) -> int:
    """Main build script."""
    args = parse_args(argv)

    log_file = Config.LOGS_DIR / "calendar_pipeline.log"
    logger = setup_logger(
        "build_calendar",
        log_file=log_file,
        level="DEBUG" if args.verbose else "INFO",
    )

    try:
        orchestrator = build_orchestrator(args, log_file=log_file)

        if args.health_check:
            results = orchestrator.health_check(args.source)
            failed = [name for name, ok in results.items() if not ok]
            if failed:
                logger.error("Health check failed for: %s", ", ".join(failed))
                return 1
            logger.info("Health check: PASSED")
            return 0

        if not args.no_data and not Config.FRED_API_KEY:
            logger.warning("FRED_API_KEY not set; FRED schedules and series data will be skipped")

        logger.info("=" * 60)
        if args.data_only:
            logger.info("Quick refresh: data values only")
            logger.info("=" * 60)
            result = orchestrator.refresh()
        else:
            logger.info("Calendar build")
            logger.info("=" * 60)
            result = orchestrator.run(source=args.source, include_data=not args.no_data)

        for failure in result.provider_failures:
            logger.warning("Provider failed: %s", failure)
        if result.series_failures:
            logger.warning(
                "%d series could not be fetched: %s",
                len(result.series_failures),
                ", ".join(f.series_id for f in result.series_failures),
            )

        logger.info("=" * 60)
        logger.info("✓ %d events written to %d destination(s)", result.event_count, len(result.written_paths))
        logger.info("=" * 60)
        return 0

    except FatalRunFailure as e:
        logger.error("Calendar run failed: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
