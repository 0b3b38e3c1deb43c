"""Build the economic calendar snapshot.

Thin wrapper around econ_timeline.pipelines.calendar.run_calendar_pipeline;
see that module for modes and options.

Usage:
    python scripts/build_calendar.py [--no-data | --data-only] [--source NAME]
"""

import sys

from econ_timeline.pipelines.calendar.run_calendar_pipeline import main

if __name__ == "__main__":
    sys.exit(main())
