"""Economic calendar pipeline."""

from econ_timeline.pipelines.calendar.orchestrator import (
    PROVIDER_NAMES,
    CalendarOrchestrator,
    RunResult,
    build_default_registry,
)

__all__ = ["CalendarOrchestrator", "PROVIDER_NAMES", "RunResult", "build_default_registry"]
