"""Abstract base class for all schedule collectors.

A collector turns one provider's knowledge (a REST API, a static meeting
table, or a recurrence rule) into ReleaseEvent records for a date window.

Contract:
- Every returned event falls inside the inclusive [start_date, end_date]
  window on its UTC date. The base class enforces this after generation.
- Every event carries the collector's SOURCE_NAME unless the provider set
  a more specific source.
- Times are UTC "HH:MM" or a sentinel ("All Day", "Tentative").

Normalization, metadata attachment and deduplication happen downstream in
the preprocessors, not here.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date
from pathlib import Path

from econ_timeline.shared.schema import ReleaseEvent
from econ_timeline.shared.utils import local_to_utc_slot, setup_logger


class BaseScheduleCollector(ABC):
    """Base class for all schedule collectors.

    Subclasses must define:
        SOURCE_NAME (str): provenance tag written on every event (e.g. "fred").

    Subclasses must implement:
        _generate(): produce candidate events for a date range.
        health_check(): verify the source is usable.
    """

    SOURCE_NAME: str
    TIMEZONE = "US/Eastern"
    CURRENCY = "USD"
    COUNTRY = "US"

    def __init__(self, log_file: Path | None = None) -> None:
        """Initialize the collector.

        Args:
            log_file: Optional path for file-based logging.
        """
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def collect(self, start_date: date, end_date: date) -> list[ReleaseEvent]:
        """Collect all events for the inclusive window.

        Args:
            start_date: First day of the window.
            end_date: Last day of the window.

        Returns:
            Events whose date falls inside the window.

        Raises:
            ValueError: If start_date is after end_date.
        """
        if start_date > end_date:
            raise ValueError(f"start_date ({start_date}) must be before end_date ({end_date})")

        start_iso, end_iso = start_date.isoformat(), end_date.isoformat()
        events = []
        for event in self._generate(start_date, end_date):
            if start_iso <= event.date <= end_iso:
                if not event.source:
                    event.source = self.SOURCE_NAME
                events.append(event)

        self.logger.info(
            "Collected %d %s events between %s and %s",
            len(events),
            self.SOURCE_NAME,
            start_iso,
            end_iso,
        )
        return events

    @abstractmethod
    def _generate(self, start_date: date, end_date: date) -> Iterable[ReleaseEvent]:
        """Yield candidate events; may overshoot the window by a few days."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Verify the source is reachable or its tables load.

        Returns:
            True if the source is available, False otherwise.
        """
        ...

    def _event(
        self,
        day: date,
        local_time: str | None,
        title: str,
        impact: str,
        category: str,
        source_url: str | None = None,
        timezone: str | None = None,
        currency: str | None = None,
        country: str | None = None,
        **extra,
    ) -> ReleaseEvent:
        """Build an event from a local release time.

        ``local_time=None`` produces an "All Day" event on ``day``; otherwise
        the wall-clock time in ``timezone`` is converted to a UTC slot.
        """
        if local_time is None:
            event_date, event_time = day, "All Day"
        else:
            event_date, event_time = local_to_utc_slot(day, local_time, timezone or self.TIMEZONE)
        return ReleaseEvent(
            date=event_date.isoformat(),
            time=event_time,
            title=title,
            impact=impact,
            category=category,
            currency=currency or self.CURRENCY,
            country=country or self.COUNTRY,
            source=self.SOURCE_NAME,
            source_url=source_url,
            extra=extra,
        )
