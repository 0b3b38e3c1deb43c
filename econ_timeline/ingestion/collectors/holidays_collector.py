"""US equity market holiday collector (NYSE schedule).

Full closures:
    New Year's Day, Martin Luther King Jr. Day, Presidents' Day, Good Friday,
    Memorial Day, Juneteenth, Independence Day, Labor Day, Thanksgiving,
    Christmas.

Fixed-date holidays use weekend observance (Saturday -> Friday,
Sunday -> Monday). A Saturday New Year's Day is not observed: the exchange
does not close on the last trading day of the prior year.

Early closes (13:00 ET): July 3, the day after Thanksgiving and December 24,
when each is a weekday that is not itself a full closure.
"""

from collections.abc import Iterator
from datetime import date, timedelta

from econ_timeline.ingestion.collectors.base_collector import BaseScheduleCollector
from econ_timeline.ingestion.collectors.calendar_math import (
    FRIDAY,
    LAST,
    MONDAY,
    SATURDAY,
    THURSDAY,
    good_friday,
    nth_weekday,
    observed_date,
)
from econ_timeline.shared.schema import ReleaseEvent

EARLY_CLOSE_TIME_ET = "13:00"
EARLY_CLOSE_TITLE = "Early Close (1:00 PM ET)"


def us_market_holidays(year: int) -> dict[date, str]:
    """Full market closures for a year, keyed by observed date.

    Example:
        >>> us_market_holidays(2026)[date(2026, 7, 3)]
        'Independence Day'
    """
    holidays: dict[date, str] = {}

    new_year = date(year, 1, 1)
    if new_year.weekday() != SATURDAY:
        holidays[observed_date(new_year)] = "New Year's Day"

    holidays[nth_weekday(year, 1, MONDAY, 3)] = "Martin Luther King Jr. Day"
    holidays[nth_weekday(year, 2, MONDAY, 3)] = "Presidents' Day"
    holidays[good_friday(year)] = "Good Friday"
    holidays[nth_weekday(year, 5, MONDAY, LAST)] = "Memorial Day"
    holidays[observed_date(date(year, 6, 19))] = "Juneteenth"
    holidays[observed_date(date(year, 7, 4))] = "Independence Day"
    holidays[nth_weekday(year, 9, MONDAY, 1)] = "Labor Day"
    holidays[nth_weekday(year, 11, THURSDAY, 4)] = "Thanksgiving Day"
    holidays[observed_date(date(year, 12, 25))] = "Christmas Day"

    return dict(sorted(holidays.items()))


def us_market_early_closes(year: int) -> list[date]:
    """Weekday early-close sessions that are not also full closures."""
    closed = us_market_holidays(year)
    candidates = (
        date(year, 7, 3),
        nth_weekday(year, 11, THURSDAY, 4) + timedelta(days=1),
        date(year, 12, 24),
    )
    return [d for d in candidates if d.weekday() <= FRIDAY and d not in closed]


class USMarketHolidaysCollector(BaseScheduleCollector):
    """Algorithmic US market holiday and early-close calendar."""

    SOURCE_NAME = "holidays"
    SOURCE_URL = "https://www.nyse.com/markets/hours-calendars"

    def _generate(self, start_date: date, end_date: date) -> Iterator[ReleaseEvent]:
        for year in range(start_date.year, end_date.year + 1):
            for day, name in us_market_holidays(year).items():
                event = self._event(
                    day,
                    None,
                    f"{name} (Market Closed)",
                    "holiday",
                    "holiday",
                    source_url=self.SOURCE_URL,
                )
                event.description = f"US stock and bond markets are closed for {name}."
                yield event

            for day in us_market_early_closes(year):
                event = self._event(
                    day,
                    EARLY_CLOSE_TIME_ET,
                    EARLY_CLOSE_TITLE,
                    "holiday",
                    "holiday",
                    source_url=self.SOURCE_URL,
                    isEarlyClose=True,
                    closeTimeET=EARLY_CLOSE_TIME_ET,
                )
                event.description = "US stock markets close early at 1:00 PM ET."
                yield event

    def health_check(self) -> bool:
        return True
