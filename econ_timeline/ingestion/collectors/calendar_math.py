"""Date arithmetic for recurring release schedules.

Pure integer/calendar arithmetic, no time zones. All functions take and
return ``datetime.date`` objects.
"""

import calendar
from collections.abc import Iterator
from datetime import date, timedelta

LAST = -1

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)


def nth_weekday(year: int, month: int, weekday: int, n: int) -> date:
    """Return the n-th given weekday of a month.

    Args:
        year: Calendar year.
        month: Month (1-12).
        weekday: Monday=0 ... Sunday=6.
        n: Occurrence 1-4 counting forward from the 1st, or LAST (-1).

    Raises:
        ValueError: If n is out of range.

    Example:
        >>> nth_weekday(2025, 11, THURSDAY, 4)  # Thanksgiving
        datetime.date(2025, 11, 27)
    """
    if n == LAST:
        last_day = date(year, month, calendar.monthrange(year, month)[1])
        return last_day - timedelta(days=(last_day.weekday() - weekday) % 7)
    if not 1 <= n <= 4:
        raise ValueError(f"n must be 1-4 or LAST, got {n}")
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + 7 * (n - 1))


def easter_sunday(year: int) -> date:
    """Western Easter Sunday via the Anonymous Gregorian algorithm."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def good_friday(year: int) -> date:
    return easter_sunday(year) - timedelta(days=2)


def observed_date(day: date) -> date:
    """Weekend observance: Saturday -> Friday, Sunday -> Monday."""
    if day.weekday() == SATURDAY:
        return day - timedelta(days=1)
    if day.weekday() == SUNDAY:
        return day + timedelta(days=1)
    return day


def roll_forward_weekend(day: date) -> date:
    """Move a weekend date to the following Monday."""
    while day.weekday() >= SATURDAY:
        day += timedelta(days=1)
    return day


def roll_back_weekend(day: date) -> date:
    """Move a weekend date to the preceding Friday."""
    while day.weekday() >= SATURDAY:
        day -= timedelta(days=1)
    return day


def weekday_on_or_before(day: date, weekday: int) -> date:
    return day - timedelta(days=(day.weekday() - weekday) % 7)


def weekly_dates(start: date, end: date, weekday: int) -> Iterator[date]:
    """Yield every given weekday in [start, end], starting on/after start."""
    current = start + timedelta(days=(weekday - start.weekday()) % 7)
    while current <= end:
        yield current
        current += timedelta(days=7)


def months_between(start: date, end: date) -> Iterator[tuple[int, int]]:
    """Yield (year, month) for every month touched by [start, end]."""
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def nth_business_day(year: int, month: int, n: int) -> date:
    """n-th weekday (Mon-Fri) of the month, ignoring holidays."""
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    day = roll_forward_weekend(date(year, month, 1))
    for _ in range(n - 1):
        day = roll_forward_weekend(day + timedelta(days=1))
    return day
