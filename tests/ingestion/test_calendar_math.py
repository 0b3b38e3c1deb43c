"""Tests for recurring-schedule date arithmetic."""

from datetime import date

import pytest

from econ_timeline.ingestion.collectors.calendar_math import (
    LAST,
    MONDAY,
    THURSDAY,
    WEDNESDAY,
    easter_sunday,
    good_friday,
    last_day_of_month,
    months_between,
    nth_business_day,
    nth_weekday,
    observed_date,
    roll_back_weekend,
    roll_forward_weekend,
    weekday_on_or_before,
    weekly_dates,
)


class TestEaster:
    """Test the Gregorian Easter computation against known dates."""

    @pytest.mark.parametrize(
        "year,expected",
        [
            (2019, date(2019, 4, 21)),
            (2024, date(2024, 3, 31)),
            (2025, date(2025, 4, 20)),
            (2026, date(2026, 4, 5)),
            (2027, date(2027, 3, 28)),
            (2028, date(2028, 4, 16)),
        ],
    )
    def test_easter_sunday(self, year, expected):
        assert easter_sunday(year) == expected

    def test_good_friday(self):
        assert good_friday(2025) == date(2025, 4, 18)
        assert good_friday(2026) == date(2026, 4, 3)


class TestNthWeekday:
    def test_thanksgiving(self):
        assert nth_weekday(2025, 11, THURSDAY, 4) == date(2025, 11, 27)
        assert nth_weekday(2026, 11, THURSDAY, 4) == date(2026, 11, 26)

    def test_first_monday_on_the_first(self):
        assert nth_weekday(2025, 9, MONDAY, 1) == date(2025, 9, 1)

    def test_last_monday(self):
        assert nth_weekday(2025, 5, MONDAY, LAST) == date(2025, 5, 26)

    def test_out_of_range(self):
        with pytest.raises(ValueError, match="n must be 1-4 or LAST"):
            nth_weekday(2025, 5, MONDAY, 5)


class TestWeekendRules:
    def test_observed_date(self):
        assert observed_date(date(2026, 7, 4)) == date(2026, 7, 3)  # Saturday
        assert observed_date(date(2022, 6, 19)) == date(2022, 6, 20)  # Sunday
        assert observed_date(date(2025, 7, 4)) == date(2025, 7, 4)

    def test_roll_forward(self):
        assert roll_forward_weekend(date(2025, 6, 14)) == date(2025, 6, 16)
        assert roll_forward_weekend(date(2025, 6, 13)) == date(2025, 6, 13)

    def test_roll_back(self):
        assert roll_back_weekend(date(2025, 6, 15)) == date(2025, 6, 13)

    def test_weekday_on_or_before(self):
        assert weekday_on_or_before(date(2025, 6, 15), WEDNESDAY) == date(2025, 6, 11)
        assert weekday_on_or_before(date(2025, 6, 11), WEDNESDAY) == date(2025, 6, 11)


class TestIterators:
    def test_weekly_dates(self):
        assert list(weekly_dates(date(2025, 6, 1), date(2025, 6, 30), WEDNESDAY)) == [
            date(2025, 6, 4),
            date(2025, 6, 11),
            date(2025, 6, 18),
            date(2025, 6, 25),
        ]

    def test_months_between_crosses_year(self):
        assert list(months_between(date(2025, 11, 15), date(2026, 2, 1))) == [
            (2025, 11),
            (2025, 12),
            (2026, 1),
            (2026, 2),
        ]

    def test_last_day_of_month_leap_year(self):
        assert last_day_of_month(2024, 2) == date(2024, 2, 29)

    def test_nth_business_day(self):
        assert nth_business_day(2025, 6, 1) == date(2025, 6, 2)
        assert nth_business_day(2025, 6, 8) == date(2025, 6, 11)

    def test_nth_business_day_invalid(self):
        with pytest.raises(ValueError):
            nth_business_day(2025, 6, 0)
