"""China monthly data calendar.

The PBoC Loan Prime Rate fixes on the 20th at 09:15 Beijing time, moved to
the next business day when the 20th falls on a weekend. The statistics
releases follow fixed monthly patterns:

    - NBS PMIs on the last day of the month (previous business day on weekends)
    - Caixin manufacturing PMI on the 1st business day, services on the 3rd
    - Trade balance on the 7th, CPI/PPI on the 9th
    - Activity data (industrial production, retail sales, investment) on the 15th
    - GDP on the 15th of the first month of each quarter

Local Chinese holidays (Lunar New Year, Golden Week) shift some of these.
"""

from collections.abc import Iterator
from datetime import date

from econ_timeline.ingestion.collectors.base_collector import BaseScheduleCollector
from econ_timeline.ingestion.collectors.calendar_math import (
    last_day_of_month,
    months_between,
    nth_business_day,
    roll_back_weekend,
    roll_forward_weekend,
)
from econ_timeline.shared.schema import ReleaseEvent

NBS_URL = "https://www.stats.gov.cn/english/"
CAIXIN_URL = "https://www.pmi.spglobal.com/Public/Release/PressReleases"
PBOC_URL = "http://www.pbc.gov.cn/en/3688006/index.html"

# title -> (day of month, Beijing time, impact, category)
FIXED_DAY_RELEASES = {
    "China Trade Balance": (7, "11:00", "medium", "trade"),
    "China CPI y/y": (9, "09:30", "medium", "inflation"),
    "China PPI y/y": (9, "09:30", "low", "inflation"),
    "China Industrial Production y/y": (15, "10:00", "medium", "manufacturing"),
    "China Retail Sales y/y": (15, "10:00", "medium", "consumer"),
    "China Fixed Asset Investment ytd/y": (15, "10:00", "low", "growth"),
}


def loan_prime_rate_date(year: int, month: int) -> date:
    """LPR fixing day: the 20th, rolled forward past weekends."""
    return roll_forward_weekend(date(year, month, 20))


class ChinaScheduleCollector(BaseScheduleCollector):
    """Rule-based calendar for PBoC and Chinese statistics releases."""

    SOURCE_NAME = "china"
    TIMEZONE = "Asia/Shanghai"
    CURRENCY = "CNY"
    COUNTRY = "CN"

    LPR_TIME = "09:15"

    def _generate(self, start_date: date, end_date: date) -> Iterator[ReleaseEvent]:
        for year, month in months_between(start_date, end_date):
            lpr = self._event(
                loan_prime_rate_date(year, month),
                self.LPR_TIME,
                "PBoC Loan Prime Rate",
                "high",
                "central_bank",
                source_url=PBOC_URL,
            )
            lpr.source = "pboc"
            yield lpr

            nbs_day = roll_back_weekend(last_day_of_month(year, month))
            yield self._event(
                nbs_day, "09:30", "China NBS Manufacturing PMI", "medium", "manufacturing",
                source_url=NBS_URL,
            )
            yield self._event(
                nbs_day, "09:30", "China NBS Non-Manufacturing PMI", "low", "services",
                source_url=NBS_URL,
            )
            yield self._event(
                nth_business_day(year, month, 1), "09:45", "China Caixin Manufacturing PMI",
                "medium", "manufacturing", source_url=CAIXIN_URL,
            )
            yield self._event(
                nth_business_day(year, month, 3), "09:45", "China Caixin Services PMI",
                "low", "services", source_url=CAIXIN_URL,
            )

            for title, (day, clock, impact, category) in FIXED_DAY_RELEASES.items():
                yield self._event(
                    roll_forward_weekend(date(year, month, day)),
                    clock,
                    title,
                    impact,
                    category,
                    source_url=NBS_URL,
                )

            if month in (1, 4, 7, 10):
                yield self._event(
                    roll_forward_weekend(date(year, month, 15)),
                    "10:00",
                    "China GDP y/y",
                    "high",
                    "growth",
                    source_url=NBS_URL,
                )

    def health_check(self) -> bool:
        return True
