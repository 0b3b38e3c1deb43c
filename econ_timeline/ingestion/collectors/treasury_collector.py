"""US Treasury auction and budget statement schedule.

Approximates the Treasury's quarterly refunding calendar with fixed rules:

    - 4-Week and 8-Week bill auctions every Thursday at 11:30 ET
    - 2/5/7-Year notes on the 24th/25th/26th, 10-Year note on the 10th,
      30-Year bond on the 13th, all at 13:00 ET, rolled forward past weekends
    - Monthly Treasury Statement (budget balance) on the 8th business day at 14:00 ET

Announced auction dates can differ by a day or two around holidays.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date

from econ_timeline.ingestion.collectors.base_collector import BaseScheduleCollector
from econ_timeline.ingestion.collectors.calendar_math import (
    THURSDAY,
    months_between,
    nth_business_day,
    roll_forward_weekend,
    weekly_dates,
)
from econ_timeline.shared.schema import ReleaseEvent


@dataclass(frozen=True)
class MonthlyAuction:
    """Fixed day-of-month auction rule."""

    title: str
    day: int
    impact: str


class TreasuryAuctionCollector(BaseScheduleCollector):
    """Algorithmic Treasury auction calendar."""

    SOURCE_NAME = "treasury"
    SOURCE_URL = "https://www.treasurydirect.gov/auctions/upcoming/"
    BUDGET_URL = "https://fiscal.treasury.gov/reports-statements/mts/"

    BILL_AUCTIONS = ("4-Week Bill Auction", "8-Week Bill Auction")
    BILL_TIME_ET = "11:30"
    COUPON_TIME_ET = "13:00"
    BUDGET_TIME_ET = "14:00"
    BUDGET_BUSINESS_DAY = 8

    MONTHLY_AUCTIONS: tuple[MonthlyAuction, ...] = (
        MonthlyAuction("10-Year Note Auction", 10, "high"),
        MonthlyAuction("30-Year Bond Auction", 13, "high"),
        MonthlyAuction("2-Year Note Auction", 24, "medium"),
        MonthlyAuction("5-Year Note Auction", 25, "medium"),
        MonthlyAuction("7-Year Note Auction", 26, "medium"),
    )

    def _generate(self, start_date: date, end_date: date) -> Iterator[ReleaseEvent]:
        for thursday in weekly_dates(start_date, end_date, THURSDAY):
            for title in self.BILL_AUCTIONS:
                yield self._event(
                    thursday, self.BILL_TIME_ET, title, "low", "bonds", source_url=self.SOURCE_URL
                )

        for year, month in months_between(start_date, end_date):
            for auction in self.MONTHLY_AUCTIONS:
                yield self._event(
                    roll_forward_weekend(date(year, month, auction.day)),
                    self.COUPON_TIME_ET,
                    auction.title,
                    auction.impact,
                    "bonds",
                    source_url=self.SOURCE_URL,
                )

            yield self._event(
                nth_business_day(year, month, self.BUDGET_BUSINESS_DAY),
                self.BUDGET_TIME_ET,
                "Federal Budget Balance",
                "low",
                "fiscal",
                source_url=self.BUDGET_URL,
            )

    def health_check(self) -> bool:
        return True
