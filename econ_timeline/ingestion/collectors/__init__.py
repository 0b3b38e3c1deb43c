"""Schedule collectors package."""

from econ_timeline.ingestion.collectors.base_collector import BaseScheduleCollector
from econ_timeline.ingestion.collectors.central_bank_collector import CentralBankCollector
from econ_timeline.ingestion.collectors.china_collector import ChinaScheduleCollector
from econ_timeline.ingestion.collectors.eia_collector import EIAScheduleCollector
from econ_timeline.ingestion.collectors.fed_events_collector import FedEventsCollector
from econ_timeline.ingestion.collectors.fred_release_collector import FREDReleaseCollector
from econ_timeline.ingestion.collectors.holidays_collector import USMarketHolidaysCollector
from econ_timeline.ingestion.collectors.treasury_collector import TreasuryAuctionCollector

__all__ = [
    "BaseScheduleCollector",
    "CentralBankCollector",
    "ChinaScheduleCollector",
    "EIAScheduleCollector",
    "FedEventsCollector",
    "FREDReleaseCollector",
    "TreasuryAuctionCollector",
    "USMarketHolidaysCollector",
]
