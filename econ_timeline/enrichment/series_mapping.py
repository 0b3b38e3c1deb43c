"""Indicator-to-series mappings and value formatting.

Each mapping joins a calendar indicator (by its stable id) to one upstream
time series and says how to turn the latest observations into display values:

    level       the observation itself ("4.1%", "221K")
    pct_change  percent change between consecutive observations ("+0.3%")
    change      absolute change between consecutive observations ("+143K")

``scale`` divides the raw value before display when the upstream unit differs
from the display unit (ICSA is a raw count displayed in thousands, BOPGSTB is
millions of dollars displayed in billions).
"""

from collections.abc import Sequence
from dataclasses import dataclass

SEMANTICS = ("level", "pct_change", "change")
UNIT_DECIMALS = {"%": 1, "K": 0, "M": 1, "B": 1, "Bcf": 0, "": 1}
SPACED_UNITS = {"Bcf"}


@dataclass(frozen=True)
class SeriesMapping:
    """Immutable descriptor joining an indicator to an upstream series."""

    indicator_id: str
    series_id: str
    semantics: str
    unit: str = ""
    scale: float = 1.0
    provider: str = "fred"

    def __post_init__(self) -> None:
        if self.semantics not in SEMANTICS:
            raise ValueError(f"{self.series_id}: unknown semantics {self.semantics!r}")
        if self.unit not in UNIT_DECIMALS:
            raise ValueError(f"{self.series_id}: unknown unit {self.unit!r}")
        if self.scale <= 0:
            raise ValueError(f"{self.series_id}: scale must be positive")

    @property
    def key(self) -> tuple[str, str]:
        """Fetch identity: one upstream request per key per run."""
        return self.provider, self.series_id

    @property
    def observations_needed(self) -> int:
        return 2 if self.semantics == "level" else 3


@dataclass(frozen=True)
class Observation:
    """One dated observation of a series."""

    date: str
    value: float


@dataclass(frozen=True)
class SeriesReading:
    """Display values derived from the latest observations of a series."""

    series_id: str
    latest_value: str
    prior_value: str | None
    latest_date: str
    prior_date: str | None


_MAPPINGS = (
    SeriesMapping("us_nonfarm_payrolls", "PAYEMS", "change", "K"),
    SeriesMapping("us_unemployment_rate", "UNRATE", "level", "%"),
    SeriesMapping("us_initial_jobless_claims", "ICSA", "level", "K", scale=1000),
    SeriesMapping("us_jolts_job_openings", "JTSJOL", "level", "M", scale=1000),
    SeriesMapping("us_cpi_mom", "CPIAUCSL", "pct_change", "%"),
    SeriesMapping("us_core_cpi_mom", "CPILFESL", "pct_change", "%"),
    SeriesMapping("us_ppi_mom", "PPIFIS", "pct_change", "%"),
    SeriesMapping("us_core_pce_mom", "PCEPILFE", "pct_change", "%"),
    SeriesMapping("us_pce_mom", "PCEPI", "pct_change", "%"),
    SeriesMapping("us_gdp_qoq", "A191RL1Q225SBEA", "level", "%"),
    SeriesMapping("us_retail_sales_mom", "RSAFS", "pct_change", "%"),
    SeriesMapping("us_uom_consumer_sentiment", "UMCSENT", "level"),
    SeriesMapping("us_industrial_production_mom", "INDPRO", "pct_change", "%"),
    SeriesMapping("us_durable_goods_orders_mom", "DGORDER", "pct_change", "%"),
    SeriesMapping("us_empire_state_manufacturing", "GACDISA066MSFRBNY", "level"),
    SeriesMapping("us_philly_fed_manufacturing", "GACDFSA066MSFRBPHI", "level"),
    SeriesMapping("us_housing_starts", "HOUST", "level", "K"),
    SeriesMapping("us_building_permits", "PERMIT", "level", "K"),
    SeriesMapping("us_new_home_sales", "HSN1F", "level", "K"),
    SeriesMapping("us_trade_balance", "BOPGSTB", "level", "B", scale=1000),
    SeriesMapping("us_crude_oil_inventories", "WCESTUS1", "change", "M", scale=1000, provider="eia"),
    SeriesMapping("us_natural_gas_storage", "NW2_EPG0_SWO_R48_BCF", "change", "Bcf", provider="eia"),
)

SERIES_MAPPINGS: dict[str, SeriesMapping] = {m.indicator_id: m for m in _MAPPINGS}


def format_value(value: float, unit: str = "", signed: bool = False) -> str:
    """Format a display value with its unit.

    Example:
        >>> format_value(0.2718, "%", signed=True)
        '+0.3%'
        >>> format_value(221.4, "K")
        '221K'
        >>> format_value(-3.4, "Bcf", signed=True)
        '-3 Bcf'
    """
    decimals = UNIT_DECIMALS[unit]
    if round(value, decimals) == 0:
        value = 0.0
    number = f"{value:+.{decimals}f}" if signed else f"{value:.{decimals}f}"
    if not unit:
        return number
    return f"{number} {unit}" if unit in SPACED_UNITS else f"{number}{unit}"


def _derive(values: Sequence[float], index: int, mapping: SeriesMapping) -> str | None:
    """Display value at ``index`` (0 = latest), or None without enough history."""
    if mapping.semantics == "level":
        if index >= len(values):
            return None
        return format_value(values[index] / mapping.scale, mapping.unit)

    if index + 1 >= len(values):
        return None
    current, previous = values[index], values[index + 1]
    if mapping.semantics == "pct_change":
        if previous == 0:
            return None
        return format_value((current - previous) / abs(previous) * 100, "%", signed=True)
    return format_value((current - previous) / mapping.scale, mapping.unit, signed=True)


def compute_reading(observations: Sequence[Observation], mapping: SeriesMapping) -> SeriesReading | None:
    """Derive latest/prior display values from newest-first observations.

    Returns:
        The reading, or None if there is not enough data for a latest value.
    """
    values = [o.value for o in observations]
    latest = _derive(values, 0, mapping)
    if latest is None:
        return None

    prior = _derive(values, 1, mapping)
    return SeriesReading(
        series_id=mapping.series_id,
        latest_value=latest,
        prior_value=prior,
        latest_date=observations[0].date,
        prior_date=observations[1].date if prior is not None else None,
    )
