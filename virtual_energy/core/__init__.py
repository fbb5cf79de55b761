"""Core domain models and the clearing pipeline."""

from virtual_energy.core.market import (
    ERCOT_SETTLEMENT_POINTS,
    Bid,
    BidSide,
    ClearingSummary,
    HourlyAverage,
    HourlyClear,
    MarketSelection,
    PricePoint,
    validate_bid,
)
from virtual_energy.core.market_time import (
    MARKET_TIMEZONE,
    CutoffStatus,
    floor_to_market_hour,
    format_hour_for_display,
    get_cutoff_status,
    get_cutoff_time,
    get_hour_starts_for_date,
    to_market_time,
)
from virtual_energy.core.hourly import average_rt_to_hourly
from virtual_energy.core.clearing import (
    clear_bids,
    run_clearing,
    should_bid_clear,
    summarize_clears,
)
from virtual_energy.core.session import TradingSession

__all__ = [
    "ERCOT_SETTLEMENT_POINTS",
    "Bid",
    "BidSide",
    "ClearingSummary",
    "HourlyAverage",
    "HourlyClear",
    "MarketSelection",
    "PricePoint",
    "validate_bid",
    "MARKET_TIMEZONE",
    "CutoffStatus",
    "floor_to_market_hour",
    "format_hour_for_display",
    "get_cutoff_status",
    "get_cutoff_time",
    "get_hour_starts_for_date",
    "to_market_time",
    "average_rt_to_hourly",
    "clear_bids",
    "run_clearing",
    "should_bid_clear",
    "summarize_clears",
    "TradingSession",
]
