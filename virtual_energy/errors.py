"""Exceptions raised by the trading collaborators.

The clearing core never raises for missing data. These are raised by the
session (order entry) and the market-data client.
"""
from __future__ import annotations

from typing import Optional


class TradingError(Exception):
    """Base class for virtual trading errors."""


class InvalidBidError(TradingError, ValueError):
    """Bid has a non-positive price/quantity or an unknown side."""


class BidLimitExceededError(TradingError):
    def __init__(self, hour_label: str, limit: int) -> None:
        self.hour_label = hour_label
        self.limit = limit
        super().__init__(f"Maximum {limit} bids per hour allowed ({hour_label})")


class OrderEntryClosedError(TradingError):
    def __init__(self, trading_date: str, cutoff_label: str) -> None:
        self.trading_date = trading_date
        super().__init__(f"Order entry closed for {trading_date} (cutoff {cutoff_label})")


class UnsupportedMarketError(TradingError, ValueError):
    """ISO or settlement point outside the supported ERCOT set."""


class MarketDataError(TradingError, RuntimeError):
    """Upstream market-data request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: str = "") -> None:
        self.status_code = status_code
        self.details = details
        super().__init__(message)
