"""Shared test fixtures."""

import matplotlib

matplotlib.use("Agg")

from datetime import date
from typing import List

import pytest

from virtual_energy.config import TradingConfig
from virtual_energy.core.market import Bid, BidSide, MarketSelection, PricePoint
from virtual_energy.core.session import TradingSession

HOUR_8 = "2024-01-01T08:00:00-06:00"
HOUR_9 = "2024-01-01T09:00:00-06:00"


@pytest.fixture
def reference_bids() -> List[Bid]:
    """Two bids at 08:00 and one at 09:00 on 2024-01-01."""
    return [
        Bid(hour_start=HOUR_8, side=BidSide.BUY, price=60.0, quantity_mwh=100.0, bid_id="b1"),
        Bid(hour_start=HOUR_8, side=BidSide.SELL, price=50.0, quantity_mwh=50.0, bid_id="b2"),
        Bid(hour_start=HOUR_9, side=BidSide.BUY, price=40.0, quantity_mwh=75.0, bid_id="b3"),
    ]


@pytest.fixture
def reference_da() -> List[PricePoint]:
    return [
        PricePoint(timestamp=HOUR_8, settlement_point="HB_HOUSTON", price=55.0),
        PricePoint(timestamp=HOUR_9, settlement_point="HB_HOUSTON", price=35.0),
    ]


@pytest.fixture
def reference_rt() -> List[PricePoint]:
    """5-minute RT samples averaging 60.0 at 08:00 and 40.0 at 09:00."""
    samples = []
    for minute, price in [(0, 55.0), (5, 60.0), (10, 65.0)]:
        samples.append(PricePoint(
            timestamp=f"2024-01-01T08:{minute:02d}:00-06:00", settlement_point="HB_HOUSTON", price=price,
        ))
    for minute, price in [(0, 30.0), (30, 40.0), (55, 50.0)]:
        samples.append(PricePoint(
            timestamp=f"2024-01-01T09:{minute:02d}:00-06:00", settlement_point="HB_HOUSTON", price=price,
        ))
    return samples


@pytest.fixture
def trading_config() -> TradingConfig:
    return TradingConfig()


@pytest.fixture
def session(trading_config: TradingConfig) -> TradingSession:
    """Empty session for 2024-01-01 at HB_HOUSTON."""
    return TradingSession(
        selection=MarketSelection(iso="ercot", settlement_point="HB_HOUSTON", trading_date=date(2024, 1, 1)),
        config=trading_config,
    )


@pytest.fixture
def before_cutoff() -> str:
    return "2024-01-01T10:30:00-06:00"


@pytest.fixture
def after_cutoff() -> str:
    return "2024-01-01T11:00:01-06:00"
