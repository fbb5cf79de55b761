"""Domain models for virtual DA/RT trading against ERCOT settlement prices."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

import pandas as pd

from virtual_energy.core.market_time import (
    floor_to_market_hour,
    get_today_in_market_time,
    to_market_time,
    to_trading_date,
)
from virtual_energy.errors import InvalidBidError, UnsupportedMarketError

SUPPORTED_ISOS = ("ercot",)

ERCOT_SETTLEMENT_POINTS: Dict[str, str] = {
    "HB_HOUSTON": "Houston Hub",
    "HB_NORTH": "North Hub",
    "HB_SOUTH": "South Hub",
    "HB_WEST": "West Hub",
    "LZ_HOUSTON": "Houston Load Zone",
    "LZ_NORTH": "North Load Zone",
    "LZ_SOUTH": "South Load Zone",
    "LZ_WEST": "West Load Zone",
}


class BidSide(str, Enum):
    """Direction of a virtual bid."""
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Bid:
    """
    Hourly limit bid against the day-ahead settlement price.

    ``hour_start`` is stored as the market-time top of the hour. Positivity of
    ``price`` and ``quantity_mwh`` is checked by ``validate_bid`` at order
    entry, not here: the clearing engine accepts whatever it is given.
    """

    hour_start: pd.Timestamp
    side: BidSide
    price: float  # $/MWh limit
    quantity_mwh: float
    bid_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        object.__setattr__(self, "hour_start", floor_to_market_hour(self.hour_start))
        try:
            object.__setattr__(self, "side", BidSide(self.side))
        except ValueError:
            raise InvalidBidError(f"Unknown bid side: {self.side!r}") from None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bid_id": self.bid_id,
            "hour_start": self.hour_start.isoformat(),
            "side": self.side.value,
            "price": self.price,
            "quantity_mwh": self.quantity_mwh,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Bid:
        kwargs = {
            "hour_start": data["hour_start"],
            "side": data["side"],
            "price": float(data["price"]),
            "quantity_mwh": float(data["quantity_mwh"]),
        }
        if data.get("bid_id"):
            kwargs["bid_id"] = str(data["bid_id"])
        return cls(**kwargs)


def validate_bid(side: Any, price: float, quantity_mwh: float) -> BidSide:
    """Check order-entry rules and return the parsed side."""
    raw_side = side.value if isinstance(side, BidSide) else str(side).upper()
    try:
        parsed_side = BidSide(raw_side)
    except ValueError:
        raise InvalidBidError(f"Unknown bid side: {side!r}") from None
    if not price > 0:
        raise InvalidBidError(f"Bid price must be positive, got {price}")
    if not quantity_mwh > 0:
        raise InvalidBidError(f"Bid quantity must be positive, got {quantity_mwh}")
    return parsed_side


@dataclass(frozen=True)
class PricePoint:
    """One settlement point price observation (DA hourly or RT 5-minute)."""

    timestamp: pd.Timestamp
    settlement_point: str
    price: float  # $/MWh, may be negative

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", to_market_time(self.timestamp))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "settlement_point": self.settlement_point,
            "price": self.price,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PricePoint:
        return cls(
            timestamp=data["timestamp"],
            settlement_point=str(data["settlement_point"]),
            price=float(data["price"]),
        )


@dataclass(frozen=True)
class HourlyAverage:
    """Unweighted mean of the RT samples inside one clock hour."""

    hour_start: pd.Timestamp
    avg_price: float
    settlement_point: str
    sample_count: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "hour_start", to_market_time(self.hour_start))


@dataclass(frozen=True)
class HourlyClear:
    """Clearing result for one hour. Absent prices are ``None``."""

    hour_start: pd.Timestamp
    da_price: Optional[float]
    avg_rt_price: Optional[float]
    cleared_qty: float  # signed MWh: +long, -short
    pnl: float

    @property
    def spread(self) -> Optional[float]:
        """RT minus DA, when both are known."""
        if self.da_price is None or self.avg_rt_price is None:
            return None
        return self.avg_rt_price - self.da_price

    @property
    def position(self) -> str:
        if self.cleared_qty > 0:
            return "LONG"
        if self.cleared_qty < 0:
            return "SHORT"
        return "FLAT"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hour_start": self.hour_start.isoformat(),
            "da_price": self.da_price,
            "avg_rt_price": self.avg_rt_price,
            "cleared_qty": self.cleared_qty,
            "pnl": self.pnl,
        }


@dataclass(frozen=True)
class ClearingSummary:
    """Aggregate statistics over a list of hourly clears."""

    total_pnl: float
    total_cleared_qty: float
    long_qty: float
    short_qty: float
    hours_with_positions: int
    hours_with_pnl: int
    avg_pnl_per_hour: float

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {
            "total_pnl": self.total_pnl,
            "total_cleared_qty": self.total_cleared_qty,
            "long_qty": self.long_qty,
            "short_qty": self.short_qty,
            "hours_with_positions": self.hours_with_positions,
            "hours_with_pnl": self.hours_with_pnl,
            "avg_pnl_per_hour": self.avg_pnl_per_hour,
        }


@dataclass(frozen=True)
class MarketSelection:
    """ISO, settlement point and trading date being traded."""

    iso: str = "ercot"
    settlement_point: str = "HB_HOUSTON"
    trading_date: date = field(default_factory=get_today_in_market_time)

    def __post_init__(self) -> None:
        if self.iso not in SUPPORTED_ISOS:
            raise UnsupportedMarketError(f"Unsupported ISO: {self.iso}. Available: {list(SUPPORTED_ISOS)}")
        if self.settlement_point not in ERCOT_SETTLEMENT_POINTS:
            raise UnsupportedMarketError(
                f"Unknown settlement point: {self.settlement_point}. "
                f"Available: {list(ERCOT_SETTLEMENT_POINTS)}"
            )
        object.__setattr__(self, "trading_date", to_trading_date(self.trading_date))

    @property
    def settlement_point_label(self) -> str:
        return ERCOT_SETTLEMENT_POINTS[self.settlement_point]

    def to_dict(self) -> Dict[str, str]:
        return {
            "iso": self.iso,
            "settlement_point": self.settlement_point,
            "trading_date": self.trading_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MarketSelection:
        return cls(
            iso=data.get("iso", "ercot"),
            settlement_point=data.get("settlement_point", "HB_HOUSTON"),
            trading_date=data["trading_date"],
        )
