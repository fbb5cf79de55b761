"""Caller-owned trading state: market selection, bids and market data.

The clearing functions stay stateless; this object holds a snapshot and
passes it into them on ``recompute``.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

import pandas as pd

from virtual_energy.config import TradingConfig
from virtual_energy.core.clearing import run_clearing, summarize_clears
from virtual_energy.core.market import (
    Bid,
    ClearingSummary,
    HourlyClear,
    MarketSelection,
    PricePoint,
    validate_bid,
)
from virtual_energy.core.market_time import (
    TimestampLike,
    floor_to_market_hour,
    format_hour_for_display,
    get_cutoff_status,
)
from virtual_energy.errors import BidLimitExceededError, OrderEntryClosedError, TradingError

logger = logging.getLogger(__name__)


@dataclass
class TradingSession:
    """Mutable state for one user's trading day."""

    selection: MarketSelection = field(default_factory=MarketSelection)
    bids: List[Bid] = field(default_factory=list)
    da_hourly: List[PricePoint] = field(default_factory=list)
    rt_five_min: List[PricePoint] = field(default_factory=list)
    hourly_clears: List[HourlyClear] = field(default_factory=list)
    config: TradingConfig = field(default_factory=TradingConfig)
    last_error: Optional[str] = None

    # Bids

    def add_bid(
        self,
        hour_start: TimestampLike,
        side: Any,
        price: float,
        quantity_mwh: float,
        now: Optional[TimestampLike] = None,
        enforce_cutoff: bool = True,
    ) -> Bid:
        """Validate and store a new bid.

        ``enforce_cutoff=False`` is for replaying bids onto a past trading date.

        Raises
        ------
        OrderEntryClosedError
            The cutoff for the selected trading date has passed.
        InvalidBidError
            Non-positive price or quantity, or an unknown side.
        BidLimitExceededError
            The hour already holds ``max_bids_per_hour`` bids.
        """
        try:
            status = get_cutoff_status(
                self.selection.trading_date,
                now=now,
                cutoff_hour=self.config.cutoff_hour,
                cutoff_minute=self.config.cutoff_minute,
            )
            if enforce_cutoff and status.is_cutoff_passed:
                raise OrderEntryClosedError(
                    self.selection.trading_date.isoformat(),
                    format_hour_for_display(status.cutoff_time),
                )

            parsed_side = validate_bid(side, price, quantity_mwh)
            hour = floor_to_market_hour(hour_start)
            if len(self.get_bids_for_hour(hour)) >= self.config.max_bids_per_hour:
                raise BidLimitExceededError(format_hour_for_display(hour), self.config.max_bids_per_hour)
        except TradingError as e:
            self.last_error = str(e)
            raise

        bid = Bid(hour_start=hour, side=parsed_side, price=float(price), quantity_mwh=float(quantity_mwh))
        self.bids.append(bid)
        self.last_error = None
        logger.info(
            "Added %s bid %s: %.2f MWh @ $%.2f for %s",
            bid.side.value, bid.bid_id, bid.quantity_mwh, bid.price, format_hour_for_display(hour),
        )
        return bid

    def remove_bid(self, bid_id: str) -> bool:
        """Delete a bid by id. Returns False if it was not found."""
        before = len(self.bids)
        self.bids = [b for b in self.bids if b.bid_id != bid_id]
        return len(self.bids) != before

    def clear_bids(self) -> None:
        self.bids = []

    def get_bids_for_hour(self, hour_start: TimestampLike) -> List[Bid]:
        hour = floor_to_market_hour(hour_start)
        return [b for b in self.bids if b.hour_start == hour]

    def bid_counts_by_hour(self) -> Dict[pd.Timestamp, int]:
        return dict(Counter(b.hour_start for b in self.bids))

    # Market selection and data

    def set_market_selection(self, **changes: Any) -> None:
        """Update the selection; cached market data and results are dropped."""
        self.selection = replace(self.selection, **changes)
        self.da_hourly = []
        self.rt_five_min = []
        self.hourly_clears = []
        self.last_error = None

    def set_market_data(
        self,
        da_hourly: Optional[List[PricePoint]] = None,
        rt_five_min: Optional[List[PricePoint]] = None,
    ) -> None:
        if da_hourly is not None:
            self.da_hourly = list(da_hourly)
        if rt_five_min is not None:
            self.rt_five_min = list(rt_five_min)

    def reset_for_new_date(self) -> None:
        self.bids = []
        self.da_hourly = []
        self.rt_five_min = []
        self.hourly_clears = []
        self.last_error = None

    # Results

    def recompute(self) -> List[HourlyClear]:
        """Re-run the whole pipeline on the current snapshot."""
        self.hourly_clears = run_clearing(self.bids, self.da_hourly, self.rt_five_min)
        return self.hourly_clears

    def summary(self) -> ClearingSummary:
        return summarize_clears(self.hourly_clears)

    # Persistence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selection": self.selection.to_dict(),
            "bids": [b.to_dict() for b in self.bids],
            "market_data": {
                "da_hourly": [p.to_dict() for p in self.da_hourly],
                "rt_five_min": [p.to_dict() for p in self.rt_five_min],
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[TradingConfig] = None) -> TradingSession:
        """Restore a session; clears are recomputed rather than loaded."""
        market_data = data.get("market_data", {})
        session = cls(
            selection=MarketSelection.from_dict(data["selection"]),
            bids=[Bid.from_dict(b) for b in data.get("bids", [])],
            da_hourly=[PricePoint.from_dict(p) for p in market_data.get("da_hourly", [])],
            rt_five_min=[PricePoint.from_dict(p) for p in market_data.get("rt_five_min", [])],
            config=config or TradingConfig(),
        )
        session.recompute()
        return session
