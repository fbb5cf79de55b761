"""Clear virtual bids against DA settlement prices and settle P&L at RT."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

import pandas as pd

from virtual_energy.core.hourly import average_rt_to_hourly
from virtual_energy.core.market import (
    Bid,
    BidSide,
    ClearingSummary,
    HourlyAverage,
    HourlyClear,
    PricePoint,
)
from virtual_energy.core.market_time import floor_to_market_hour

logger = logging.getLogger(__name__)


def should_bid_clear(bid: Bid, da_price: float) -> bool:
    """Inclusive limit rule: BUY clears at or above its limit, SELL at or below."""
    if bid.side is BidSide.BUY:
        return bid.price >= da_price
    if bid.side is BidSide.SELL:
        return bid.price <= da_price
    return False


def clear_bids(
    bids: Iterable[Bid],
    da_prices: Iterable[PricePoint],
    rt_averages: Iterable[HourlyAverage],
) -> List[HourlyClear]:
    """
    Clear bids hour by hour against day-ahead settlement prices.

    Each cleared bid contributes its full quantity (no partial fills): +qty
    for BUY, -qty for SELL. P&L for an hour is
    ``cleared_qty * (avg_rt_price - da_price)`` when both prices exist and the
    net position is nonzero, otherwise 0.

    Parameters
    ----------
    bids : Iterable[Bid]
        Bids for the trading date. The per-hour cap is not re-checked here.
    da_prices : Iterable[PricePoint]
        DA hourly prices. A repeated hour keeps the last value.
    rt_averages : Iterable[HourlyAverage]
        Hourly RT averages from ``average_rt_to_hourly``.

    Returns
    -------
    List[HourlyClear]
        One entry per hour that has a bid or a DA price, ascending by hour.
        Hours with only RT data are not reported.
    """
    bids_by_hour: Dict[pd.Timestamp, List[Bid]] = defaultdict(list)
    for bid in bids:
        bids_by_hour[floor_to_market_hour(bid.hour_start)].append(bid)

    da_by_hour: Dict[pd.Timestamp, float] = {}
    for point in da_prices:
        hour = floor_to_market_hour(point.timestamp)
        if hour in da_by_hour:
            logger.warning(
                "Duplicate DA price for %s (%s): replacing %.2f with %.2f",
                hour.isoformat(), point.settlement_point, da_by_hour[hour], point.price,
            )
        da_by_hour[hour] = float(point.price)

    rt_by_hour: Dict[pd.Timestamp, float] = {
        floor_to_market_hour(avg.hour_start): float(avg.avg_price) for avg in rt_averages
    }

    hourly_clears: List[HourlyClear] = []
    for hour_start in sorted(set(bids_by_hour) | set(da_by_hour)):
        da_price: Optional[float] = da_by_hour.get(hour_start)
        avg_rt_price: Optional[float] = rt_by_hour.get(hour_start)

        cleared_qty = 0.0
        if da_price is not None:
            for bid in bids_by_hour.get(hour_start, []):
                if should_bid_clear(bid, da_price):
                    cleared_qty += bid.quantity_mwh if bid.side is BidSide.BUY else -bid.quantity_mwh

        pnl = 0.0
        if da_price is not None and avg_rt_price is not None and cleared_qty != 0:
            pnl = cleared_qty * (avg_rt_price - da_price)

        hourly_clears.append(HourlyClear(
            hour_start=hour_start,
            da_price=da_price,
            avg_rt_price=avg_rt_price,
            cleared_qty=cleared_qty,
            pnl=pnl,
        ))

    logger.debug(
        "Cleared %d bids over %d hours (%d DA hours, %d RT hours)",
        sum(len(v) for v in bids_by_hour.values()), len(hourly_clears), len(da_by_hour), len(rt_by_hour),
    )
    return hourly_clears


def run_clearing(
    bids: Iterable[Bid],
    da_prices: Iterable[PricePoint],
    rt_samples: Iterable[PricePoint],
) -> List[HourlyClear]:
    """Average raw RT samples to hourly, then clear."""
    return clear_bids(bids, da_prices, average_rt_to_hourly(rt_samples))


def summarize_clears(hourly_clears: Iterable[HourlyClear]) -> ClearingSummary:
    """Aggregate P&L and volume statistics. Recomputed from scratch each call."""
    clears = list(hourly_clears)

    total_pnl = sum(c.pnl for c in clears)
    total_cleared_qty = sum(abs(c.cleared_qty) for c in clears)
    long_qty = sum(c.cleared_qty for c in clears if c.cleared_qty > 0)
    short_qty = sum(abs(c.cleared_qty) for c in clears if c.cleared_qty < 0)
    hours_with_positions = sum(1 for c in clears if c.cleared_qty != 0)
    hours_with_pnl = sum(1 for c in clears if c.pnl != 0)

    return ClearingSummary(
        total_pnl=total_pnl,
        total_cleared_qty=total_cleared_qty,
        long_qty=long_qty,
        short_qty=short_qty,
        hours_with_positions=hours_with_positions,
        hours_with_pnl=hours_with_pnl,
        avg_pnl_per_hour=total_pnl / hours_with_pnl if hours_with_pnl > 0 else 0.0,
    )
