"""Trading-day workflow: fetch prices, clear bids, summarize."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

from virtual_energy.core.market import Bid, ClearingSummary, HourlyClear, PricePoint
from virtual_energy.core.market_time import (
    CutoffStatus,
    DateLike,
    TimestampLike,
    get_cutoff_status,
    to_trading_date,
)
from virtual_energy.core.session import TradingSession
from virtual_energy.data.client import GridStatusClient
from virtual_energy.errors import MarketDataError, TradingError

logger = logging.getLogger(__name__)


@dataclass
class TradingDayReport:
    """Outcome of one ``run_trading_day`` call."""

    selection: Dict[str, str]
    hourly_clears: List[HourlyClear]
    summary: ClearingSummary
    cutoff: CutoffStatus
    warnings: List[str] = field(default_factory=list)

    @property
    def has_market_data(self) -> bool:
        return any(c.da_price is not None or c.avg_rt_price is not None for c in self.hourly_clears)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selection": self.selection,
            "hourly_clears": [c.to_dict() for c in self.hourly_clears],
            "summary": self.summary.to_dict(),
            "cutoff": self.cutoff.to_dict(),
            "warnings": list(self.warnings),
        }


def apply_selection(
    session: TradingSession,
    trading_date: Optional[DateLike] = None,
    settlement_point: Optional[str] = None,
) -> bool:
    """Move the session to a trading date and settlement point.

    Only values that differ from the current selection count as a change, so
    an unchanged selection keeps the saved market data. A new trading date
    drops the saved bids. Returns True if the selection changed.
    """
    changes: Dict[str, Any] = {}
    if trading_date is not None:
        day = to_trading_date(trading_date)
        if day != session.selection.trading_date:
            logger.info("Switching trading date %s -> %s; saved bids dropped",
                        session.selection.trading_date, day)
            session.reset_for_new_date()
            changes["trading_date"] = day
    if settlement_point is not None and settlement_point != session.selection.settlement_point:
        changes["settlement_point"] = settlement_point

    if not changes:
        return False
    session.set_market_selection(**changes)
    return True


def replay_bids(
    session: TradingSession,
    rows: Iterable[Dict[str, Any]],
    enforce_cutoff: bool = False,
    now: Optional[TimestampLike] = None,
) -> Tuple[List[Bid], List[str]]:
    """Submit bid rows through order entry, skipping the ones it rejects.

    Returns:
        (accepted bids, rejection messages)
    """
    accepted: List[Bid] = []
    rejected: List[str] = []
    for i, row in enumerate(rows, start=1):
        try:
            bid = session.add_bid(
                row["hour_start"],
                row["side"],
                float(row["price"]),
                float(row["quantity_mwh"]),
                now=now,
                enforce_cutoff=enforce_cutoff,
            )
        except (TradingError, ValueError, KeyError) as e:
            logger.warning("Rejected bid row %d (%s): %s", i, row.get("hour_start"), e)
            rejected.append(f"row {i}: {e}")
            continue
        accepted.append(bid)
    return accepted, rejected


def fetch_market_data(
    session: TradingSession,
    client: GridStatusClient,
) -> Tuple[List[PricePoint], List[PricePoint], List[str]]:
    """Fetch DA and RT prices for the session's selection.

    A failed fetch is logged and reported as a warning; the other market is
    still fetched and the failed one comes back empty.

    Returns:
        (da_prices, rt_prices, warnings)
    """
    selection = session.selection
    warnings: List[str] = []
    results: Dict[str, List[PricePoint]] = {}

    for market, fetch in (
        ("DA", client.fetch_day_ahead_prices),
        ("RT", client.fetch_real_time_prices),
    ):
        try:
            results[market] = fetch(selection.settlement_point, selection.trading_date)
        except (MarketDataError, requests.RequestException) as e:
            logger.error("%s fetch failed for %s on %s: %s",
                         market, selection.settlement_point, selection.trading_date, e)
            warnings.append(f"{market} prices unavailable: {e}")
            results[market] = []

    return results["DA"], results["RT"], warnings


def run_trading_day(
    session: TradingSession,
    client: Optional[GridStatusClient] = None,
    now: Optional[TimestampLike] = None,
) -> TradingDayReport:
    """Run the trading-day pipeline for the session's current selection.

    Parameters
    ----------
    session : TradingSession
        Holds the selection and bids. Its market data is replaced by the
        fetched prices unless ``client`` is None, in which case the data
        already on the session is used.
    client : GridStatusClient, optional
        Market-data client.
    now : timestamp-like, optional
        Clock used for the cutoff status.

    Returns
    -------
    TradingDayReport
    """
    warnings: List[str] = []
    selection = session.selection
    logger.info(
        "Trading day %s at %s (%d bids)",
        selection.trading_date, selection.settlement_point, len(session.bids),
    )

    if client is not None:
        da_prices, rt_prices, warnings = fetch_market_data(session, client)
        session.set_market_data(da_hourly=da_prices, rt_five_min=rt_prices)
        logger.info("Fetched %d DA and %d RT price points", len(da_prices), len(rt_prices))

    if not session.bids:
        warnings.append("No bids entered for this trading date")

    clears = session.recompute()
    summary = session.summary()
    cutoff = get_cutoff_status(
        selection.trading_date,
        now=now,
        cutoff_hour=session.config.cutoff_hour,
        cutoff_minute=session.config.cutoff_minute,
    )

    logger.info(
        "Cleared %d hours: total P&L %.2f, %d hours with positions",
        len(clears), summary.total_pnl, summary.hours_with_positions,
    )
    return TradingDayReport(
        selection=selection.to_dict(),
        hourly_clears=clears,
        summary=summary,
        cutoff=cutoff,
        warnings=warnings,
    )
