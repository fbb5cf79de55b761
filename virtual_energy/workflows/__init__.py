"""Workflow orchestration for a trading day."""

from virtual_energy.workflows.trading_day import (
    TradingDayReport,
    apply_selection,
    fetch_market_data,
    replay_bids,
    run_trading_day,
)

__all__ = [
    "TradingDayReport",
    "apply_selection",
    "fetch_market_data",
    "replay_bids",
    "run_trading_day",
]
