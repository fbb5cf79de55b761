#!/usr/bin/env python3
"""Clear a day of virtual bids against ERCOT DA/RT prices and report P&L."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

# Ensure project root is on path for package imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from virtual_energy.analysis.plots import plot_price_comparison
from virtual_energy.analysis.report import format_clearing_table, format_summary
from virtual_energy.config import TradingConfig
from virtual_energy.core.hourly import average_rt_to_hourly
from virtual_energy.core.market import ERCOT_SETTLEMENT_POINTS
from virtual_energy.data.client import GridStatusClient
from virtual_energy.data.processors import build_price_comparison
from virtual_energy.data.storage import SessionStorage, load_bids_csv
from virtual_energy.errors import TradingError
from virtual_energy.workflows.trading_day import apply_selection, replay_bids, run_trading_day


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Clear virtual DA/RT bids for one ERCOT trading date.")
    parser.add_argument(
        "--date",
        default=None,
        help="Trading date YYYY-MM-DD (default: saved session date, or today in market time)",
    )
    parser.add_argument(
        "--settlement-point",
        default=None,
        choices=sorted(ERCOT_SETTLEMENT_POINTS),
        help="Settlement point (default: saved session or config default)",
    )
    parser.add_argument(
        "--bids",
        type=Path,
        default=None,
        help="CSV of bids with hour_start,side,price,quantity_mwh columns",
    )
    parser.add_argument(
        "--state",
        type=Path,
        default=PROJECT_ROOT / "data" / "session.json",
        help="Path to the saved session state",
    )
    parser.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Directory for clears_<date>.csv and da/rt_prices_<date>.csv exports",
    )
    parser.add_argument(
        "--plot",
        type=Path,
        default=None,
        help="Write the DA vs RT price chart to this PNG path",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Trading config JSON (default: config/trading_config.json)",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip GridStatus and clear against the market data saved in the session",
    )
    parser.add_argument(
        "--enforce-cutoff",
        action="store_true",
        help="Reject bids from --bids once the trading date's cutoff has passed",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s %(levelname)s %(message)s")

    config = TradingConfig.load(args.config)
    storage = SessionStorage(state_path=args.state, export_dir=args.export_dir)
    session = storage.load(config)
    apply_selection(session, trading_date=args.date, settlement_point=args.settlement_point)

    if args.bids is not None:
        try:
            rows = load_bids_csv(args.bids)
        except (OSError, TradingError) as exc:
            logging.error("Could not read bids from %s: %s", args.bids, exc)
            return 1
        accepted, rejected = replay_bids(session, rows, enforce_cutoff=args.enforce_cutoff)
        logging.info("Loaded %d bid(s) from %s", len(accepted), args.bids)
        if rejected:
            logging.warning("%d bid(s) rejected", len(rejected))

    client = None if args.offline else GridStatusClient.from_config(config)
    report = run_trading_day(session, client)

    print(f"\n{session.selection.settlement_point_label} ({session.selection.settlement_point}) "
          f"- {session.selection.trading_date.isoformat()}")
    print(report.cutoff.display_text)
    print()
    print(format_clearing_table(report.hourly_clears))
    print()
    print(format_summary(report.summary))
    for warning in report.warnings:
        print(f"Warning: {warning}")

    if args.export_dir is not None:
        path = storage.export_clears(report.hourly_clears, session.selection.trading_date)
        logging.info("Clears exported to %s", path)
        storage.export_prices(session.da_hourly, session.selection.trading_date, "da")
        storage.export_prices(session.rt_five_min, session.selection.trading_date, "rt")

    if args.plot is not None:
        comparison = build_price_comparison(session.da_hourly, average_rt_to_hourly(session.rt_five_min))
        plot_price_comparison(comparison, report.hourly_clears, save_path=args.plot)
        logging.info("Price chart written to %s", args.plot)

    storage.save(session)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
