#!/usr/bin/env python3
"""Poll the order-entry cutoff for a trading date and log status changes."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

# Ensure project root is on path for package imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from virtual_energy.config import TradingConfig
from virtual_energy.core.market_time import CutoffStatus, get_cutoff_status, get_today_in_market_time, is_today


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Report the order-entry cutoff status on a fixed cadence.")
    parser.add_argument(
        "--date",
        default=None,
        help="Trading date YYYY-MM-DD (default: today in market time)",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=60,
        help="Polling interval in seconds (default: 60)",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Maximum number of iterations before exiting (default: run until the cutoff passes)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Trading config JSON (default: config/trading_config.json)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def check_once(trading_date, config: TradingConfig) -> CutoffStatus:
    status = get_cutoff_status(
        trading_date,
        cutoff_hour=config.cutoff_hour,
        cutoff_minute=config.cutoff_minute,
    )
    print(f"{status.current_time.strftime('%Y-%m-%d %H:%M:%S %Z')}  {trading_date}  {status.display_text}")
    return status


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s %(levelname)s %(message)s")

    config = TradingConfig.load(args.config)
    trading_date = args.date or get_today_in_market_time()

    iteration = 0
    previous: Optional[bool] = None
    logging.info("Monitoring cutoff for %s with %s-second interval", trading_date, args.interval)
    if not is_today(trading_date):
        logging.warning("%s is not today in market time; its cutoff status will not change", trading_date)

    try:
        while True:
            iteration += 1
            status = check_once(trading_date, config)

            if previous is not None and status.is_cutoff_passed != previous:
                logging.warning("Order entry for %s is now closed", trading_date)
            previous = status.is_cutoff_passed

            if status.is_cutoff_passed and args.max_iterations is None:
                logging.info("Cutoff passed; exiting")
                break
            if args.max_iterations is not None and iteration >= args.max_iterations:
                logging.info("Reached max iterations (%d); exiting", args.max_iterations)
                break

            time.sleep(args.interval)
    except KeyboardInterrupt:
        logging.info("Interrupted; shutting down cutoff monitor")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
