"""Persistent storage helpers for trading sessions and clearing results."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from virtual_energy.config import TradingConfig
from virtual_energy.core.market import HourlyClear, MarketSelection, PricePoint
from virtual_energy.core.session import TradingSession
from virtual_energy.data.constants import BID_COLUMNS
from virtual_energy.data.processors import clears_to_frame, prices_to_frame
from virtual_energy.errors import InvalidBidError

logger = logging.getLogger(__name__)


@dataclass
class SessionStorage:
    """Utility for persisting session state as JSON and exporting results as CSV."""

    state_path: Path
    export_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        self.state_path = Path(self.state_path).expanduser().resolve()
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        if self.export_dir is not None:
            self.export_dir = Path(self.export_dir).expanduser().resolve()
            self.export_dir.mkdir(parents=True, exist_ok=True)

    def save(self, session: TradingSession) -> Path:
        """Write the session snapshot (selection, bids, market data)."""
        with open(self.state_path, "w") as f:
            json.dump(session.to_dict(), f, indent=2)
        logger.info("Session saved to %s (%d bids)", self.state_path, len(session.bids))
        return self.state_path

    def load(self, config: Optional[TradingConfig] = None) -> TradingSession:
        """Load the saved session, or a fresh one if nothing is stored yet."""
        if not self.state_path.exists():
            logger.info("No saved session at %s; starting fresh", self.state_path)
            config = config or TradingConfig()
            return TradingSession(
                selection=MarketSelection(settlement_point=config.default_settlement_point),
                config=config,
            )

        with open(self.state_path, "r") as f:
            data = json.load(f)
        session = TradingSession.from_dict(data, config=config)
        logger.info("Session loaded from %s (%d bids)", self.state_path, len(session.bids))
        return session

    def export_clears(self, hourly_clears: Iterable[HourlyClear], trading_date: date) -> Path:
        """Write hourly clears to ``clears_<date>.csv`` in the export directory."""
        if self.export_dir is None:
            raise ValueError("export_dir is not configured")

        path = self.export_dir / f"clears_{trading_date.isoformat()}.csv"
        df = clears_to_frame(hourly_clears)
        df.to_csv(path, index=False)
        return path

    def export_prices(self, points: Iterable[PricePoint], trading_date: date, market: str) -> Path:
        """Write raw price points to ``<market>_prices_<date>.csv`` (market is ``da`` or ``rt``)."""
        if self.export_dir is None:
            raise ValueError("export_dir is not configured")

        path = self.export_dir / f"{market.lower()}_prices_{trading_date.isoformat()}.csv"
        prices_to_frame(points).to_csv(path, index=False)
        return path


def load_bids_csv(path: Path) -> List[Dict[str, Any]]:
    """Read bid rows from a CSV with ``hour_start,side,price,quantity_mwh`` columns.

    Rows come back as plain dicts; side, price and quantity are checked when
    each row goes through order entry, so one bad row does not sink the file.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = [col for col in BID_COLUMNS if col not in df.columns]
    if missing:
        raise InvalidBidError(f"Bid file {path} is missing columns: {missing}")

    return [{col: row[col].strip() for col in BID_COLUMNS} for _, row in df.iterrows()]
