"""GridStatus market-data client for ERCOT DA and RT settlement point prices."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

import requests

from virtual_energy.config import TradingConfig
from virtual_energy.core.market import PricePoint
from virtual_energy.core.market_time import DateLike, to_trading_date
from virtual_energy.data.constants import GRIDSTATUS_TIMEZONE
from virtual_energy.data.endpoints import GridStatusEndpoints, GridStatusSchemaMapping
from virtual_energy.data.fetchers import fetch_with_retry, transform_gridstatus_rows
from virtual_energy.errors import MarketDataError

logger = logging.getLogger(__name__)


@dataclass
class GridStatusClient:
    """ERCOT price client with timeout and rate-limit retries."""

    api_key: Optional[str] = None
    endpoints: GridStatusEndpoints = field(default_factory=GridStatusEndpoints)
    schema: GridStatusSchemaMapping = field(default_factory=GridStatusSchemaMapping)
    timeout: float = 15.0
    max_retries: int = 3
    backoff_base_seconds: float = 1.2
    da_limit: int = 100
    rt_limit: int = 500
    session: requests.Session = field(default_factory=requests.Session)
    sleep: Callable[[float], None] = time.sleep

    @classmethod
    def from_config(cls, config: TradingConfig, **overrides: Any) -> GridStatusClient:
        """Build a client from ``TradingConfig`` (API key from the environment)."""
        kwargs: Dict[str, Any] = {
            "api_key": config.resolved_api_key,
            "endpoints": GridStatusEndpoints(base_url=config.api.base_url),
            "timeout": config.api.timeout_seconds,
            "max_retries": config.api.max_retries,
            "backoff_base_seconds": config.api.backoff_base_seconds,
            "da_limit": config.da_limit,
            "rt_limit": config.rt_limit,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    def query_dataset(self, dataset: str, params: Dict[str, Any]) -> List[PricePoint]:
        """Query a GridStatus dataset and return its rows as PricePoints.

        Args:
            dataset: Dataset slug or friendly alias
            params: Query parameters (start_time, end_time, timezone, ...)

        Returns:
            Parsed price points; empty if the upstream has no data

        Raises:
            MarketDataError: if the final response is not OK or not JSON
        """
        url = self.endpoints.query_url(dataset)
        logger.info(
            "GridStatus request (dataset=%s, resolved=%s, url=%s)",
            dataset, self.endpoints.resolve_dataset(dataset), url,
        )

        response, attempts = fetch_with_retry(
            self.session,
            url,
            params=params,
            headers=self._headers(),
            timeout=self.timeout,
            max_retries=self.max_retries,
            backoff_base_seconds=self.backoff_base_seconds,
            sleep=self.sleep,
        )

        if not response.ok:
            logger.error(
                "GridStatus non-OK response (status=%s %s, url=%s)",
                response.status_code, response.reason, url,
            )
            raise MarketDataError(
                f"GridStatus error: {response.status_code} {response.reason}",
                status_code=response.status_code,
                details=response.text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MarketDataError(f"GridStatus returned malformed JSON: {e}", status_code=response.status_code) from e

        rows = payload.get("data") if isinstance(payload, dict) else None
        points = transform_gridstatus_rows(rows if isinstance(rows, list) else None, self.schema)
        logger.info(
            "GridStatus success (status=%s, attempts=%d, rows=%d, parsed=%d)",
            response.status_code, attempts, len(rows or []), len(points),
        )
        return points

    def _day_params(self, settlement_point: str, trading_date: DateLike, limit: int) -> Dict[str, Any]:
        day = to_trading_date(trading_date)
        next_day = day + timedelta(days=1)
        return {
            "start_time": f"{day.isoformat()}T00:00:00",
            "end_time": f"{next_day.isoformat()}T00:00:00",
            "timezone": GRIDSTATUS_TIMEZONE,
            "location": settlement_point,
            "limit": str(limit),
        }

    def fetch_day_ahead_prices(self, settlement_point: str, trading_date: DateLike) -> List[PricePoint]:
        """Fetch DA hourly settlement point prices for one trading date."""
        points = self.query_dataset(
            self.endpoints.day_ahead_hourly,
            self._day_params(settlement_point, trading_date, self.da_limit),
        )
        if not points:
            logger.warning("No DA data for %s at %s", trading_date, settlement_point)
        return points

    def fetch_real_time_prices(self, settlement_point: str, trading_date: DateLike) -> List[PricePoint]:
        """Fetch RT 5-minute settlement point prices for one trading date."""
        points = self.query_dataset(
            self.endpoints.real_time_5_minute,
            self._day_params(settlement_point, trading_date, self.rt_limit),
        )
        if not points:
            logger.warning("No RT data for %s at %s", trading_date, settlement_point)
        return points
