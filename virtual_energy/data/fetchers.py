"""Data fetching helpers for the GridStatus API."""
from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from numbers import Real
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import requests

from virtual_energy.core.market import PricePoint
from virtual_energy.data.endpoints import GridStatusSchemaMapping
from virtual_energy.errors import MarketDataError

logger = logging.getLogger(__name__)

DEFAULT_BACKOFF_SECONDS = 1.2


def compute_backoff_seconds(
    response: requests.Response,
    attempt: int,
    base_seconds: float = DEFAULT_BACKOFF_SECONDS,
) -> float:
    """Delay before retrying a 429 response.

    Honors a ``Retry-After`` header given either as seconds or as an HTTP
    date; otherwise backs off linearly, ``base_seconds * (attempt + 1)``.
    """
    retry_after = response.headers.get("Retry-After")
    if retry_after:
        try:
            seconds = float(retry_after)
        except ValueError:
            seconds = None
        if seconds is not None and not math.isnan(seconds):
            return max(0.0, seconds)
        try:
            retry_at = parsedate_to_datetime(retry_after)
        except (TypeError, ValueError):
            retry_at = None
        if retry_at is not None:
            if retry_at.tzinfo is None:
                retry_at = retry_at.replace(tzinfo=timezone.utc)
            return max(0.0, (retry_at - datetime.now(timezone.utc)).total_seconds())
    return base_seconds * (attempt + 1)


def fetch_with_retry(
    session: requests.Session,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 15.0,
    max_retries: int = 3,
    backoff_base_seconds: float = DEFAULT_BACKOFF_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> Tuple[requests.Response, int]:
    """GET ``url``, retrying rate-limit responses and network errors.

    Args:
        session: HTTP session used for the request
        url: Fully resolved query URL
        params: Query parameters, passed through unchanged
        headers: Request headers
        timeout: Per-attempt timeout in seconds
        max_retries: Retries after the first attempt
        backoff_base_seconds: Default linear backoff step
        sleep: Sleep function (injected by tests)

    Returns:
        The final response (which may still be non-OK) and the number of
        attempts used
    """
    attempts = 0
    for attempt in range(max_retries + 1):
        attempts += 1
        try:
            response = session.get(url, params=params, headers=headers, timeout=timeout)
        except requests.RequestException as e:
            if attempt < max_retries:
                delay = backoff_base_seconds * (attempt + 1)
                logger.warning(
                    "GridStatus fetch error; retrying (attempt=%d, delay=%.1fs, url=%s): %s",
                    attempt, delay, url, e,
                )
                sleep(delay)
                continue
            raise

        if response.status_code == 429 and attempt < max_retries:
            delay = compute_backoff_seconds(response, attempt, backoff_base_seconds)
            logger.warning(
                "GridStatus 429 received; backing off (attempt=%d, delay=%.1fs, url=%s)",
                attempt, delay, url,
            )
            sleep(delay)
            continue

        return response, attempts

    raise MarketDataError(f"No response from {url} after {attempts} attempts")


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def transform_gridstatus_rows(
    rows: Optional[Iterable[Dict[str, Any]]],
    schema: Optional[GridStatusSchemaMapping] = None,
) -> List[PricePoint]:
    """Convert raw GridStatus rows to PricePoints, dropping incomplete rows."""
    if not rows:
        return []

    fields = {target: raw for raw, target in (schema or GridStatusSchemaMapping()).price_schema.items()}
    ts_key = fields["timestamp"]
    utc_key = fields["timestamp_utc"]
    point_key = fields["settlement_point"]
    price_key = fields["price"]

    points = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        if not (row.get(ts_key) and row.get(utc_key) and row.get(point_key)):
            continue
        if not _is_number(row.get(price_key)):
            continue
        points.append(PricePoint(
            timestamp=row[ts_key],
            settlement_point=str(row[point_key]),
            price=float(row[price_key]),
        ))
    return points
