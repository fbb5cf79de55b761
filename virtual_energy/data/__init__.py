"""Market-data retrieval and processing for ERCOT settlement point prices."""

from virtual_energy.data.client import GridStatusClient
from virtual_energy.data.endpoints import GridStatusEndpoints, GridStatusSchemaMapping
from virtual_energy.data.fetchers import (
    compute_backoff_seconds,
    fetch_with_retry,
    transform_gridstatus_rows,
)
from virtual_energy.data.processors import (
    build_price_comparison,
    clears_to_frame,
    prices_to_frame,
)
from virtual_energy.data.constants import (
    COL_TIMESTAMP,
    COL_HOUR_START,
    COL_PRICE_USD,
    COL_SETTLEMENT_POINT,
)

__all__ = [
    "GridStatusClient",
    "GridStatusEndpoints",
    "GridStatusSchemaMapping",
    "compute_backoff_seconds",
    "fetch_with_retry",
    "transform_gridstatus_rows",
    "build_price_comparison",
    "clears_to_frame",
    "prices_to_frame",
    "COL_TIMESTAMP",
    "COL_HOUR_START",
    "COL_PRICE_USD",
    "COL_SETTLEMENT_POINT",
]
