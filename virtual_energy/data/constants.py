"""Constants for data column names and standardizations."""
from __future__ import annotations

# Standard column names
COL_TIMESTAMP = "timestamp"
COL_HOUR_START = "hour_start"
COL_SETTLEMENT_POINT = "settlement_point"
COL_PRICE_USD = "price_usd"
COL_DA_PRICE = "da_price"
COL_RT_PRICE = "avg_rt_price"
COL_SPREAD = "spread"
COL_CLEARED_QTY = "cleared_qty"
COL_POSITION = "position"
COL_PNL = "pnl"

# GridStatus ERCOT query parameters
GRIDSTATUS_TIMEZONE = "US/Central"

# Columns accepted when loading bids from CSV
BID_COLUMNS = ["hour_start", "side", "price", "quantity_mwh"]
