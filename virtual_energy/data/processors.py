"""Data processing and transformation utilities."""
from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from virtual_energy.core.market import HourlyAverage, HourlyClear, PricePoint
from virtual_energy.core.market_time import MARKET_TIMEZONE, floor_to_market_hour
from virtual_energy.data.constants import (
    COL_CLEARED_QTY,
    COL_DA_PRICE,
    COL_HOUR_START,
    COL_PNL,
    COL_POSITION,
    COL_PRICE_USD,
    COL_RT_PRICE,
    COL_SETTLEMENT_POINT,
    COL_SPREAD,
    COL_TIMESTAMP,
)

CLEAR_COLUMNS = [
    COL_HOUR_START, COL_DA_PRICE, COL_RT_PRICE, COL_SPREAD, COL_CLEARED_QTY, COL_POSITION, COL_PNL,
]


def prices_to_frame(points: Iterable[PricePoint]) -> pd.DataFrame:
    """Return price points as a frame sorted by timestamp."""
    df = pd.DataFrame(
        [
            {
                COL_TIMESTAMP: p.timestamp,
                COL_SETTLEMENT_POINT: p.settlement_point,
                COL_PRICE_USD: p.price,
            }
            for p in points
        ],
        columns=[COL_TIMESTAMP, COL_SETTLEMENT_POINT, COL_PRICE_USD],
    )
    if df.empty:
        return df
    return df.sort_values(COL_TIMESTAMP).reset_index(drop=True)


def clears_to_frame(hourly_clears: Iterable[HourlyClear]) -> pd.DataFrame:
    """Tabulate clearing results; absent prices become NaN."""
    records = [
        {
            COL_HOUR_START: c.hour_start,
            COL_DA_PRICE: np.nan if c.da_price is None else c.da_price,
            COL_RT_PRICE: np.nan if c.avg_rt_price is None else c.avg_rt_price,
            COL_SPREAD: np.nan if c.spread is None else c.spread,
            COL_CLEARED_QTY: c.cleared_qty,
            COL_POSITION: c.position,
            COL_PNL: c.pnl,
        }
        for c in hourly_clears
    ]
    return pd.DataFrame(records, columns=CLEAR_COLUMNS)


def build_price_comparison(
    da_prices: Iterable[PricePoint],
    rt_averages: Iterable[HourlyAverage],
) -> pd.DataFrame:
    """DA price, RT hourly average and spread over every hour with either price.

    Unlike the clearing output, RT-only hours are included here.
    """
    da = {floor_to_market_hour(p.timestamp): float(p.price) for p in da_prices}
    rt = {floor_to_market_hour(a.hour_start): float(a.avg_price) for a in rt_averages}

    hours = sorted(set(da) | set(rt))
    df = pd.DataFrame(
        {
            COL_HOUR_START: pd.DatetimeIndex(hours, tz=MARKET_TIMEZONE),
            COL_DA_PRICE: [da.get(h, np.nan) for h in hours],
            COL_RT_PRICE: [rt.get(h, np.nan) for h in hours],
        }
    )
    df[COL_SPREAD] = df[COL_RT_PRICE] - df[COL_DA_PRICE]
    return df
