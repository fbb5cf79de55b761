"""Reduce sub-hourly real-time prices to one average per clock hour."""
from __future__ import annotations

from typing import Iterable, List

import pandas as pd

from virtual_energy.core.market import HourlyAverage, PricePoint
from virtual_energy.core.market_time import floor_to_market_hour
from virtual_energy.data.constants import (
    COL_HOUR_START,
    COL_PRICE_USD,
    COL_SETTLEMENT_POINT,
    COL_TIMESTAMP,
)


def average_rt_to_hourly(samples: Iterable[PricePoint]) -> List[HourlyAverage]:
    """
    Average 5-minute RT prices into clock-hour buckets.

    Each sample counts once regardless of its interval length. Input order
    does not matter: samples are sorted before aggregation so the result is
    bit-for-bit identical for any permutation.

    Parameters
    ----------
    samples : Iterable[PricePoint]
        RT observations for a single settlement point. Mixing settlement
        points in one call is not supported; the reported point is taken
        from the earliest sample of each hour.

    Returns
    -------
    List[HourlyAverage]
        One entry per hour that has at least one sample, ascending by hour.
    """
    records = [
        {
            COL_HOUR_START: floor_to_market_hour(sample.timestamp),
            COL_TIMESTAMP: sample.timestamp,
            COL_SETTLEMENT_POINT: sample.settlement_point,
            COL_PRICE_USD: float(sample.price),
        }
        for sample in samples
    ]
    if not records:
        return []

    df = pd.DataFrame(records)
    df = df.sort_values(
        [COL_TIMESTAMP, COL_SETTLEMENT_POINT, COL_PRICE_USD], kind="mergesort"
    ).reset_index(drop=True)

    grouped = df.groupby(COL_HOUR_START, sort=True).agg(
        avg_price=(COL_PRICE_USD, "mean"),
        settlement_point=(COL_SETTLEMENT_POINT, "first"),
        sample_count=(COL_PRICE_USD, "size"),
    )

    return [
        HourlyAverage(
            hour_start=row.Index,
            avg_price=float(row.avg_price),
            settlement_point=str(row.settlement_point),
            sample_count=int(row.sample_count),
        )
        for row in grouped.itertuples()
    ]
