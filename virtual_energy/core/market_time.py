"""Market-time helpers and the order-entry cutoff for ERCOT trading dates.

ERCOT operates on America/Chicago wall-clock time. All hour buckets are
timezone-aware ``pd.Timestamp`` values in that zone, so they compare by
instant and stay distinct across daylight-saving transitions.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Union

import pandas as pd

MARKET_TIMEZONE = "America/Chicago"
MARKET_TIMEZONE_LABEL = "CT"
CUTOFF_HOUR = 11  # 11:00 AM market time
CUTOFF_MINUTE = 0

TimestampLike = Union[str, datetime, pd.Timestamp]
DateLike = Union[str, date, datetime, pd.Timestamp]


def to_market_time(value: TimestampLike) -> pd.Timestamp:
    """Convert a timestamp to market time.

    Offset-aware inputs are converted. Naive inputs are read as market-local
    wall time: an ambiguous fall-back time resolves to the first (daylight)
    occurrence and a nonexistent spring-forward time shifts forward.
    """
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        return ts.tz_localize(MARKET_TIMEZONE, ambiguous=True, nonexistent="shift_forward")
    return ts.tz_convert(MARKET_TIMEZONE)


def floor_to_market_hour(value: TimestampLike) -> pd.Timestamp:
    """Truncate to the start of the containing clock hour in market time.

    Subtracts the elapsed wall-clock minutes rather than re-localizing, so the
    two 01:00 hours of a fall-back day remain separate buckets.
    """
    ts = to_market_time(value)
    return ts - pd.Timedelta(
        minutes=ts.minute,
        seconds=ts.second,
        microseconds=ts.microsecond,
        nanoseconds=ts.nanosecond,
    )


def get_current_market_time() -> pd.Timestamp:
    """Get current time in market timezone."""
    return pd.Timestamp.now(tz=MARKET_TIMEZONE)


def to_trading_date(value: DateLike) -> date:
    """Return the market-time calendar date of ``value``."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert(MARKET_TIMEZONE)
    return ts.date()


def market_start_of_day(trading_date: DateLike) -> pd.Timestamp:
    """Midnight of the trading date in market time."""
    day = to_trading_date(trading_date)
    return pd.Timestamp(day.year, day.month, day.day).tz_localize(MARKET_TIMEZONE)


def get_hour_starts_for_date(trading_date: DateLike) -> List[pd.Timestamp]:
    """Hour starts for a trading date.

    A normal day has 24 hours, a spring-forward day 23 and a fall-back day 25.
    """
    start = market_start_of_day(trading_date)
    end = market_start_of_day(to_trading_date(trading_date) + timedelta(days=1))
    return list(pd.date_range(start=start, end=end, freq="h", inclusive="left"))


def format_hour_for_display(hour_start: TimestampLike) -> str:
    """Format an hour start for display, e.g. ``"14:00 CT"``."""
    return f"{to_market_time(hour_start).strftime('%H:%M')} {MARKET_TIMEZONE_LABEL}"


def get_today_in_market_time() -> date:
    return get_current_market_time().date()


def is_today(trading_date: DateLike) -> bool:
    return to_trading_date(trading_date) == get_today_in_market_time()


@dataclass(frozen=True)
class CutoffStatus:
    """Order-entry status for a trading date at one instant."""

    is_cutoff_passed: bool
    cutoff_time: pd.Timestamp
    current_time: pd.Timestamp
    display_text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_cutoff_passed": self.is_cutoff_passed,
            "cutoff_time": self.cutoff_time.isoformat(),
            "current_time": self.current_time.isoformat(),
            "display_text": self.display_text,
        }


def get_cutoff_time(
    trading_date: DateLike,
    cutoff_hour: int = CUTOFF_HOUR,
    cutoff_minute: int = CUTOFF_MINUTE,
) -> pd.Timestamp:
    """Cutoff instant (default 11:00 market time) on the trading date."""
    day = to_trading_date(trading_date)
    wall = pd.Timestamp(day.year, day.month, day.day, cutoff_hour, cutoff_minute)
    return wall.tz_localize(MARKET_TIMEZONE, ambiguous=True, nonexistent="shift_forward")


def get_cutoff_status(
    trading_date: DateLike,
    now: Optional[TimestampLike] = None,
    cutoff_hour: int = CUTOFF_HOUR,
    cutoff_minute: int = CUTOFF_MINUTE,
) -> CutoffStatus:
    """Check whether order entry for ``trading_date`` is still open.

    Parameters
    ----------
    trading_date : date, datetime or str
        Trading date; only its market-time calendar date is used.
    now : datetime or str, optional
        Clock reading to evaluate against. Defaults to the current instant.
    cutoff_hour, cutoff_minute : int
        Cutoff wall-clock time in market time.

    Returns
    -------
    CutoffStatus
        ``is_cutoff_passed`` is true only when ``now`` is strictly after the
        cutoff. Callers poll this; the result changes as time passes.
    """
    current_time = get_current_market_time() if now is None else to_market_time(now)
    cutoff_time = get_cutoff_time(trading_date, cutoff_hour, cutoff_minute)
    is_cutoff_passed = current_time > cutoff_time

    if is_cutoff_passed:
        display_text = "Order entry closed"
    else:
        display_text = (
            f"Order entry open until {cutoff_time.strftime('%H:%M')} {MARKET_TIMEZONE_LABEL}"
        )

    return CutoffStatus(
        is_cutoff_passed=is_cutoff_passed,
        cutoff_time=cutoff_time,
        current_time=current_time,
        display_text=display_text,
    )
