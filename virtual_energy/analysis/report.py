"""Text rendering of clearing results and the trading summary."""
from __future__ import annotations

from typing import Iterable, List, Optional

from virtual_energy.core.market import ClearingSummary, HourlyClear
from virtual_energy.core.market_time import format_hour_for_display

NOT_AVAILABLE = "N/A"


def format_currency(value: float) -> str:
    """``$1,234.50`` or ``-$12.00``."""
    if value >= 0:
        return f"${value:,.2f}"
    return f"-${abs(value):,.2f}"


def format_signed_currency(value: float) -> str:
    if value == 0:
        return "$0.00"
    return f"+{format_currency(value)}" if value > 0 else format_currency(value)


def format_mwh(value: float) -> str:
    return f"{value:.1f} MWh"


def _price(value: Optional[float]) -> str:
    return NOT_AVAILABLE if value is None else f"${value:,.2f}"


def _spread(value: Optional[float]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"+${value:,.2f}" if value >= 0 else f"-${abs(value):,.2f}"


def _quantity(value: float) -> str:
    if value == 0:
        return "0.0"
    return f"{value:+.1f}"


def format_clearing_table(hourly_clears: Iterable[HourlyClear]) -> str:
    """Render hourly clears as a fixed-width table with a total row."""
    clears = list(hourly_clears)
    if not clears:
        return "No clearing results. Add bids and fetch market data."

    header = ["Hour", "DA Price", "RT Avg", "Spread", "Cleared Qty", "Position", "P&L"]
    rows: List[List[str]] = [
        [
            format_hour_for_display(c.hour_start),
            _price(c.da_price),
            _price(c.avg_rt_price),
            _spread(c.spread),
            _quantity(c.cleared_qty),
            c.position,
            format_signed_currency(c.pnl),
        ]
        for c in clears
    ]
    rows.append(["Total", "", "", "", "", "", format_signed_currency(sum(c.pnl for c in clears))])

    widths = [max(len(r[i]) for r in [header] + rows) for i in range(len(header))]
    lines = [
        "  ".join(cell.ljust(widths[i]) if i == 0 else cell.rjust(widths[i]) for i, cell in enumerate(row))
        for row in [header] + rows
    ]
    lines.insert(1, "  ".join("-" * w for w in widths))
    lines.insert(len(lines) - 1, "  ".join("-" * w for w in widths))
    return "\n".join(lines)


def format_summary(summary: ClearingSummary) -> str:
    """Trading summary block."""
    return "\n".join([
        "Trading Summary",
        f"  Total P&L:             {format_currency(summary.total_pnl)}",
        f"  Total Cleared Volume:  {format_mwh(summary.total_cleared_qty)}",
        f"  Long Position:         {format_mwh(summary.long_qty)}",
        f"  Short Position:        {format_mwh(summary.short_qty)}",
        f"  Hours with Positions:  {summary.hours_with_positions}",
        f"  Hours with P&L:        {summary.hours_with_pnl}",
        f"  Avg P&L per Hour:      {format_currency(summary.avg_pnl_per_hour)}",
    ])
