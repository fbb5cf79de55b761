"""Reporting and charting for clearing results."""

from virtual_energy.analysis.plots import plot_price_comparison
from virtual_energy.analysis.report import (
    format_clearing_table,
    format_currency,
    format_mwh,
    format_summary,
)

__all__ = [
    "plot_price_comparison",
    "format_clearing_table",
    "format_currency",
    "format_mwh",
    "format_summary",
]
