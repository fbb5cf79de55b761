"""Price comparison and P&L charts for a trading day."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from virtual_energy.core.market import HourlyClear
from virtual_energy.core.market_time import format_hour_for_display
from virtual_energy.data.constants import COL_DA_PRICE, COL_HOUR_START, COL_RT_PRICE

sns.set_theme(style="whitegrid", context="paper")
plt.rcParams.update({
    "figure.dpi": 150,
    "savefig.dpi": 150,
    "font.size": 10,
    "axes.labelsize": 10,
    "axes.titlesize": 11,
    "xtick.labelsize": 8,
    "ytick.labelsize": 9,
    "legend.fontsize": 9,
})


def plot_price_comparison(
    comparison: pd.DataFrame,
    hourly_clears: Optional[Iterable[HourlyClear]] = None,
    save_path: Optional[Path] = None,
    title: str = "Price Comparison (Day-Ahead vs Real-Time)",
) -> plt.Figure:
    """Plot DA prices against RT hourly averages, with hourly P&L bars below.

    ``comparison`` is the frame from ``build_price_comparison``. Hours with a
    missing price leave a gap in that line.
    """
    has_data = not comparison.empty and (
        comparison[COL_DA_PRICE].notna().any() or comparison[COL_RT_PRICE].notna().any()
    )
    if not has_data:
        fig, ax = plt.subplots(figsize=(10, 4))
        ax.text(0.5, 0.5, "No price data available", ha="center", va="center")
        ax.set_axis_off()
        if save_path:
            fig.savefig(save_path, bbox_inches="tight")
        return fig

    clears = list(hourly_clears) if hourly_clears is not None else []
    n_rows = 2 if clears else 1
    fig, axes = plt.subplots(n_rows, 1, figsize=(10, 3.5 * n_rows), squeeze=False)
    axes = axes[:, 0]

    positions = np.arange(len(comparison))
    labels = [format_hour_for_display(h) for h in comparison[COL_HOUR_START]]

    axes[0].plot(positions, comparison[COL_DA_PRICE].astype(float), label="Day-Ahead",
                 color="steelblue", linewidth=1.5, marker="o", markersize=3)
    axes[0].plot(positions, comparison[COL_RT_PRICE].astype(float), label="Real-Time (hourly avg)",
                 color="darkorange", linewidth=1.5, marker="s", markersize=3)
    axes[0].set_ylabel("Price ($/MWh)")
    axes[0].set_title(title)
    axes[0].set_xticks(positions)
    axes[0].set_xticklabels(labels, rotation=90)
    axes[0].legend()
    axes[0].grid(True, alpha=0.3)

    if clears:
        pnl_positions = np.arange(len(clears))
        pnl = np.array([c.pnl for c in clears], dtype=float)
        colors = ["seagreen" if value >= 0 else "crimson" for value in pnl]
        axes[1].bar(pnl_positions, pnl, color=colors, alpha=0.8)
        axes[1].axhline(0, color="black", linewidth=0.8, alpha=0.5)
        axes[1].set_ylabel("P&L ($)")
        axes[1].set_title("Hourly P&L")
        axes[1].set_xticks(pnl_positions)
        axes[1].set_xticklabels([format_hour_for_display(c.hour_start) for c in clears], rotation=90)
        axes[1].grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, bbox_inches="tight")

    return fig
