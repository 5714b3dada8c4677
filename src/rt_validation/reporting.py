"""
Comparison of recovered Rt against the simulated truth.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from .cori import RtEstimate, merge_estimates
from .seir import SimulationTrajectory
from .series import IncidenceSeries


def comparison_table(trajectory: SimulationTrajectory, *estimates: RtEstimate) -> pd.DataFrame:
    """True R0/Rt per day joined with every estimate on window end time."""
    truth = trajectory.frame[["time", "R0", "Rt"]]
    if not estimates:
        return truth.copy()
    merged = truth.merge(merge_estimates(*estimates), on="time", how="outer")
    return merged.sort_values("time").reset_index(drop=True)


def first_crossing(
    table: pd.DataFrame, column: str, after: float, threshold: float = 1.0
) -> int | None:
    """First time at or after ``after`` where ``column`` is below ``threshold``."""
    rows = table[(table["time"] >= after) & (table[column] < threshold)]
    if rows.empty:
        return None
    return int(rows["time"].iloc[0])


def detection_lag(
    table: pd.DataFrame, change_time: float, columns: list[str], threshold: float = 1.0
) -> dict[str, int | None]:
    """Days from ``change_time`` until each column first drops below ``threshold``."""
    lags = {}
    for column in columns:
        crossing = first_crossing(table, column, change_time, threshold)
        lags[column] = None if crossing is None else int(crossing - change_time)
    return lags


def plot_comparison(
    incidence: list[IncidenceSeries],
    table: pd.DataFrame,
    estimates: list[RtEstimate],
    path: str | Path | None = None,
    title: str = "Simulated epidemic and recovered Rt",
):
    """
    Two panels: incidence series on top, true vs estimated Rt below.

    Saves to ``path`` when given and returns the figure.
    """
    sns.set_theme(style="whitegrid", palette="viridis")
    colors = sns.color_palette("viridis", max(len(incidence), len(estimates)) + 1)
    fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    # Incidence
    ax1 = axes[0]
    for series, color in zip(incidence, colors):
        ax1.plot(series.time, series.counts, linewidth=1.5, color=color, label=series.name)
    ax1.set_ylabel("Daily count", fontsize=11)
    ax1.set_title(title, fontsize=14, fontweight="bold")
    ax1.legend(loc="upper right")

    # Rt
    ax2 = axes[1]
    ax2.plot(table["time"], table["Rt"], color="black", linewidth=2, label="true Rt")
    for estimate, color in zip(estimates, colors):
        rows = table.dropna(subset=[estimate.mean_column])
        ax2.fill_between(
            rows["time"],
            rows[estimate.lower_column],
            rows[estimate.upper_column],
            alpha=0.3,
            color=color,
        )
        ax2.plot(
            rows["time"],
            rows[estimate.mean_column],
            linewidth=2,
            color=color,
            label=f"{estimate.name} (95% CI)",
        )
    ax2.axhline(y=1, color="red", linestyle="--", alpha=0.7, linewidth=1.5, label="Rt = 1")
    ax2.set_ylabel("Effective Reproduction Number (Rt)", fontsize=11)
    ax2.set_xlabel("Day", fontsize=11)
    ax2.legend(loc="upper right")
    upper = np.nanmax(table["Rt"].to_numpy())
    ax2.set_ylim(0, max(2.5, float(upper) * 1.2))

    fig.tight_layout()
    if path is not None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, dpi=150)
    return fig
