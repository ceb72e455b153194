"""Visualizations of the column pruning and variance filtering stages."""

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
from matplotlib.figure import Figure

from wle_tlbx.analysis.column_pruner import PruningResult
from wle_tlbx.analysis.variance_filter import VarianceFilterResult


def plot_missing_counts(
    result: PruningResult,
    only_missing: bool = True,
    figsize: tuple[int, int] = (10, 12),
) -> Figure:
    """Horizontal bar chart of missing-value counts per column.

    Args:
        result: PruningResult from ColumnPruner.
        only_missing: Show only columns with at least one missing value.
        figsize: Figure size.
    """
    counts = result.missing_counts
    if only_missing:
        counts = counts[counts > 0]
    counts = counts.sort_values(ascending=True)
    dropped = set(result.dropped_missing)
    colors = ["tab:red" if col in dropped else "tab:blue" for col in counts.index]

    fig, ax = plt.subplots(figsize=figsize)
    ax.barh(counts.index.astype(str), counts.to_numpy(), color=colors)
    ax.set_xlabel("Missing values")
    ax.set_title(f"Missing Values per Column ({len(dropped)} dropped)")
    ax.tick_params(axis="y", labelsize=7)
    fig.tight_layout()
    return fig


def plot_nzv_metrics(
    result: VarianceFilterResult,
    figsize: tuple[int, int] = (9, 6),
) -> Figure:
    """Scatter of frequency ratio against percent unique, near-zero-variance columns highlighted.

    The cut-offs are drawn as dashed lines; flagged columns sit in the upper-left region
    (or have zero variance).
    """
    metrics = result.metrics.reset_index()
    metrics["flag"] = np.where(metrics["nzv"], "near-zero variance", "kept")

    fig, ax = plt.subplots(figsize=figsize)
    sns.scatterplot(
        data=metrics,
        x="percent_unique",
        y="freq_ratio",
        hue="flag",
        hue_order=["kept", "near-zero variance"],
        palette={"kept": "tab:blue", "near-zero variance": "tab:red"},
        ax=ax,
    )
    ax.axhline(result.freq_cut, color="black", linewidth=1, linestyle="--")
    ax.axvline(result.unique_cut, color="black", linewidth=1, linestyle="--")
    if (metrics["freq_ratio"] > 0).any():
        ax.set_yscale("symlog")
    ax.set_xlabel("Percent unique values")
    ax.set_ylabel("Frequency ratio (most / second most common)")
    ax.set_title("Near-Zero-Variance Screening")
    fig.tight_layout()
    return fig


__all__ = ["plot_missing_counts", "plot_nzv_metrics"]
