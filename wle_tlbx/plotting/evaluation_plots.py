"""Model evaluation visualization functions."""

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure

from wle_tlbx.analysis.model_trainer import FittedModel
from wle_tlbx.utils.plotting_config import DEFAULT_PLOT_CFG


def plot_confusion_matrix(
    confusion: pd.DataFrame,
    normalize: bool = False,
    title: str = "Confusion Matrix",
    figsize: tuple[int, int] = (7, 6),
    **kwargs: object,
) -> Figure:
    """Heatmap of a confusion matrix (rows = true label, columns = predicted label).

    Args:
        confusion: Count table as produced by the evaluator or the trainer (out-of-bag).
        normalize: Show row shares instead of counts.
        title: Axes title.
        figsize: Figure size.
        **kwargs: Forwarded to :func:`seaborn.heatmap`.
    """
    table = confusion.astype(float)
    if normalize:
        table = table.div(table.sum(axis=1).replace(0, float("nan")), axis=0)

    fig, ax = plt.subplots(figsize=figsize)
    sns.heatmap(
        table,
        annot=True,
        fmt=".2f" if normalize else ".0f",
        cmap=DEFAULT_PLOT_CFG.heatmap_cmap,
        square=True,
        cbar_kws={"shrink": 0.8},
        ax=ax,
        **kwargs,  # type: ignore[arg-type]
    )
    ax.set_xlabel("Predicted")
    ax.set_ylabel("True")
    ax.tick_params(axis="y", rotation=0)
    ax.set_title(title)
    fig.tight_layout()
    return fig


def plot_feature_importances(
    model: FittedModel,
    top_n: int = 20,
    figsize: tuple[int, int] = (9, 8),
) -> Figure:
    """Bar chart of the ``top_n`` most important features (mean decrease in impurity)."""
    importances = model.feature_importances().head(top_n).rename_axis("feature").reset_index()

    fig, ax = plt.subplots(figsize=figsize)
    sns.barplot(data=importances, x="importance", y="feature", color="tab:blue", ax=ax)
    ax.set_xlabel("Mean decrease in impurity")
    ax.set_ylabel("")
    ax.set_title(f"Top {len(importances)} Feature Importances")
    fig.tight_layout()
    return fig


__all__ = ["plot_confusion_matrix", "plot_feature_importances"]
