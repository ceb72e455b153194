"""Plotting utilities for pipeline results."""

from .evaluation_plots import plot_confusion_matrix, plot_feature_importances
from .pruning_plots import plot_missing_counts, plot_nzv_metrics


__all__ = [
    "plot_confusion_matrix",
    "plot_feature_importances",
    "plot_missing_counts",
    "plot_nzv_metrics",
]
