"""Confusion-matrix based classification metrics."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.metrics import confusion_matrix


def confusion_frame(y_true: Sequence, y_pred: Sequence, labels: Sequence[str]) -> pd.DataFrame:
    """Labels x labels count table; rows = true label, columns = predicted label."""
    labels = list(labels)
    matrix = confusion_matrix(np.asarray(y_true), np.asarray(y_pred), labels=labels)
    return pd.DataFrame(
        matrix,
        index=pd.Index(labels, name="true"),
        columns=pd.Index(labels, name="predicted"),
    )


def accuracy_from_confusion(confusion: pd.DataFrame) -> float:
    """trace / total (NaN for an empty table)."""
    total = int(confusion.to_numpy().sum())
    if total == 0:
        return float("nan")
    return float(np.trace(confusion.to_numpy()) / total)


def per_label_accuracy(confusion: pd.DataFrame) -> pd.Series:
    """diagonal[label] / row_sum[label]; NaN for labels absent from the true values."""
    values = confusion.to_numpy().astype(float)
    row_sums = values.sum(axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        acc = np.where(row_sums > 0, np.diag(values) / row_sums, np.nan)
    return pd.Series(acc, index=confusion.index.copy(), name="accuracy")


def per_label_specificity(confusion: pd.DataFrame) -> pd.Series:
    """TN / (TN + FP) per label, treating each label one-vs-rest."""
    values = confusion.to_numpy().astype(float)
    total = values.sum()
    tp = np.diag(values)
    fp = values.sum(axis=0) - tp
    fn = values.sum(axis=1) - tp
    tn = total - tp - fp - fn
    with np.errstate(divide="ignore", invalid="ignore"):
        specificity = np.where(tn + fp > 0, tn / (tn + fp), np.nan)
    return pd.Series(specificity, index=confusion.index.copy(), name="specificity")


def cohen_kappa(confusion: pd.DataFrame) -> float:
    r"""Cohen's :math:`\kappa = (p_o - p_e) / (1 - p_e)` from a confusion table."""
    values = confusion.to_numpy().astype(float)
    total = values.sum()
    if total == 0:
        return float("nan")
    p_o = np.trace(values) / total
    p_e = float((values.sum(axis=0) * values.sum(axis=1)).sum() / total**2)
    if np.isclose(p_e, 1.0):
        return 1.0 if np.isclose(p_o, 1.0) else 0.0
    return float((p_o - p_e) / (1.0 - p_e))


def accuracy_confidence_interval(n_correct: int, n_total: int, level: float = 0.95) -> tuple[float, float]:
    """Exact (Clopper-Pearson) binomial confidence interval for an accuracy."""
    if n_total == 0:
        return float("nan"), float("nan")
    alpha = 1.0 - level
    lower = 0.0 if n_correct == 0 else float(stats.beta.ppf(alpha / 2, n_correct, n_total - n_correct + 1))
    upper = 1.0 if n_correct == n_total else float(stats.beta.ppf(1 - alpha / 2, n_correct + 1, n_total - n_correct))
    return lower, upper


def no_information_rate(confusion: pd.DataFrame) -> float:
    """Share of the most frequent true label (accuracy of always predicting it)."""
    row_sums = confusion.to_numpy().sum(axis=1)
    total = row_sums.sum()
    return float(row_sums.max() / total) if total else float("nan")


__all__ = [
    "accuracy_confidence_interval",
    "accuracy_from_confusion",
    "cohen_kappa",
    "confusion_frame",
    "no_information_rate",
    "per_label_accuracy",
    "per_label_specificity",
]
