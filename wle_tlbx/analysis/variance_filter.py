"""Near-zero-variance predictor screening."""

import logging
from dataclasses import dataclass

import pandas as pd

from wle_tlbx.data.base_dataset import BaseDataset
from wle_tlbx.errors import SchemaError

from .base_analyser import BaseAnalyser


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VarianceFilterResult:
    """Outcome of :class:`NearZeroVarianceFilter`.

    Attributes:
        dataset: New dataset without the near-zero-variance columns.
        metrics: One row per screened column with ``freq_ratio``, ``percent_unique``,
            ``zero_var`` and ``nzv`` (drop flag).
        dropped_columns: Columns flagged ``nzv``, in dataset order.
        freq_cut: Frequency-ratio cut-off used.
        unique_cut: Percent-unique cut-off used.
    """

    dataset: BaseDataset
    metrics: pd.DataFrame
    dropped_columns: list[str]
    freq_cut: float
    unique_cut: float

    def plot_metrics(self, **kwargs: object):
        """Scatter frequency ratio against percent unique values."""
        from wle_tlbx.plotting.pruning_plots import plot_nzv_metrics  # noqa: PLC0415

        return plot_nzv_metrics(self, **kwargs)


class NearZeroVarianceFilter(BaseAnalyser):
    r"""Drop predictors whose values are overwhelmingly concentrated on a single value.

    For each non-label column (missing values ignored):

    - :math:`\text{freq\_ratio} = n_{(1)} / n_{(2)}`, the count of the most frequent value over the
      count of the second most frequent one
    - :math:`\text{percent\_unique} = 100 \cdot n_\text{distinct} / n_\text{rows}`

    A column is near-zero-variance if it has at most one distinct value, or if
    ``freq_ratio >= freq_cut`` and ``percent_unique <= unique_cut``. Defaults follow caret's
    ``nearZeroVar`` (``freq_cut = 95/5``, ``unique_cut = 10``).

    Categorical columns are screened too: the frequency ratio does not depend on the value type,
    and mostly blank summary columns are exactly what the filter is meant to catch.

    Attributes:
        freq_cut: Frequency-ratio cut-off.
        unique_cut: Percent-unique cut-off (0-100).
    """

    def __init__(self, dataset: BaseDataset, freq_cut: float = 95 / 5, unique_cut: float = 10.0) -> None:
        """Initialize the filter.

        Args:
            dataset: Dataset to screen
            freq_cut: Frequency-ratio cut-off (default: 19)
            unique_cut: Percent-unique cut-off (default: 10)
        """
        if freq_cut < 1.0:
            raise ValueError(f"freq_cut must be >= 1, got {freq_cut}")
        if not 0.0 <= unique_cut <= 100.0:
            raise ValueError(f"unique_cut must be in [0, 100], got {unique_cut}")
        self._dataset = dataset
        self.freq_cut = freq_cut
        self.unique_cut = unique_cut
        self._result: VarianceFilterResult | None = None

    @staticmethod
    def column_metrics(values: pd.Series, n_rows: int) -> dict[str, float | bool]:
        """Frequency ratio, percent unique and zero-variance flag of one column."""
        counts = values.value_counts(dropna=True)
        n_distinct = len(counts)
        if n_distinct <= 1:
            freq_ratio = 0.0
        else:
            top_two = counts.nlargest(2).to_numpy()
            freq_ratio = float(top_two[0] / top_two[1])
        percent_unique = 100.0 * n_distinct / n_rows if n_rows else 0.0
        return {"freq_ratio": freq_ratio, "percent_unique": percent_unique, "zero_var": n_distinct <= 1}

    def fit(self) -> "NearZeroVarianceFilter":
        """Compute per-column metrics and drop the flagged columns.

        Raises:
            SchemaError: If every feature column is flagged.
        """
        dataset = self._dataset
        n_rows = len(dataset)
        feature_cols = dataset.feature_columns()

        metrics = pd.DataFrame.from_dict(
            {col: self.column_metrics(dataset.df[col], n_rows) for col in feature_cols},
            orient="index",
            columns=["freq_ratio", "percent_unique", "zero_var"],
        ).astype({"freq_ratio": float, "percent_unique": float, "zero_var": bool})
        metrics.index.name = "column"
        metrics["nzv"] = metrics["zero_var"] | (
            (metrics["freq_ratio"] >= self.freq_cut) & (metrics["percent_unique"] <= self.unique_cut)
        )

        dropped = metrics.index[metrics["nzv"].to_numpy(dtype=bool)].tolist()
        if feature_cols and len(dropped) == len(feature_cols):
            raise SchemaError("Every feature column is near-zero-variance", stage="variance_filter")

        logger.info("Near-zero-variance filter dropped %d of %d columns", len(dropped), len(feature_cols))
        self._result = VarianceFilterResult(
            dataset=dataset.drop_columns(dropped),
            metrics=metrics,
            dropped_columns=dropped,
            freq_cut=self.freq_cut,
            unique_cut=self.unique_cut,
        )
        return self

    def result(self) -> VarianceFilterResult:
        """Return the filter result.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if self._result is None:
            raise ValueError("Must call fit() before result()")
        return self._result


__all__ = ["NearZeroVarianceFilter", "VarianceFilterResult"]
