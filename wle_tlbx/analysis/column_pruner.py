"""Column pruning: identifier strip followed by a missingness filter."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

import pandas as pd

from wle_tlbx.data.base_dataset import BaseDataset
from wle_tlbx.errors import SchemaError

from .base_analyser import BaseAnalyser


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PruningResult:
    """Outcome of :class:`ColumnPruner`.

    Attributes:
        dataset: New dataset holding the label and the fully populated sensor columns.
        dropped_identifiers: Bookkeeping columns removed by name.
        dropped_missing: Columns removed by the missingness filter.
        partial_missing: Columns kept although they contain some missing values
            (threshold mode only); resolved by ``partial_strategy``.
        missing_counts: Missing-value count per column considered by the filter.
        n_rows_dropped: Rows removed while resolving partial missingness.
    """

    dataset: BaseDataset
    dropped_identifiers: list[str]
    dropped_missing: list[str]
    partial_missing: list[str] = field(default_factory=list)
    missing_counts: pd.Series = field(default_factory=lambda: pd.Series(dtype=int))
    n_rows_dropped: int = 0

    @property
    def dropped_columns(self) -> list[str]:
        """All columns removed by the pruner."""
        return [*self.dropped_identifiers, *self.dropped_missing]

    def plot_missingness(self, **kwargs: object):
        """Plot missing-value counts per column."""
        from wle_tlbx.plotting.pruning_plots import plot_missing_counts  # noqa: PLC0415

        return plot_missing_counts(self, **kwargs)


class ColumnPruner(BaseAnalyser):
    """Remove bookkeeping columns by name, then columns that are (mostly) missing.

    Missingness filter modes:
        - **Bimodal** (``max_missing_fraction=None``, default): per-column missing counts are
          expected to be either zero or at least ``high_missing_fraction`` of all rows, i.e. a
          column is populated on every row or almost none. Every column with a non-zero count is
          dropped. A count strictly in between violates that precondition and raises
          :class:`~wle_tlbx.errors.SchemaError` instead of silently misapplying the rule.
        - **Threshold** (``max_missing_fraction=f``): columns missing on more than ``f`` of the rows
          are dropped. Columns with partial missingness are kept, a warning is logged, and
          ``partial_strategy`` resolves them: ``"median"`` imputes (median for numeric columns,
          most frequent value for categorical ones), ``"drop"`` deletes the affected rows.

    The label column is never dropped.

    Example:
        >>> from wle_tlbx.data import WLEDataset
        >>> result = WLEDataset.from_csv().make_column_pruner().fit().result()
        >>> result.dropped_missing[:3]
    """

    def __init__(
        self,
        dataset: BaseDataset,
        identifier_columns: Iterable[str] = (),
        max_missing_fraction: float | None = None,
        high_missing_fraction: float = 0.9,
        partial_strategy: Literal["median", "drop"] = "median",
    ) -> None:
        """Initialize the pruner.

        Args:
            dataset: Dataset to prune
            identifier_columns: Column names to strip if present
            max_missing_fraction: Threshold mode cut-off; ``None`` selects bimodal mode
            high_missing_fraction: Minimum missing fraction of a dropped column in bimodal mode
            partial_strategy: How to resolve partially missing columns in threshold mode
        """
        if max_missing_fraction is not None and not 0.0 <= max_missing_fraction < 1.0:
            raise ValueError(f"max_missing_fraction must be in [0, 1), got {max_missing_fraction}")
        if not 0.0 < high_missing_fraction <= 1.0:
            raise ValueError(f"high_missing_fraction must be in (0, 1], got {high_missing_fraction}")
        if partial_strategy not in ("median", "drop"):
            raise ValueError(f"Invalid partial_strategy='{partial_strategy}'. Use 'median' or 'drop'.")

        self._dataset = dataset
        self.identifier_columns = [str(col) for col in identifier_columns]
        self.max_missing_fraction = max_missing_fraction
        self.high_missing_fraction = high_missing_fraction
        self.partial_strategy = partial_strategy
        self._result: PruningResult | None = None

    def fit(self) -> "ColumnPruner":
        """Strip identifiers and apply the missingness filter.

        Raises:
            SchemaError: If the label column is absent, the bimodal precondition is violated,
                or no feature column survives.
        """
        dataset = self._dataset
        label_col = dataset.label_col
        if label_col not in dataset.df.columns:
            raise SchemaError(f"Label column '{label_col}' not found", stage="prune")

        dropped_identifiers = [
            col for col in self.identifier_columns if col in dataset.df.columns and col != label_col
        ]
        stripped = dataset.drop_columns(dropped_identifiers)

        counts = stripped.missing_counts.drop(labels=[label_col])
        n_rows = len(stripped)
        if self.max_missing_fraction is None:
            dropped_missing = self._bimodal_drop(counts, n_rows)
            partial: list[str] = []
        else:
            dropped_missing = counts.index[counts > self.max_missing_fraction * n_rows].tolist()
            partial = counts.index[(counts > 0) & (counts <= self.max_missing_fraction * n_rows)].tolist()

        pruned = stripped.drop_columns(dropped_missing)
        n_rows_dropped = 0
        if partial:
            logger.warning(
                "%d columns are partially missing (%s); resolving with strategy '%s' instead of dropping them",
                len(partial),
                ", ".join(partial),
                self.partial_strategy,
            )
            pruned, n_rows_dropped = self._resolve_partial(pruned, partial)

        if not pruned.feature_columns():
            raise SchemaError("No feature columns remain after pruning", stage="prune")

        logger.info(
            "Pruned %d identifier and %d missing columns; %d feature columns remain",
            len(dropped_identifiers),
            len(dropped_missing),
            len(pruned.feature_columns()),
        )
        self._result = PruningResult(
            dataset=pruned,
            dropped_identifiers=dropped_identifiers,
            dropped_missing=dropped_missing,
            partial_missing=partial,
            missing_counts=counts,
            n_rows_dropped=n_rows_dropped,
        )
        return self

    def _bimodal_drop(self, counts: pd.Series, n_rows: int) -> list[str]:
        """Columns to drop under the all-or-nothing missingness precondition."""
        nonzero = counts[counts > 0]
        low = nonzero[nonzero < self.high_missing_fraction * n_rows]
        if not low.empty:
            detail = ", ".join(f"{col}={int(n)}" for col, n in low.items())
            raise SchemaError(
                f"Missingness is not bimodal: {len(low)} columns are missing on fewer than "
                f"{self.high_missing_fraction:.0%} of {n_rows} rows ({detail}). "
                "Use a max_missing_fraction threshold to impute or drop rows instead.",
                stage="prune",
            )
        return nonzero.index.tolist()

    def _resolve_partial(self, dataset: BaseDataset, columns: list[str]) -> tuple[BaseDataset, int]:
        """Impute or row-delete the partially missing columns."""
        df = dataset.df
        if self.partial_strategy == "drop":
            kept = df.dropna(subset=columns).reset_index(drop=True)
            return dataset.with_frame(kept), len(df) - len(kept)

        numeric = set(dataset.numeric_cols)
        fills: dict[str, object] = {}
        for col in columns:
            fills[col] = df[col].median() if col in numeric else df[col].mode(dropna=True).iloc[0]
        return dataset.with_frame(df.fillna(value=fills)), 0

    def result(self) -> PruningResult:
        """Return the pruning result.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if self._result is None:
            raise ValueError("Must call fit() before result()")
        return self._result
