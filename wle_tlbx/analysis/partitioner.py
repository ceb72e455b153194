"""Stratified train/test partitioning over the label column."""

import logging
import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from wle_tlbx.data.base_dataset import BaseDataset
from wle_tlbx.errors import SchemaError

from .base_analyser import BaseAnalyser


logger = logging.getLogger(__name__)


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves away from zero (``round()`` would round to even)."""
    return int(math.floor(x + 0.5))


@dataclass(frozen=True, eq=False)
class Split:
    """Disjoint positional row indices of the train and held-out subsets.

    Attributes:
        train_idx: Sorted positions of the training rows.
        test_idx: Sorted positions of the held-out rows.
        train_fraction: Requested share of each label level in ``train_idx``.
        seed: Seed that produced the split.
    """

    train_idx: np.ndarray
    test_idx: np.ndarray
    train_fraction: float
    seed: int | None = None

    @property
    def n_rows(self) -> int:
        return len(self.train_idx) + len(self.test_idx)

    def apply(self, dataset: BaseDataset) -> tuple[BaseDataset, BaseDataset]:
        """Materialize the ``(train, test)`` datasets.

        Raises:
            ValueError: If the dataset does not have the number of rows the split was computed on.
        """
        if len(dataset) != self.n_rows:
            raise ValueError(f"Split covers {self.n_rows} rows but dataset has {len(dataset)}")
        return dataset.take_rows(self.train_idx), dataset.take_rows(self.test_idx)

    def label_counts(self, dataset: BaseDataset) -> pd.DataFrame:
        """Per-level row counts in each subset (class balance report)."""
        labels = dataset.df[dataset.label_col].to_numpy()
        table = pd.DataFrame(
            {
                "train": pd.Series(labels[self.train_idx]).value_counts(),
                "test": pd.Series(labels[self.test_idx]).value_counts(),
            },
        ).fillna(0).astype(int).sort_index()
        table["total"] = table["train"] + table["test"]
        table["train_share"] = table["train"] / table["total"]
        table.index.name = dataset.label_col
        return table


class StratifiedPartitioner(BaseAnalyser):
    """Split rows into training and held-out subsets, preserving each label's proportion.

    For every label level (visited in sorted order) ``round_half_up(p * n_level)`` row
    positions are drawn uniformly without replacement into the training subset; the
    remaining positions of that level form the held-out subset. A single
    :func:`numpy.random.default_rng` seeded with ``seed`` drives all draws, so the same
    seed, data and fraction always produce the same split.

    Attributes:
        train_fraction: Target share ``p`` of every level in the training subset, in (0, 1).
        seed: Random seed (``None`` draws fresh OS entropy).
    """

    def __init__(
        self,
        dataset: BaseDataset,
        train_fraction: float = 0.6,
        seed: int | None = None,
        label_col: str | None = None,
    ) -> None:
        """Initialize the partitioner.

        Args:
            dataset: Dataset whose rows are split
            train_fraction: Target share of rows in the training subset, in (0, 1)
            seed: Random seed for reproducibility
            label_col: Column to stratify on (defaults to the dataset's label)
        """
        if not 0.0 < train_fraction < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")
        self._dataset = dataset
        self.train_fraction = train_fraction
        self.seed = seed
        self.label_col = label_col or dataset.label_col
        self._split: Split | None = None

    def fit(self) -> "StratifiedPartitioner":
        """Draw the stratified split.

        Raises:
            SchemaError: If the label column is absent or contains missing values.
        """
        df = self._dataset.df
        if self.label_col not in df.columns:
            raise SchemaError(f"Label column '{self.label_col}' not found", stage="partition")
        labels = df[self.label_col]
        if labels.isna().any():
            raise SchemaError(f"Label column '{self.label_col}' contains missing values", stage="partition")

        rng = np.random.default_rng(self.seed)
        positions = np.arange(len(df))
        label_values = labels.to_numpy()
        train_parts: list[np.ndarray] = []
        test_parts: list[np.ndarray] = []
        for level in sorted(pd.unique(label_values)):
            level_pos = positions[label_values == level]
            n_train = round_half_up(self.train_fraction * len(level_pos))
            chosen = rng.choice(level_pos, size=n_train, replace=False)
            train_parts.append(chosen)
            test_parts.append(np.setdiff1d(level_pos, chosen, assume_unique=True))

        train_idx = np.sort(np.concatenate(train_parts)) if train_parts else np.array([], dtype=int)
        test_idx = np.sort(np.concatenate(test_parts)) if test_parts else np.array([], dtype=int)
        logger.info("Partitioned %d rows into %d train / %d test", len(df), len(train_idx), len(test_idx))
        self._split = Split(
            train_idx=train_idx.astype(int),
            test_idx=test_idx.astype(int),
            train_fraction=self.train_fraction,
            seed=self.seed,
        )
        return self

    def result(self) -> Split:
        """Return the split.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if self._split is None:
            raise ValueError("Must call fit() before result()")
        return self._split


__all__ = ["Split", "StratifiedPartitioner", "round_half_up"]
