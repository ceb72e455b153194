"""Task-specific views over dataset content."""

from collections.abc import Mapping
from dataclasses import dataclass, field

import pandas as pd

from .base_columns import ColumnKind


@dataclass(frozen=True)
class DatasetView:
    """Immutable snapshot of dataset data and related metadata.

    Attributes:
        df: Dataframe slice containing the feature columns and (optionally) the label.
        pretty_by_col: Mapping from column names to display-friendly labels.
        feature_cols: Ordered list of feature names present in ``df``.
        label_col: Name of the label column, if the view carries labels.
        kinds: Declared kind of every column in ``df``.
    """

    df: pd.DataFrame
    """Dataframe slice containing the relevant columns."""
    pretty_by_col: Mapping[str, str]
    """Mapping from column names to display-friendly labels."""
    feature_cols: list[str]
    label_col: str | None = None
    kinds: Mapping[str, ColumnKind] = field(default_factory=dict)

    @property
    def features(self) -> pd.DataFrame:
        """Return view over the feature columns."""
        return self.df.loc[:, self.feature_cols]

    @property
    def labels(self) -> pd.Series:
        """Return the label column.

        Raises:
            ValueError: If the view carries no label column.
        """
        if self.label_col is None:
            raise ValueError("DatasetView has no label column configured.")
        return self.df[self.label_col]

    @property
    def categorical_features(self) -> list[str]:
        """Feature columns declared categorical."""
        return [col for col in self.feature_cols if self.kinds.get(col) == ColumnKind.CATEGORICAL]

    @property
    def numeric_features(self) -> list[str]:
        """Feature columns declared numeric (undeclared columns count as numeric)."""
        return [col for col in self.feature_cols if self.kinds.get(col, ColumnKind.NUMERIC) == ColumnKind.NUMERIC]

    def __len__(self) -> int:
        return len(self.df)
