"""Base dataset class for all dataset implementations."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Self

import numpy as np
import pandas as pd


if TYPE_CHECKING:
    from wle_tlbx.analysis.column_pruner import ColumnPruner
    from wle_tlbx.analysis.partitioner import StratifiedPartitioner
    from wle_tlbx.analysis.variance_filter import NearZeroVarianceFilter

from .base_columns import BaseColumn, ColumnDescriptor, ColumnKind
from .views import DatasetView


class BaseDataset(ABC):
    """Abstract base class for dataset handlers used throughout the toolbox.

    A dataset wraps a DataFrame together with its declared schema
    (column name -> :class:`ColumnKind`). Instances are treated as immutable:
    every column or row selection returns a new dataset of the same class.
    """

    Col: type[BaseColumn]
    label_levels: Sequence[str] = ()

    def __init__(self, df: pd.DataFrame | None = None, schema: Mapping[str, ColumnKind] | None = None) -> None:
        """Initialize the base dataset.

        Args:
            df: Pre-loaded and cleaned DataFrame (optional)
            schema: Declared kind per column; inferred from dtypes when omitted
        """
        self._df: pd.DataFrame | None = df
        if df is not None and schema is None:
            schema = self.infer_schema(df)
        self._schema: dict[str, ColumnKind] = dict(schema or {})

    @classmethod
    @abstractmethod
    def from_csv(cls, csv_path: str | Path | None = None, **kwargs: object) -> "BaseDataset":
        """Load dataset from CSV file.

        Args:
            csv_path: Path to the CSV file
            **kwargs: Additional loading parameters

        Returns:
            Dataset instance with loaded data
        """
        ...

    @staticmethod
    def infer_schema(df: pd.DataFrame) -> dict[str, ColumnKind]:
        """Declare numeric dtypes as numeric and everything else (incl. booleans) as categorical."""
        return {
            col: (
                ColumnKind.NUMERIC
                if pd.api.types.is_numeric_dtype(df[col]) and not pd.api.types.is_bool_dtype(df[col])
                else ColumnKind.CATEGORICAL
            )
            for col in df.columns
        }

    @property
    def df(self) -> pd.DataFrame:
        """Get the raw/cleaned DataFrame.

        Raises:
            ValueError: If dataset not loaded
        """
        if self._df is None:
            raise ValueError("Dataset not loaded. Use from_csv() to load data.")
        return self._df

    @property
    def schema(self) -> dict[str, ColumnKind]:
        """Declared column kinds, in column order."""
        return {col: self._schema[col] for col in self.df.columns}

    @property
    def label_col(self) -> str:
        return str(self.Col.TARGET)

    @property
    def numeric_cols(self) -> list[str]:
        """Columns declared numeric."""
        return [col for col, kind in self.schema.items() if kind == ColumnKind.NUMERIC]

    @property
    def missing_counts(self) -> pd.Series:
        """Number of missing values per column."""
        return self.df.isna().sum().astype(int)

    def describe(self) -> list[ColumnDescriptor]:
        """Derive a :class:`ColumnDescriptor` for every column."""
        counts = self.missing_counts
        return [ColumnDescriptor(name=col, kind=kind, n_missing=int(counts[col])) for col, kind in self.schema.items()]

    def feature_columns(self, include_label: bool = False, extra_exclude: Iterable[str] | None = None) -> list[str]:
        """Return all non-label columns, optionally excluding further columns."""
        exclude = set(extra_exclude or ())
        if not include_label:
            exclude.add(self.label_col)
        return [col for col in self.df.columns if col not in exclude]

    def drop_columns(self, columns: Iterable[str]) -> Self:
        """Return a new, narrower dataset without ``columns``.

        Raises:
            ValueError: If one of the columns is the label column.
        """
        columns = list(columns)
        if self.label_col in columns:
            raise ValueError(f"Refusing to drop label column '{self.label_col}'.")
        narrowed = self.df.drop(columns=columns)
        return type(self)(df=narrowed, schema={col: self._schema[col] for col in narrowed.columns})

    def take_rows(self, positions: Sequence[int] | np.ndarray) -> Self:
        """Return a new dataset holding the rows at the given positional indices."""
        return type(self)(df=self.df.iloc[np.asarray(positions, dtype=int)], schema=self.schema)

    def with_frame(self, df: pd.DataFrame) -> Self:
        """Return a new dataset over ``df`` keeping the declared kinds of its columns."""
        return type(self)(df=df, schema={col: self._schema[col] for col in df.columns})

    def view(self, columns: Iterable[str] | None = None, include_label: bool = True) -> DatasetView:
        """Build an immutable dataset view for the trainer, evaluator and plotting layers.

        Args:
            columns: Feature columns to include in the view (defaults to all non-label columns)
            include_label: Carry the label column along with the features

        Returns:
            DatasetView containing selected data and metadata
        """
        feature_cols = list(columns) if columns is not None else self.feature_columns()
        selected = [*feature_cols, self.label_col] if include_label else feature_cols
        frame = self.df.loc[:, selected]
        return DatasetView(
            df=frame,
            pretty_by_col={col: self.get_pretty_name(col) for col in selected},
            feature_cols=feature_cols,
            label_col=self.label_col if include_label else None,
            kinds={col: self._schema[col] for col in selected},
        )

    def get_pretty_name(self, column_name: str) -> str:
        """Convert column name to pretty name for reports and plots."""
        try:
            col_enum = self.Col(column_name)
        except ValueError:
            # Fallback: capitalize and replace underscores if not in enum
            return column_name.replace("_", " ").title()
        else:
            return str(col_enum.pretty_name)

    def make_column_pruner(
        self,
        identifier_columns: Iterable[str] | None = None,
        max_missing_fraction: float | None = None,
        high_missing_fraction: float = 0.9,
        partial_strategy: Literal["median", "drop"] = "median",
    ) -> "ColumnPruner":
        """Instantiate a column pruner configured for this dataset.

        Example:
            >>> from wle_tlbx.data import WLEDataset
            >>> ds = WLEDataset.from_csv()
            >>> pruned = ds.make_column_pruner().fit().result().dataset
        """
        from wle_tlbx.analysis.column_pruner import ColumnPruner

        return ColumnPruner(
            self,
            identifier_columns=self.Col.identifier_columns() if identifier_columns is None else identifier_columns,
            max_missing_fraction=max_missing_fraction,
            high_missing_fraction=high_missing_fraction,
            partial_strategy=partial_strategy,
        )

    def make_variance_filter(self, freq_cut: float = 95 / 5, unique_cut: float = 10.0) -> "NearZeroVarianceFilter":
        """Instantiate a near-zero-variance filter configured for this dataset."""
        from wle_tlbx.analysis.variance_filter import NearZeroVarianceFilter

        return NearZeroVarianceFilter(self, freq_cut=freq_cut, unique_cut=unique_cut)

    def make_partitioner(self, train_fraction: float = 0.6, seed: int | None = None) -> "StratifiedPartitioner":
        """Instantiate a stratified train/test partitioner over the label column."""
        from wle_tlbx.analysis.partitioner import StratifiedPartitioner

        return StratifiedPartitioner(self, train_fraction=train_fraction, seed=seed)

    def __len__(self) -> int:
        return len(self.df)
