"""Base column definitions and metadata structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ColumnKind(StrEnum):
    """Declared type of a dataset column."""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"


@dataclass(frozen=True)
class ColumnMetadata:
    """Metadata for a known dataset column.

    Attributes:
        original_name: Column name as it appears in the raw CSV file.
        cleaned_name: Standardized column name used in DataFrames.
        kind: Declared column kind (numeric or categorical).
        pretty_name: Human-readable name for use in plots and reports.
    """

    original_name: str
    """Column name as it appears in the raw CSV file."""
    cleaned_name: str
    kind: ColumnKind
    pretty_name: str


@dataclass(frozen=True)
class ColumnDescriptor:
    """Derived description of a column in a loaded dataset.

    Never stored alongside the data; recomputed from the DataFrame on demand via
    :meth:`wle_tlbx.data.base_dataset.BaseDataset.describe`.
    """

    name: str
    kind: ColumnKind
    n_missing: int


class BaseColumn(StrEnum):
    """Base class for dataset column enums.

    All derived column enums must define a TARGET member to specify
    the label column of the dataset.

    Subclasses must implement:
    - metadata(): Return ColumnMetadata for each enum member
    - identifier_columns(): Return list of bookkeeping column names
    """

    TARGET: str

    def metadata(self) -> ColumnMetadata:
        """Get metadata for this column.

        Raises:
            NotImplementedError: If not implemented by subclass.
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement metadata() method")

    @classmethod
    def identifier_columns(cls) -> list[str]:
        """Get identifier (non-sensor bookkeeping) column names.

        Raises:
            NotImplementedError: If not implemented by subclass.
        """
        raise NotImplementedError(f"{cls.__name__} must implement identifier_columns() method")

    @property
    def pretty_name(self) -> str:
        """Get the human-readable name for plots and reports."""
        return self.metadata().pretty_name

    @property
    def original_name(self) -> str:
        """Get the original column name from the CSV file."""
        return self.metadata().original_name

    @classmethod
    def cleaned_names(cls) -> dict[str, str]:
        """Map raw CSV column names to the standardized names used in DataFrames."""
        return {col.original_name: col.metadata().cleaned_name for col in cls}

    @property
    def kind(self) -> ColumnKind:
        """Get the declared column kind."""
        return self.metadata().kind


__all__ = ["BaseColumn", "ColumnDescriptor", "ColumnKind", "ColumnMetadata"]
