"""Loading and schema validation for the Weight Lifting Exercises dataset."""

import csv
import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from wle_tlbx.errors import DatasetIOError, SchemaError
from wle_tlbx.utils.paths import get_dataset_path

from .base_columns import ColumnKind
from .base_dataset import BaseDataset
from .wle_columns import LABEL_LEVELS
from .wle_columns import WLEColumn as Col


logger = logging.getLogger(__name__)

_UNNAMED_HEADERS = frozenset({"", "Unnamed: 0", "X"})


class WLEDataset(BaseDataset):
    """Loading and schema validation for the [WLE dataset](http://groupware.les.inf.puc-rio.br/har).

    Each row is one sample of four inertial measurement units (belt, arm, dumbbell,
    forearm) recorded while a participant performs a dumbbell curl in one of five
    ways (``classe`` A-E).

    **Example workflow**:
    >>> from wle_tlbx.data import WLEDataset
    >>> ds = WLEDataset.from_csv("pml-training.csv")
    >>> pruned = ds.make_column_pruner().fit().result().dataset
    >>> filtered = pruned.make_variance_filter().fit().result().dataset
    >>> split = filtered.make_partitioner(train_fraction=0.6, seed=1234).fit().result()
    >>> train, test = split.apply(filtered)
    """

    Col = Col
    label_levels = LABEL_LEVELS

    @classmethod
    def from_csv(
        cls,
        csv_path: str | Path | None = None,
        *,
        sep: str = ",",
        na_values: Sequence[str] = ("NA",),
    ) -> "WLEDataset":
        """Load the dataset from a delimited file and validate it against the declared schema.

        - Check every line carries the header's field count
        - Normalize column names (the exporter's unnamed first column becomes ``row_index``)
        - Declare each column numeric or categorical
        - Reject rows whose label is missing or outside A-E

        Only the tokens in ``na_values`` are read as missing. Blank cells and tokens such
        as ``#DIV/0!`` are kept verbatim, which makes the affected columns categorical.

        Args:
            csv_path: Path to the CSV file (defaults to the bundled training file)
            sep: Field delimiter
            na_values: Tokens interpreted as missing values

        Returns:
            WLEDataset instance with loaded and validated data

        Raises:
            DatasetIOError: If the file is missing, empty, or malformed.
            SchemaError: If the label column is absent or no row carries a valid label.
        """
        csv_path = get_dataset_path("pml_training") if csv_path is None else Path(csv_path)
        if not csv_path.is_file():
            raise DatasetIOError(f"Input file not found: {csv_path}")

        cls._check_field_counts(csv_path, sep=sep)

        try:
            raw = pd.read_csv(csv_path, sep=sep, dtype=str, na_values=list(na_values), keep_default_na=False)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
            raise DatasetIOError(f"Could not parse {csv_path}: {exc}") from exc

        wle_df = raw.pipe(cls._normalize_col_names)
        if Col.TARGET not in wle_df.columns:
            raise SchemaError(f"Label column '{Col.TARGET}' not found in {csv_path}", stage="load")

        wle_df = cls._reject_invalid_labels(wle_df)
        wle_df, schema = cls._convert_data_types(wle_df)

        logger.info("Loaded %d rows x %d columns from %s", len(wle_df), wle_df.shape[1], csv_path)
        return cls(df=wle_df, schema=schema)

    @staticmethod
    def _check_field_counts(csv_path: Path, *, sep: str) -> None:
        """Fail on lines whose field count differs from the header's.

        pandas silently pads short rows with NaN, so the check runs on the raw lines.
        """
        try:
            with csv_path.open(newline="", encoding="utf-8") as fh:
                reader = csv.reader(fh, delimiter=sep)
                header = next(reader, None)
                if not header:
                    raise DatasetIOError(f"Input file is empty: {csv_path}")
                for row in reader:
                    if not row:
                        continue
                    if len(row) != len(header):
                        raise DatasetIOError(
                            f"{csv_path}, line {reader.line_num}: expected {len(header)} fields, found {len(row)}",
                        )
        except (csv.Error, UnicodeDecodeError) as exc:
            raise DatasetIOError(f"Could not read {csv_path}: {exc}") from exc

    @staticmethod
    def _normalize_col_names(df: pd.DataFrame) -> pd.DataFrame:
        """Strip whitespace from names and map raw names of known columns to their cleaned names.

        The exporter's row-number column has a blank header, which pandas or R report as
        ``Unnamed: 0`` or ``X``; it becomes ``row_index``.
        """
        names = [str(col).strip() for col in df.columns]
        if names and names[0] in _UNNAMED_HEADERS:
            names[0] = Col.ROW_INDEX.original_name
        cleaned = Col.cleaned_names()
        return df.set_axis([cleaned.get(name, name) for name in names], axis=1)

    @staticmethod
    def _reject_invalid_labels(df: pd.DataFrame) -> pd.DataFrame:
        """Drop rows whose label is missing or not one of A-E."""
        labels = df[Col.TARGET].str.strip()
        valid = labels.isin(LABEL_LEVELS)
        n_rejected = int((~valid).sum())
        if n_rejected:
            logger.warning("Rejected %d rows with a missing or unknown '%s' label", n_rejected, Col.TARGET)
        if not valid.any():
            raise SchemaError(f"No row carries a label in {list(LABEL_LEVELS)}", stage="load")
        return df.assign(**{str(Col.TARGET): labels}).loc[valid].reset_index(drop=True)

    @staticmethod
    def _convert_data_types(df: pd.DataFrame) -> tuple[pd.DataFrame, dict[str, ColumnKind]]:
        """Declare a column numeric when every non-missing value parses as a number.

        Returns:
            Converted frame and the declared schema.
        """
        schema: dict[str, ColumnKind] = {}
        converted: dict[str, pd.Series] = {}
        for col in df.columns:
            if col == Col.TARGET:
                schema[col] = ColumnKind.CATEGORICAL
                continue
            numeric = pd.to_numeric(df[col], errors="coerce")
            if numeric.isna().sum() == df[col].isna().sum():
                converted[col] = numeric
                schema[col] = ColumnKind.NUMERIC
            else:
                schema[col] = ColumnKind.CATEGORICAL
        return df.assign(**converted), schema


__all__ = ["WLEDataset"]
