"""Column definitions for the Weight Lifting Exercises (WLE) dataset."""

from .base_columns import BaseColumn, ColumnKind, ColumnMetadata


SENSOR_LOCATIONS: tuple[str, ...] = ("belt", "arm", "dumbbell", "forearm")
"""Body/equipment positions of the inertial measurement units."""

RAW_MEASUREMENTS: tuple[str, ...] = (
    "roll",
    "pitch",
    "yaw",
    "total_accel",
    "gyros_{loc}_x",
    "gyros_{loc}_y",
    "gyros_{loc}_z",
    "accel_{loc}_x",
    "accel_{loc}_y",
    "accel_{loc}_z",
    "magnet_{loc}_x",
    "magnet_{loc}_y",
    "magnet_{loc}_z",
)
"""Per-sample measurements recorded for every sensor location."""

LABEL_LEVELS: tuple[str, ...] = ("A", "B", "C", "D", "E")
"""Execution classes: A = correct, B-E = four common mistakes."""


def sensor_columns(locations: tuple[str, ...] = SENSOR_LOCATIONS) -> list[str]:
    """Names of the raw (per-sample) sensor columns for the given locations."""
    names: list[str] = []
    for loc in locations:
        for measurement in RAW_MEASUREMENTS:
            names.append(measurement.format(loc=loc) if "{loc}" in measurement else f"{measurement}_{loc}")
    return names


class WLEColumn(BaseColumn):
    """Named columns of the [WLE dataset](http://groupware.les.inf.puc-rio.br/har) (Velloso et al., 2013).

    Columns:
    - ``row_index``: int - Row number written by the exporter (unnamed in the raw CSV)
    - ``user_name``: str - Participant identifier
    - ``raw_timestamp_part_1``: int - Epoch seconds
    - ``raw_timestamp_part_2``: int - Microsecond part of the timestamp
    - ``cvtd_timestamp``: str - Formatted timestamp
    - ``new_window``: str - ``yes`` on rows closing a sliding window
    - ``num_window``: int - Sliding window counter
    - ``classe``: str - Execution class A-E (label)

    Sensor columns are not enumerated; see :func:`sensor_columns`.
    """

    TARGET = "classe"
    """Execution class (label)."""
    CLASSE = TARGET

    # Bookkeeping
    ROW_INDEX = "row_index"
    USER_NAME = "user_name"
    RAW_TIMESTAMP_PART_1 = "raw_timestamp_part_1"
    RAW_TIMESTAMP_PART_2 = "raw_timestamp_part_2"
    CVTD_TIMESTAMP = "cvtd_timestamp"
    NEW_WINDOW = "new_window"
    NUM_WINDOW = "num_window"

    def metadata(self) -> ColumnMetadata:
        """Get metadata for this column."""
        return _COLUMN_METADATA_WLE[self]

    @classmethod
    def identifier_columns(cls) -> list[str]:
        """Bookkeeping columns that carry no sensor signal.

        Returns:
            Row index, participant, timestamp and window markers, in file order.
        """
        return [
            cls.ROW_INDEX,
            cls.USER_NAME,
            cls.RAW_TIMESTAMP_PART_1,
            cls.RAW_TIMESTAMP_PART_2,
            cls.CVTD_TIMESTAMP,
            cls.NEW_WINDOW,
            cls.NUM_WINDOW,
        ]


_COLUMN_METADATA_WLE: dict[WLEColumn, ColumnMetadata] = {
    WLEColumn.ROW_INDEX: ColumnMetadata(
        original_name="",
        cleaned_name="row_index",
        kind=ColumnKind.NUMERIC,
        pretty_name="Row Index",
    ),
    WLEColumn.USER_NAME: ColumnMetadata(
        original_name="user_name",
        cleaned_name="user_name",
        kind=ColumnKind.CATEGORICAL,
        pretty_name="Participant",
    ),
    WLEColumn.RAW_TIMESTAMP_PART_1: ColumnMetadata(
        original_name="raw_timestamp_part_1",
        cleaned_name="raw_timestamp_part_1",
        kind=ColumnKind.NUMERIC,
        pretty_name="Timestamp (s)",
    ),
    WLEColumn.RAW_TIMESTAMP_PART_2: ColumnMetadata(
        original_name="raw_timestamp_part_2",
        cleaned_name="raw_timestamp_part_2",
        kind=ColumnKind.NUMERIC,
        pretty_name="Timestamp (us)",
    ),
    WLEColumn.CVTD_TIMESTAMP: ColumnMetadata(
        original_name="cvtd_timestamp",
        cleaned_name="cvtd_timestamp",
        kind=ColumnKind.CATEGORICAL,
        pretty_name="Timestamp",
    ),
    WLEColumn.NEW_WINDOW: ColumnMetadata(
        original_name="new_window",
        cleaned_name="new_window",
        kind=ColumnKind.CATEGORICAL,
        pretty_name="New Window",
    ),
    WLEColumn.NUM_WINDOW: ColumnMetadata(
        original_name="num_window",
        cleaned_name="num_window",
        kind=ColumnKind.NUMERIC,
        pretty_name="Window Number",
    ),
    WLEColumn.TARGET: ColumnMetadata(
        original_name="classe",
        cleaned_name="classe",
        kind=ColumnKind.CATEGORICAL,
        pretty_name="Execution Class",
    ),
}


__all__ = [
    "LABEL_LEVELS",
    "RAW_MEASUREMENTS",
    "SENSOR_LOCATIONS",
    "WLEColumn",
    "sensor_columns",
]
