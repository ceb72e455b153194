"""Data module for dataset classes."""

from .base_columns import ColumnDescriptor, ColumnKind
from .views import DatasetView
from .wle_columns import LABEL_LEVELS, sensor_columns
from .wle_columns import WLEColumn as WLECol
from .wle_dataset import WLEDataset


__all__ = ["LABEL_LEVELS", "ColumnDescriptor", "ColumnKind", "DatasetView", "WLECol", "WLEDataset", "sensor_columns"]
