from pathlib import Path
from typing import Literal


__all__ = ["get_data_dir", "get_dataset_path"]


_DATASET_MAP: dict[str, str] = {
    "pml_training": "pml-training.csv",
    "pml_testing": "pml-testing.csv",
}


def get_data_dir() -> Path:
    """Get the path to the data directory (``_data`` next to the package).

    Returns:
        Path to the data directory
    """
    return (Path(__file__).parents[2] / "_data").resolve()


def get_dataset_path(filename: Literal["pml_training", "pml_testing"] | str) -> Path:  # noqa: PYI051
    """Get the full path to a dataset file in the data directory.

    The path is returned even when the file does not exist yet; the loader reports
    missing files as :class:`~wle_tlbx.errors.DatasetIOError`.

    Args:
        filename: Key to known dataset or custom filename

    Returns:
        Full path to the dataset file relative to the data directory of the project

    Supported: pml-training.csv pml-testing.csv
    """
    return get_data_dir() / _DATASET_MAP.get(filename, filename)
