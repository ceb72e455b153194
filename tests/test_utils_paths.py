"""Utility path resolution tests."""

from wle_tlbx.utils.paths import get_data_dir, get_dataset_path


def test_get_dataset_path_known_key() -> None:
    """Known keys resolve to the bundled file names inside the data directory."""
    data_dir = get_data_dir()
    path = get_dataset_path("pml_training")

    assert path.parent == data_dir
    assert path.name == "pml-training.csv"
    assert get_dataset_path("pml_testing").name == "pml-testing.csv"


def test_get_dataset_path_custom_filename() -> None:
    assert get_dataset_path("my_export.csv") == get_data_dir() / "my_export.csv"
