"""Test configuration for the WLE toolbox."""

from pathlib import Path
import sys

import matplotlib
import numpy as np
import pandas as pd
import pytest


matplotlib.use("Agg")

# Ensure the local package is importable when the repo isn't installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from synthetic import make_wle_frame, write_wle_csv  # noqa: E402
from wle_tlbx.data import LABEL_LEVELS, WLEDataset  # noqa: E402


@pytest.fixture
def wle_frame() -> pd.DataFrame:
    """1000-row synthetic WLE frame (200 rows per label)."""
    return make_wle_frame()


@pytest.fixture
def wle_csv(tmp_path: Path, wle_frame: pd.DataFrame) -> Path:
    """The synthetic frame written to a temporary CSV file."""
    return write_wle_csv(wle_frame, tmp_path / "pml-training.csv")


@pytest.fixture
def wle_dataset(wle_csv: Path) -> WLEDataset:
    """Synthetic dataset loaded through the CSV loader."""
    return WLEDataset.from_csv(wle_csv)


@pytest.fixture
def separable_dataset() -> WLEDataset:
    """Two numeric features that separate the five labels by wide margins (40 rows per label)."""
    rng = np.random.default_rng(7)
    labels = np.repeat(np.array(LABEL_LEVELS), 40)
    level_idx = np.searchsorted(np.array(LABEL_LEVELS), labels)
    df = pd.DataFrame(
        {
            "roll_belt": 20.0 * level_idx + rng.normal(0.0, 1.0, size=len(labels)),
            "pitch_forearm": -15.0 * level_idx + rng.normal(0.0, 1.0, size=len(labels)),
            "classe": labels,
        },
    )
    return WLEDataset(df=df)
