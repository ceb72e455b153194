"""Tests for confusion-matrix based metrics."""

import numpy as np
import pandas as pd
import pytest

from wle_tlbx.analysis.classification_metrics import (
    accuracy_confidence_interval,
    accuracy_from_confusion,
    cohen_kappa,
    confusion_frame,
    no_information_rate,
    per_label_accuracy,
    per_label_specificity,
)


@pytest.fixture
def confusion() -> pd.DataFrame:
    y_true = ["A", "A", "A", "B", "B", "C"]
    y_pred = ["A", "A", "B", "B", "B", "A"]
    return confusion_frame(y_true, y_pred, ["A", "B", "C"])


class TestConfusionFrame:
    def test_layout(self, confusion: pd.DataFrame) -> None:
        assert confusion.index.name == "true"
        assert confusion.columns.name == "predicted"
        assert confusion.index.tolist() == ["A", "B", "C"]
        assert confusion.loc["A"].tolist() == [2, 1, 0]
        assert confusion.loc["C"].tolist() == [1, 0, 0]

    def test_unseen_levels_are_zero_rows(self) -> None:
        table = confusion_frame(["A"], ["A"], ["A", "B"])
        assert table.loc["B"].sum() == 0


class TestMetrics:
    def test_accuracy(self, confusion: pd.DataFrame) -> None:
        assert accuracy_from_confusion(confusion) == pytest.approx(4 / 6)

    def test_accuracy_of_empty_table_is_nan(self) -> None:
        empty = pd.DataFrame(np.zeros((2, 2), dtype=int), index=["A", "B"], columns=["A", "B"])
        assert np.isnan(accuracy_from_confusion(empty))

    def test_per_label_accuracy(self, confusion: pd.DataFrame) -> None:
        acc = per_label_accuracy(confusion)
        assert acc.name == "accuracy"
        assert acc.tolist() == pytest.approx([2 / 3, 1.0, 0.0])

    def test_per_label_accuracy_nan_for_absent_label(self) -> None:
        acc = per_label_accuracy(confusion_frame(["A", "A"], ["A", "A"], ["A", "B"]))
        assert acc["A"] == 1.0
        assert np.isnan(acc["B"])

    def test_specificity(self, confusion: pd.DataFrame) -> None:
        specificity = per_label_specificity(confusion)
        # label A: negatives are rows B and C (3), one of them predicted A
        assert specificity["A"] == pytest.approx(2 / 3)
        assert specificity["C"] == pytest.approx(1.0)

    def test_kappa_perfect_and_chance(self) -> None:
        perfect = confusion_frame(list("ABAB"), list("ABAB"), ["A", "B"])
        assert cohen_kappa(perfect) == pytest.approx(1.0)
        chance = pd.DataFrame([[25, 25], [25, 25]], index=["A", "B"], columns=["A", "B"])
        assert cohen_kappa(chance) == pytest.approx(0.0)

    def test_confidence_interval_brackets_accuracy(self) -> None:
        lo, hi = accuracy_confidence_interval(90, 100)
        assert lo < 0.9 < hi
        assert lo == pytest.approx(0.8238, abs=1e-3)
        assert hi == pytest.approx(0.9510, abs=1e-3)

    def test_confidence_interval_edges(self) -> None:
        assert accuracy_confidence_interval(10, 10)[1] == 1.0
        assert accuracy_confidence_interval(0, 10)[0] == 0.0
        assert all(np.isnan(accuracy_confidence_interval(0, 0)))

    def test_no_information_rate(self, confusion: pd.DataFrame) -> None:
        assert no_information_rate(confusion) == pytest.approx(3 / 6)
