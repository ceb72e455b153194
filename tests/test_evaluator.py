"""Tests for held-out evaluation."""

import numpy as np
import pytest

from wle_tlbx.analysis.evaluator import ModelEvaluator
from wle_tlbx.analysis.model_trainer import FittedModel, ForestParams, RandomForestTrainer
from wle_tlbx.data import WLEDataset
from wle_tlbx.errors import SchemaError


@pytest.fixture
def split_datasets(separable_dataset: WLEDataset) -> tuple[WLEDataset, WLEDataset]:
    split = separable_dataset.make_partitioner(train_fraction=0.6, seed=3).fit().result()
    return split.apply(separable_dataset)


@pytest.fixture
def fitted_model(split_datasets: tuple[WLEDataset, WLEDataset]) -> FittedModel:
    train, _ = split_datasets
    return RandomForestTrainer(train, params=ForestParams(n_estimators=25, random_state=0, n_jobs=1)).fit().result().model


class TestModelEvaluator:
    def test_perfect_predictions(self, fitted_model: FittedModel, split_datasets: tuple[WLEDataset, WLEDataset]) -> None:
        _, test = split_datasets
        result = ModelEvaluator(fitted_model, test).fit().result()

        assert result.accuracy == 1.0
        assert result.error_rate == 0.0
        assert result.n_rows == len(test) == 80
        assert result.per_label_accuracy.tolist() == [1.0] * 5
        assert result.kappa == pytest.approx(1.0)
        assert result.confusion.to_numpy().sum() == 80
        assert np.count_nonzero(result.confusion.to_numpy() - np.diag(np.diag(result.confusion.to_numpy()))) == 0

    def test_confusion_is_ordered_by_label(self, fitted_model: FittedModel, split_datasets) -> None:
        _, test = split_datasets
        confusion = ModelEvaluator(fitted_model, test).fit().result().confusion
        assert confusion.index.tolist() == ["A", "B", "C", "D", "E"]
        assert confusion.columns.tolist() == ["A", "B", "C", "D", "E"]

    def test_row_order_does_not_matter(self, fitted_model: FittedModel, split_datasets) -> None:
        _, test = split_datasets
        shuffled = test.take_rows(np.random.default_rng(9).permutation(len(test)))

        original = ModelEvaluator(fitted_model, test).fit().result()
        reordered = ModelEvaluator(fitted_model, shuffled).fit().result()
        assert original.confusion.equals(reordered.confusion)
        assert original.accuracy == reordered.accuracy

    def test_inputs_are_not_mutated(self, fitted_model: FittedModel, split_datasets) -> None:
        _, test = split_datasets
        before = test.df.copy()
        ModelEvaluator(fitted_model, test).fit()
        assert test.df.equals(before)

    def test_misclassifications_are_counted(self, fitted_model: FittedModel, split_datasets) -> None:
        _, test = split_datasets
        flipped = test.df.copy()
        first_a = flipped.index[flipped["classe"] == "A"][0]
        flipped.loc[first_a, "classe"] = "B"
        result = ModelEvaluator(fitted_model, test.with_frame(flipped)).fit().result()

        assert result.confusion.loc["B", "A"] == 1
        assert result.accuracy == pytest.approx(79 / 80)
        assert result.error_rate == pytest.approx(1 / 80)
        assert result.per_label_accuracy["B"] == pytest.approx(16 / 17)
        lo, hi = result.accuracy_ci
        assert lo < result.accuracy <= hi

    def test_by_label_table(self, fitted_model: FittedModel, split_datasets) -> None:
        _, test = split_datasets
        table = ModelEvaluator(fitted_model, test).fit().result().by_label()
        assert table.columns.tolist() == ["sensitivity", "specificity", "support"]
        assert table["support"].tolist() == [16] * 5

    def test_missing_feature_column(self, fitted_model: FittedModel, split_datasets) -> None:
        _, test = split_datasets
        with pytest.raises(SchemaError) as excinfo:
            ModelEvaluator(fitted_model, test.view(["roll_belt"])).fit()
        assert excinfo.value.stage == "evaluate"

    def test_result_before_fit(self, fitted_model: FittedModel, split_datasets) -> None:
        _, test = split_datasets
        with pytest.raises(ValueError, match="fit"):
            ModelEvaluator(fitted_model, test).result()
