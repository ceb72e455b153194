"""Smoke tests for the plotting layer."""

import matplotlib as mpl
import matplotlib.pyplot as plt
import pytest
from matplotlib.figure import Figure

from wle_tlbx.analysis.model_trainer import FittedModel, ForestParams, RandomForestTrainer
from wle_tlbx.data import WLEDataset
from wle_tlbx.plotting import plot_confusion_matrix, plot_feature_importances
from wle_tlbx.utils.plotting_config import PlottingConfig


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


class TestPruningPlots:
    def test_missingness_bars(self, wle_dataset: WLEDataset) -> None:
        result = wle_dataset.make_column_pruner().fit().result()
        fig = result.plot_missingness()
        assert isinstance(fig, Figure)
        assert "16 dropped" in fig.axes[0].get_title()

    def test_nzv_scatter(self, wle_dataset: WLEDataset) -> None:
        pruned = wle_dataset.make_column_pruner().fit().result().dataset
        fig = pruned.make_variance_filter().fit().result().plot_metrics()
        assert isinstance(fig, Figure)


class TestEvaluationPlots:
    @pytest.fixture
    def model(self, separable_dataset: WLEDataset) -> FittedModel:
        params = ForestParams(n_estimators=10, random_state=0, n_jobs=1)
        return RandomForestTrainer(separable_dataset, params=params).fit().result().model

    def test_confusion_heatmap(self, model: FittedModel) -> None:
        fig = plot_confusion_matrix(model.oob_confusion, normalize=True, title="OOB")
        assert fig.axes[0].get_title() == "OOB"

    def test_feature_importance_bars(self, model: FittedModel) -> None:
        fig = plot_feature_importances(model, top_n=1)
        assert "Top 1" in fig.axes[0].get_title()
        assert isinstance(model.plot_feature_importances(), Figure)


def test_plotting_config_context_restores_rcparams() -> None:
    before = mpl.rcParams["axes.titlesize"]
    with PlottingConfig(title_size=31).apply():
        assert mpl.rcParams["axes.titlesize"] == 31
    assert mpl.rcParams["axes.titlesize"] == before
