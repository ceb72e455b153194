"""End-to-end run: load, prune, filter, partition, train, evaluate."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal

from wle_tlbx.analysis.column_pruner import PruningResult
from wle_tlbx.analysis.evaluator import EvaluationResult, ModelEvaluator
from wle_tlbx.analysis.model_cache import ModelCache
from wle_tlbx.analysis.model_trainer import ForestParams, RandomForestTrainer, TrainingResult
from wle_tlbx.analysis.partitioner import Split
from wle_tlbx.analysis.variance_filter import VarianceFilterResult
from wle_tlbx.data.wle_columns import WLEColumn
from wle_tlbx.data.wle_dataset import WLEDataset
from wle_tlbx.errors import PipelineError, SchemaError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    """Everything a run depends on, passed explicitly to :func:`run_pipeline`.

    ``seed`` drives the partitioner and, unless ``forest.random_state`` is set, the forest.
    """

    csv_path: Path
    cache_path: Path | None = None
    identifier_columns: tuple[str, ...] = field(
        default_factory=lambda: tuple(str(col) for col in WLEColumn.identifier_columns()),
    )
    na_values: tuple[str, ...] = ("NA",)
    sep: str = ","
    max_missing_fraction: float | None = None
    high_missing_fraction: float = 0.9
    partial_strategy: Literal["median", "drop"] = "median"
    freq_cut: float = 95 / 5
    unique_cut: float = 10.0
    train_fraction: float = 0.6
    seed: int | None = 1234
    forest: ForestParams = field(default_factory=ForestParams)
    min_train_rows: int = 20

    def forest_params(self) -> ForestParams:
        """Forest parameters with the run seed threaded in."""
        if self.forest.random_state is None:
            return replace(self.forest, random_state=self.seed)
        return self.forest


@dataclass(frozen=True)
class PipelineResult:
    """Results of every stage of one run."""

    config: PipelineConfig
    n_rows_loaded: int
    n_columns_loaded: int
    pruning: PruningResult
    variance: VarianceFilterResult
    split: Split
    training: TrainingResult
    evaluation: EvaluationResult

    def summary(self) -> str:
        """Plain-text report of the run."""
        model = self.training.model
        evaluation = self.evaluation
        lo, hi = evaluation.accuracy_ci
        lines = [
            f"Input: {self.config.csv_path} ({self.n_rows_loaded} rows x {self.n_columns_loaded} columns)",
            f"Identifier columns removed: {len(self.pruning.dropped_identifiers)}",
            f"Mostly-missing columns removed: {len(self.pruning.dropped_missing)}",
            f"Near-zero-variance columns removed: {len(self.variance.dropped_columns)}",
            f"Features used: {len(model.feature_columns)}",
            f"Partition: {len(self.split.train_idx)} train / {len(self.split.test_idx)} test "
            f"(train fraction {self.split.train_fraction}, seed {self.split.seed})",
            f"Model: random forest, {model.params.n_estimators} trees"
            + (" (loaded from cache)" if self.training.from_cache else ""),
            "",
            f"Out-of-bag error estimate: {model.oob_error:.4f} ({model.n_oob_rows} rows)",
            "",
            "Held-out confusion matrix (rows = true, columns = predicted):",
            evaluation.confusion.to_string(),
            "",
            f"Accuracy: {evaluation.accuracy:.4f} (95% CI {lo:.4f} - {hi:.4f})",
            f"Out-of-sample error: {evaluation.error_rate:.4f}",
            f"Kappa: {evaluation.kappa:.4f}",
            f"No-information rate: {evaluation.no_information_rate:.4f}",
            "",
            "Per-label statistics:",
            evaluation.by_label().to_string(float_format=lambda x: f"{x:.4f}"),
        ]
        return "\n".join(lines)


@contextmanager
def pipeline_stage(name: str) -> Iterator[None]:
    """Tag errors raised inside the block with ``name``.

    Pipeline errors keep a stage they already carry. A bare ``ValueError`` or ``KeyError``, from a
    stage's argument checks or from pandas/scikit-learn, is re-raised as a :class:`SchemaError`.
    """
    try:
        yield
    except PipelineError as exc:
        if exc.stage is None:
            exc.stage = name
        raise
    except (ValueError, KeyError) as exc:
        raise SchemaError(str(exc), stage=name) from exc


def run_pipeline(config: PipelineConfig) -> PipelineResult:
    """Run all stages in order and collect their results.

    Raises:
        PipelineError: From the first stage that fails; ``stage`` names it. Value errors raised by
            a stage surface as ``SchemaError``.
    """
    with pipeline_stage("load"):
        dataset = WLEDataset.from_csv(config.csv_path, sep=config.sep, na_values=config.na_values)

    with pipeline_stage("prune"):
        pruning = (
            dataset.make_column_pruner(
                identifier_columns=config.identifier_columns,
                max_missing_fraction=config.max_missing_fraction,
                high_missing_fraction=config.high_missing_fraction,
                partial_strategy=config.partial_strategy,
            )
            .fit()
            .result()
        )

    with pipeline_stage("variance_filter"):
        variance = (
            pruning.dataset.make_variance_filter(freq_cut=config.freq_cut, unique_cut=config.unique_cut)
            .fit()
            .result()
        )
    filtered = variance.dataset

    with pipeline_stage("partition"):
        split = filtered.make_partitioner(train_fraction=config.train_fraction, seed=config.seed).fit().result()
        train, test = split.apply(filtered)

    with pipeline_stage("train"):
        cache = ModelCache(config.cache_path) if config.cache_path is not None else None
        training = (
            RandomForestTrainer(
                train.view(),
                params=config.forest_params(),
                cache=cache,
                min_rows=config.min_train_rows,
            )
            .fit()
            .result()
        )

    with pipeline_stage("evaluate"):
        evaluation = ModelEvaluator(training.model, test).fit().result()

    return PipelineResult(
        config=config,
        n_rows_loaded=len(dataset),
        n_columns_loaded=dataset.df.shape[1],
        pruning=pruning,
        variance=variance,
        split=split,
        training=training,
        evaluation=evaluation,
    )


__all__ = ["PipelineConfig", "PipelineResult", "pipeline_stage", "run_pipeline"]
