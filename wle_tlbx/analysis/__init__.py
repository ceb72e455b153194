"""Pipeline stages: column pruning, variance filtering, partitioning, training and evaluation."""

from .column_pruner import ColumnPruner, PruningResult
from .evaluator import EvaluationResult, ModelEvaluator
from .model_cache import ModelCache
from .model_trainer import FittedModel, ForestParams, RandomForestTrainer, TrainingResult
from .partitioner import Split, StratifiedPartitioner
from .variance_filter import NearZeroVarianceFilter, VarianceFilterResult


__all__ = [
    "ColumnPruner",
    "EvaluationResult",
    "FittedModel",
    "ForestParams",
    "ModelCache",
    "ModelEvaluator",
    "NearZeroVarianceFilter",
    "PruningResult",
    "RandomForestTrainer",
    "Split",
    "StratifiedPartitioner",
    "TrainingResult",
    "VarianceFilterResult",
]
