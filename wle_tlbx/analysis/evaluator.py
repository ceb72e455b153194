"""Held-out evaluation of a fitted classifier."""

import logging
from dataclasses import dataclass

import pandas as pd

from wle_tlbx.data.base_dataset import BaseDataset
from wle_tlbx.data.views import DatasetView
from wle_tlbx.errors import SchemaError

from .base_analyser import BaseAnalyser
from .classification_metrics import (
    accuracy_confidence_interval,
    accuracy_from_confusion,
    cohen_kappa,
    confusion_frame,
    no_information_rate,
    per_label_accuracy,
    per_label_specificity,
)
from .model_trainer import FittedModel


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """Out-of-sample performance of a model.

    Attributes:
        confusion: Count table, rows = true label, columns = predicted label.
        accuracy: trace / total.
        error_rate: 1 - accuracy.
        per_label_accuracy: Diagonal over row sums (sensitivity per label).
        specificity: One-vs-rest specificity per label.
        kappa: Cohen's kappa.
        accuracy_ci: Exact 95% confidence interval of the accuracy.
        no_information_rate: Share of the most frequent true label.
        n_rows: Number of evaluated rows.
    """

    confusion: pd.DataFrame
    accuracy: float
    error_rate: float
    per_label_accuracy: pd.Series
    specificity: pd.Series
    kappa: float
    accuracy_ci: tuple[float, float]
    no_information_rate: float
    n_rows: int

    def by_label(self) -> pd.DataFrame:
        """Per-label sensitivity, specificity and support as one table."""
        return pd.DataFrame(
            {
                "sensitivity": self.per_label_accuracy,
                "specificity": self.specificity,
                "support": self.confusion.sum(axis=1),
            },
        )

    def plot_confusion_matrix(self, **kwargs: object):
        """Heatmap of the confusion matrix."""
        from wle_tlbx.plotting.evaluation_plots import plot_confusion_matrix  # noqa: PLC0415

        return plot_confusion_matrix(self.confusion, **kwargs)


class ModelEvaluator(BaseAnalyser):
    """Predict the held-out rows and compare the predictions with the true labels.

    The confusion matrix is indexed by the model's label levels, so the result does not
    depend on row order. Neither the model nor the held-out data is modified.
    """

    def __init__(self, model: FittedModel, test: BaseDataset | DatasetView, ci_level: float = 0.95) -> None:
        """Initialize the evaluator.

        Args:
            model: Fitted model to evaluate
            test: Held-out dataset, or a view of it (must carry the label column)
            ci_level: Confidence level of the accuracy interval
        """
        self.model = model
        self._view = test.view(model.feature_columns) if isinstance(test, BaseDataset) else test
        self.ci_level = ci_level
        self._result: EvaluationResult | None = None

    def fit(self) -> "ModelEvaluator":
        """Compute predictions and metrics.

        Raises:
            SchemaError: If the held-out data lacks labels or feature columns.
        """
        view = self._view
        if view.label_col is None or view.label_col not in view.df.columns:
            raise SchemaError("Held-out data carries no label column", stage="evaluate")
        missing = [col for col in self.model.feature_columns if col not in view.df.columns]
        if missing:
            raise SchemaError(f"Held-out data lacks feature columns: {missing}", stage="evaluate")

        y_true = view.labels.astype(str).to_numpy()
        y_pred = self.model.predict(view.df)
        labels = list(self.model.labels)
        labels += sorted(set(y_true) - set(labels))

        confusion = confusion_frame(y_true, y_pred, labels)
        accuracy = accuracy_from_confusion(confusion)
        n_rows = int(confusion.to_numpy().sum())
        n_correct = int(confusion.to_numpy().trace())

        logger.info("Held-out accuracy: %.4f on %d rows", accuracy, n_rows)
        self._result = EvaluationResult(
            confusion=confusion,
            accuracy=accuracy,
            error_rate=1.0 - accuracy,
            per_label_accuracy=per_label_accuracy(confusion),
            specificity=per_label_specificity(confusion),
            kappa=cohen_kappa(confusion),
            accuracy_ci=accuracy_confidence_interval(n_correct, n_rows, self.ci_level),
            no_information_rate=no_information_rate(confusion),
            n_rows=n_rows,
        )
        return self

    def result(self) -> EvaluationResult:
        """Return the evaluation result.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if self._result is None:
            raise ValueError("Must call fit() before result()")
        return self._result


__all__ = ["EvaluationResult", "ModelEvaluator"]
