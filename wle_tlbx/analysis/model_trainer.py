"""Random-forest training with out-of-bag error estimation and model caching."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.ensemble import RandomForestClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder

from wle_tlbx.data.base_dataset import BaseDataset
from wle_tlbx.data.views import DatasetView
from wle_tlbx.errors import CacheError, TrainingError

from .base_analyser import BaseAnalyser
from .classification_metrics import accuracy_from_confusion, confusion_frame
from .model_cache import ModelCache


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForestParams:
    """Random-forest hyperparameters (scikit-learn defaults unless set).

    ``n_jobs`` sizes the worker pool that grows trees in parallel; it does not change the
    fitted model and is therefore left out of the cache fingerprint.
    """

    n_estimators: int = 100
    max_features: str | int | float | None = "sqrt"
    min_samples_leaf: int = 1
    max_depth: int | None = None
    random_state: int | None = None
    n_jobs: int | None = -1

    def fingerprint_dict(self) -> dict[str, Any]:
        params = asdict(self)
        params.pop("n_jobs")
        return params


@dataclass(frozen=True, eq=False)
class FittedModel:
    """Immutable fitted classifier plus its out-of-bag performance estimate.

    Attributes:
        estimator: scikit-learn pipeline (categorical encoding + random forest).
        feature_columns: Feature names, in the order the estimator expects.
        label_col: Name of the label column it was trained on.
        labels: Label levels known to the model, sorted.
        params: Forest hyperparameters.
        fingerprint: Hash of training data and parameters (cache key).
        n_train_rows: Number of training rows.
        oob_confusion: Out-of-bag confusion matrix (rows = true, columns = predicted).
        oob_error: Out-of-bag misclassification rate.
        n_oob_rows: Rows that were out-of-bag for at least one tree (basis of the estimate).
    """

    estimator: Pipeline
    feature_columns: list[str]
    label_col: str
    labels: list[str]
    params: ForestParams
    fingerprint: str
    n_train_rows: int
    oob_confusion: pd.DataFrame
    oob_error: float
    n_oob_rows: int
    categorical_columns: list[str] = field(default_factory=list)

    def predict(self, frame: pd.DataFrame) -> np.ndarray:
        """Predict a label for every row of ``frame`` (extra columns are ignored).

        Raises:
            KeyError: If a feature column is missing from ``frame``.
        """
        missing = [col for col in self.feature_columns if col not in frame.columns]
        if missing:
            raise KeyError(f"Columns missing for prediction: {missing}")
        return self.estimator.predict(frame.loc[:, self.feature_columns])

    def predict_proba(self, frame: pd.DataFrame) -> pd.DataFrame:
        """Class probabilities (vote shares), one column per label."""
        proba = self.estimator.predict_proba(frame.loc[:, self.feature_columns])
        return pd.DataFrame(proba, index=frame.index, columns=list(self.estimator.classes_))

    def feature_importances(self) -> pd.Series:
        """Mean decrease in impurity per source column, descending.

        One-hot encoded columns are summed back onto the categorical column they came from.
        """
        forest: RandomForestClassifier = self.estimator.named_steps["forest"]
        return (
            pd.Series(forest.feature_importances_, index=self._encoded_sources(), name="importance")
            .groupby(level=0)
            .sum()
            .sort_values(ascending=False)
        )

    def _encoded_sources(self) -> list[str]:
        """Source column of every column the forest sees, in estimator order."""
        encode = self.estimator.named_steps["encode"]
        if isinstance(encode, str):
            return list(self.feature_columns)
        onehot: OneHotEncoder = encode.named_transformers_["categorical"]
        sources = [col for col, cats in zip(self.categorical_columns, onehot.categories_) for _ in cats]
        return sources + [col for col in self.feature_columns if col not in self.categorical_columns]

    def plot_feature_importances(self, **kwargs: object):
        """Plot the top feature importances."""
        from wle_tlbx.plotting.evaluation_plots import plot_feature_importances  # noqa: PLC0415

        return plot_feature_importances(self, **kwargs)


@dataclass(frozen=True)
class TrainingResult:
    """Trainer output: the model and whether it came from the cache."""

    model: FittedModel
    from_cache: bool = False


def training_fingerprint(view: DatasetView, params: ForestParams) -> str:
    """SHA-256 over training content (row hashes), column names, label and forest parameters."""
    digest = hashlib.sha256()
    digest.update(json.dumps([list(map(str, view.df.columns)), view.label_col]).encode())
    digest.update(pd.util.hash_pandas_object(view.df, index=False).to_numpy().tobytes())
    digest.update(json.dumps(params.fingerprint_dict(), sort_keys=True, default=str).encode())
    return digest.hexdigest()


class RandomForestTrainer(BaseAnalyser):
    """Fit a bagged ensemble of decision trees and estimate its error out-of-bag.

    Each tree is grown on a bootstrap resample with a random feature subset per split
    (:class:`sklearn.ensemble.RandomForestClassifier`). Rows left out of a tree's bootstrap
    sample are predicted by that tree only; the aggregated out-of-bag votes give the
    out-of-bag confusion matrix and misclassification rate without touching held-out data.
    Categorical features are one-hot encoded in front of the forest.

    When a :class:`ModelCache` is given, a model stored under the same fingerprint is
    loaded instead of retrained. An unreadable cache is deleted and training proceeds.

    Example:
        >>> trainer = RandomForestTrainer(train.view(), params=ForestParams(random_state=1234))
        >>> model = trainer.fit().result().model
        >>> model.oob_error
    """

    def __init__(
        self,
        train: BaseDataset | DatasetView,
        params: ForestParams | None = None,
        cache: ModelCache | None = None,
        min_rows: int = 20,
    ) -> None:
        """Initialize the trainer.

        Args:
            train: Training dataset, or a view of it (features + label column)
            params: Forest hyperparameters
            cache: Optional model cache
            min_rows: Minimum number of training rows
        """
        self._view = train.view() if isinstance(train, BaseDataset) else train
        self.params = params or ForestParams()
        self.cache = cache
        self.min_rows = min_rows
        self._result: TrainingResult | None = None

    def fit(self) -> "RandomForestTrainer":
        """Load the model from the cache or train it.

        Raises:
            TrainingError: If the training data is degenerate.
        """
        self._validate()
        fingerprint = training_fingerprint(self._view, self.params)

        cached = self._load_cached(fingerprint)
        if cached is not None:
            self._result = TrainingResult(model=cached, from_cache=True)
            return self

        model = self._train(fingerprint)
        if self.cache is not None:
            try:
                self.cache.save(model)
            except CacheError as exc:
                logger.warning("%s; continuing without cache", exc)
        self._result = TrainingResult(model=model, from_cache=False)
        return self

    def _validate(self) -> None:
        view = self._view
        if view.label_col is None:
            raise TrainingError("Training view carries no label column")
        if len(view) < self.min_rows:
            raise TrainingError(f"Need at least {self.min_rows} training rows, got {len(view)}")
        if not view.feature_cols:
            raise TrainingError("No feature columns to train on")
        n_levels = view.labels.nunique(dropna=True)
        if n_levels < 2:
            raise TrainingError(f"Degenerate label distribution: {n_levels} level(s) in '{view.label_col}'")
        degenerate = [col for col in view.feature_cols if view.df[col].nunique(dropna=True) <= 1]
        if degenerate:
            raise TrainingError(
                f"Feature columns entirely missing or constant after filtering: {degenerate}",
            )

    def _load_cached(self, fingerprint: str) -> FittedModel | None:
        if self.cache is None:
            return None
        try:
            return self.cache.load(fingerprint)
        except CacheError as exc:
            logger.warning("%s; deleting cache and retraining", exc)
            self.cache.invalidate()
            return None

    def _build_estimator(self, categorical: list[str]) -> Pipeline:
        forest = RandomForestClassifier(
            n_estimators=self.params.n_estimators,
            max_features=self.params.max_features,
            min_samples_leaf=self.params.min_samples_leaf,
            max_depth=self.params.max_depth,
            random_state=self.params.random_state,
            n_jobs=self.params.n_jobs,
            bootstrap=True,
            oob_score=True,
        )
        if not categorical:
            return Pipeline([("encode", "passthrough"), ("forest", forest)])
        encode = ColumnTransformer(
            [("categorical", OneHotEncoder(handle_unknown="ignore"), categorical)],
            remainder="passthrough",
        )
        return Pipeline([("encode", encode), ("forest", forest)])

    def _train(self, fingerprint: str) -> FittedModel:
        view = self._view
        categorical = view.categorical_features
        X = view.features
        y = view.labels.astype(str).to_numpy()

        estimator = self._build_estimator(categorical)
        logger.info(
            "Training random forest: %d rows, %d features, %d trees",
            len(X),
            X.shape[1],
            self.params.n_estimators,
        )
        estimator.fit(X, y)

        forest: RandomForestClassifier = estimator.named_steps["forest"]
        labels = [str(c) for c in forest.classes_]
        decision = forest.oob_decision_function_
        has_oob = np.nan_to_num(decision).sum(axis=1) > 0
        oob_pred = forest.classes_[np.argmax(np.nan_to_num(decision[has_oob]), axis=1)]
        oob_confusion = confusion_frame(y[has_oob], oob_pred, labels)
        oob_error = 1.0 - accuracy_from_confusion(oob_confusion)
        logger.info("Out-of-bag error estimate: %.4f (%d rows)", oob_error, int(has_oob.sum()))

        return FittedModel(
            estimator=estimator,
            feature_columns=list(view.feature_cols),
            label_col=str(view.label_col),
            labels=labels,
            params=self.params,
            fingerprint=fingerprint,
            n_train_rows=len(X),
            oob_confusion=oob_confusion,
            oob_error=oob_error,
            n_oob_rows=int(has_oob.sum()),
            categorical_columns=list(categorical),
        )

    def result(self) -> TrainingResult:
        """Return the training result.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if self._result is None:
            raise ValueError("Must call fit() before result()")
        return self._result


__all__ = ["FittedModel", "ForestParams", "RandomForestTrainer", "TrainingResult", "training_fingerprint"]
