"""Tests for random-forest training, out-of-bag statistics and the model cache."""

import logging
import pickle
from pathlib import Path

import joblib
import numpy as np
import pandas as pd
import pytest

from wle_tlbx.analysis.model_cache import ModelCache
from wle_tlbx.analysis.model_trainer import ForestParams, RandomForestTrainer, training_fingerprint
from wle_tlbx.data import WLEDataset
from wle_tlbx.errors import CacheError, TrainingError


FAST = ForestParams(n_estimators=25, random_state=0, n_jobs=1)


class TestRandomForestTrainer:
    def test_separable_data_has_zero_oob_error(self, separable_dataset: WLEDataset) -> None:
        result = RandomForestTrainer(separable_dataset.view(), params=FAST).fit().result()
        model = result.model

        assert not result.from_cache
        assert model.oob_error == 0.0
        assert model.labels == ["A", "B", "C", "D", "E"]
        assert model.n_train_rows == 200
        assert 0 < model.n_oob_rows <= 200
        assert int(np.trace(model.oob_confusion.to_numpy())) == model.n_oob_rows

    def test_accepts_dataset(self, separable_dataset: WLEDataset) -> None:
        model = RandomForestTrainer(separable_dataset, params=FAST).fit().result().model
        assert model.feature_columns == ["roll_belt", "pitch_forearm"]
        assert model.label_col == "classe"

    def test_predict(self, separable_dataset: WLEDataset) -> None:
        model = RandomForestTrainer(separable_dataset, params=FAST).fit().result().model
        frame = pd.DataFrame({"pitch_forearm": [0.0, -60.0], "roll_belt": [0.0, 80.0], "extra": [1, 2]})
        assert model.predict(frame).tolist() == ["A", "E"]

        proba = model.predict_proba(frame)
        assert proba.columns.tolist() == ["A", "B", "C", "D", "E"]
        assert proba.sum(axis=1).to_numpy() == pytest.approx([1.0, 1.0])

    def test_predict_missing_column(self, separable_dataset: WLEDataset) -> None:
        model = RandomForestTrainer(separable_dataset, params=FAST).fit().result().model
        with pytest.raises(KeyError, match="pitch_forearm"):
            model.predict(pd.DataFrame({"roll_belt": [1.0]}))

    def test_feature_importances(self, separable_dataset: WLEDataset) -> None:
        model = RandomForestTrainer(separable_dataset, params=FAST).fit().result().model
        importances = model.feature_importances()
        assert set(importances.index) == {"roll_belt", "pitch_forearm"}
        assert importances.sum() == pytest.approx(1.0)

    def test_categorical_features_are_encoded(self, separable_dataset: WLEDataset) -> None:
        df = separable_dataset.df.assign(sensor_state=np.resize(np.array(["on", "off"]), len(separable_dataset)))
        ds = WLEDataset(df=df)
        model = RandomForestTrainer(ds, params=FAST).fit().result().model

        assert model.categorical_columns == ["sensor_state"]
        importances = model.feature_importances()
        assert set(importances.index) == {"roll_belt", "pitch_forearm", "sensor_state"}
        assert model.predict(df.head(3)).tolist() == ["A", "A", "A"]

    def test_result_before_fit(self, separable_dataset: WLEDataset) -> None:
        with pytest.raises(ValueError, match="fit"):
            RandomForestTrainer(separable_dataset).result()


class TestDegenerateTrainingData:
    def test_too_few_rows(self, separable_dataset: WLEDataset) -> None:
        with pytest.raises(TrainingError, match="at least") as excinfo:
            RandomForestTrainer(separable_dataset.take_rows(range(10)), params=FAST).fit()
        assert excinfo.value.stage == "train"

    def test_single_label_level(self) -> None:
        df = pd.DataFrame({"x": np.arange(30, dtype=float), "classe": ["A"] * 30})
        with pytest.raises(TrainingError, match="Degenerate label"):
            RandomForestTrainer(WLEDataset(df=df), params=FAST).fit()

    def test_constant_feature(self, separable_dataset: WLEDataset) -> None:
        ds = WLEDataset(df=separable_dataset.df.assign(flat=1.0))
        with pytest.raises(TrainingError, match="flat"):
            RandomForestTrainer(ds, params=FAST).fit()

    def test_all_missing_feature(self, separable_dataset: WLEDataset) -> None:
        ds = WLEDataset(df=separable_dataset.df.assign(empty=np.nan))
        with pytest.raises(TrainingError, match="empty"):
            RandomForestTrainer(ds, params=FAST).fit()

    def test_no_features(self, separable_dataset: WLEDataset) -> None:
        with pytest.raises(TrainingError, match="No feature"):
            RandomForestTrainer(separable_dataset.view(columns=[]), params=FAST).fit()

    def test_unlabelled_view(self, separable_dataset: WLEDataset) -> None:
        with pytest.raises(TrainingError, match="no label"):
            RandomForestTrainer(separable_dataset.view(include_label=False), params=FAST).fit()


class TestFingerprint:
    def test_stable_for_equal_input(self, separable_dataset: WLEDataset) -> None:
        view = separable_dataset.view()
        assert training_fingerprint(view, FAST) == training_fingerprint(separable_dataset.view(), FAST)

    def test_changes_with_data_and_params(self, separable_dataset: WLEDataset) -> None:
        base = training_fingerprint(separable_dataset.view(), FAST)
        shifted = WLEDataset(df=separable_dataset.df.assign(roll_belt=separable_dataset.df["roll_belt"] + 1))
        assert training_fingerprint(shifted.view(), FAST) != base
        assert training_fingerprint(separable_dataset.view(), ForestParams(n_estimators=26, random_state=0)) != base

    def test_ignores_worker_count(self, separable_dataset: WLEDataset) -> None:
        view = separable_dataset.view()
        assert training_fingerprint(view, ForestParams(n_jobs=1)) == training_fingerprint(view, ForestParams(n_jobs=4))


class TestModelCache:
    def test_miss_then_hit(self, separable_dataset: WLEDataset, tmp_path: Path) -> None:
        cache = ModelCache(tmp_path / "cache" / "forest.joblib")

        first = RandomForestTrainer(separable_dataset, params=FAST, cache=cache).fit().result()
        assert not first.from_cache
        assert cache.exists()

        second = RandomForestTrainer(separable_dataset, params=FAST, cache=cache).fit().result()
        assert second.from_cache
        assert second.model.fingerprint == first.model.fingerprint

        frame = separable_dataset.df
        assert np.array_equal(first.model.predict(frame), second.model.predict(frame))
        assert second.model.oob_error == first.model.oob_error

    def test_no_temporary_files_left(self, separable_dataset: WLEDataset, tmp_path: Path) -> None:
        cache = ModelCache(tmp_path / "forest.joblib")
        RandomForestTrainer(separable_dataset, params=FAST, cache=cache).fit()
        assert [p.name for p in tmp_path.iterdir()] == ["forest.joblib"]

    def test_stale_cache_retrains(self, separable_dataset: WLEDataset, tmp_path: Path) -> None:
        cache = ModelCache(tmp_path / "forest.joblib")
        RandomForestTrainer(separable_dataset, params=FAST, cache=cache).fit()

        other = ForestParams(n_estimators=10, random_state=0, n_jobs=1)
        result = RandomForestTrainer(separable_dataset, params=other, cache=cache).fit().result()
        assert not result.from_cache
        assert cache.load(result.model.fingerprint) is not None

    def test_load_returns_none_when_absent(self, tmp_path: Path) -> None:
        assert ModelCache(tmp_path / "absent.joblib").load("abc") is None

    def test_corrupt_cache_raises_cache_error(self, tmp_path: Path) -> None:
        path = tmp_path / "forest.joblib"
        path.write_bytes(b"not a joblib file")
        with pytest.raises(CacheError) as excinfo:
            ModelCache(path).load("abc")
        assert excinfo.value.stage == "cache"

    def test_unexpected_layout_raises_cache_error(self, tmp_path: Path) -> None:
        path = tmp_path / "forest.joblib"
        joblib.dump({"format": 1, "fingerprint": "abc", "model": "nope"}, path)
        with pytest.raises(CacheError, match="layout"):
            ModelCache(path).load("abc")

    def test_corrupt_cache_is_replaced(
        self,
        separable_dataset: WLEDataset,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        path = tmp_path / "forest.joblib"
        path.write_bytes(b"garbage")
        cache = ModelCache(path)

        with caplog.at_level(logging.WARNING):
            result = RandomForestTrainer(separable_dataset, params=FAST, cache=cache).fit().result()

        assert not result.from_cache
        assert "deleting cache and retraining" in caplog.text
        assert cache.load(result.model.fingerprint) is not None

    def test_invalidate(self, tmp_path: Path) -> None:
        path = tmp_path / "forest.joblib"
        path.write_bytes(b"x")
        cache = ModelCache(path)
        cache.invalidate()
        assert not cache.exists()
        cache.invalidate()

    def test_failed_serialization_leaves_no_temp_file(
        self,
        separable_dataset: WLEDataset,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        model = RandomForestTrainer(separable_dataset, params=FAST).fit().result().model

        def _partial_dump(value: object, filename: str) -> None:
            Path(filename).write_bytes(b"partial")
            raise pickle.PicklingError("cannot pickle")

        monkeypatch.setattr(joblib, "dump", _partial_dump)
        cache = ModelCache(tmp_path / "forest.joblib")
        with pytest.raises(CacheError, match="cannot pickle") as excinfo:
            cache.save(model)

        assert isinstance(excinfo.value.__cause__, pickle.PicklingError)
        assert list(tmp_path.iterdir()) == []

    def test_trainer_survives_failed_cache_write(
        self,
        separable_dataset: WLEDataset,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        def _failing_dump(value: object, filename: str) -> None:
            raise pickle.PicklingError("cannot pickle")

        monkeypatch.setattr(joblib, "dump", _failing_dump)
        cache = ModelCache(tmp_path / "forest.joblib")
        with caplog.at_level(logging.WARNING):
            result = RandomForestTrainer(separable_dataset, params=FAST, cache=cache).fit().result()

        assert not result.from_cache
        assert result.model.oob_error == 0.0
        assert "continuing without cache" in caplog.text
        assert list(tmp_path.iterdir()) == []
