"""
Test Suite for Model Module
===========================

Tests for WineQualityModel training, prediction and persistence.
"""

import math

import pytest
import numpy as np

from winequality.exceptions import InsufficientDataError
from winequality.features import assemble_features, build_feature_matrix
from winequality.model import (
    ALGORITHMS, QualityRegressor, WineQualityModel, train_model, print_model_summary
)


class TestWineQualityModel:
    """Tests for WineQualityModel."""

    def test_is_quality_regressor(self):
        """Test that the model implements the regressor interface."""
        assert isinstance(WineQualityModel(), QualityRegressor)

    def test_default_hyperparameters(self):
        """Test that defaults are filled in and overrides win."""
        model = WineQualityModel(learning_rate=0.05)

        assert model.algorithm == 'hist_gradient_boosting'
        assert model.hyperparameters['learning_rate'] == 0.05
        assert model.hyperparameters['max_leaf_nodes'] == 20
        assert not model.is_fitted

    def test_unknown_algorithm(self):
        """Test that unknown algorithm names are rejected."""
        with pytest.raises(ValueError, match="Unknown algorithm"):
            WineQualityModel(algorithm='linear_svm')

    def test_unknown_hyperparameter(self):
        """Test that unknown hyperparameters are rejected."""
        with pytest.raises(ValueError, match="Unknown hyperparameters"):
            WineQualityModel(n_trees=10)

    def test_fit_empty_raises(self):
        """Test that training without rows fails."""
        with pytest.raises(InsufficientDataError):
            WineQualityModel().fit([])

    def test_predict_before_fit(self):
        """Test that prediction requires a trained model."""
        with pytest.raises(ValueError, match="must be trained"):
            WineQualityModel().predict(np.zeros((1, 11)))

    def test_single_row_prediction_is_finite(self, train_records):
        """Test training then predicting on the same single row."""
        record = train_records[0]
        model = WineQualityModel().fit([record])

        value = model.predict_one(assemble_features(record))

        assert math.isfinite(value)

    def test_two_row_example(self, train_records, holdout_records):
        """Test the two-row training set against a one-row test set."""
        model = WineQualityModel().fit(train_records)

        value = model.predict_one(assemble_features(holdout_records[0]))

        assert math.isfinite(value)
        assert model.training_info['n_samples'] == 2

    def test_predict_one_wrong_length(self, train_records):
        """Test that feature vectors must have 11 entries."""
        model = WineQualityModel().fit(train_records)

        with pytest.raises(ValueError, match="length 11"):
            model.predict_one([1.0, 2.0, 3.0])

    def test_predict_wrong_width(self, train_records):
        """Test that feature matrices must have 11 columns."""
        model = WineQualityModel().fit(train_records)

        with pytest.raises(ValueError, match="Expected 11 features"):
            model.predict(np.zeros((2, 12)))

    @pytest.mark.parametrize("algorithm", sorted(ALGORITHMS))
    def test_algorithms_learn_signal(self, algorithm, synthetic_records):
        """Test that every algorithm fits the synthetic signal."""
        model = WineQualityModel(algorithm=algorithm).fit(synthetic_records)

        X, y = build_feature_matrix(synthetic_records)
        predictions = model.predict(X)

        assert predictions.shape == y.shape
        assert np.all(np.isfinite(predictions))
        assert np.mean((predictions - y) ** 2) < np.var(y)

    def test_feature_importances(self, synthetic_records):
        """Test importances for a forest model."""
        model = WineQualityModel(algorithm='random_forest', n_estimators=20).fit(synthetic_records)

        importances = model.get_feature_importances()

        assert len(importances) == 11
        assert sum(importances.values()) == pytest.approx(1.0)
        assert max(importances, key=importances.get) in ('alcohol', 'volatile_acidity')

    def test_feature_importances_unavailable(self, train_records):
        """Test that histogram boosting reports no importances."""
        model = WineQualityModel().fit(train_records)

        with pytest.raises(ValueError, match="does not expose"):
            model.get_feature_importances()

    def test_save_load(self, synthetic_records, tmp_path):
        """Test that a saved model predicts identically after loading."""
        model = WineQualityModel().fit(synthetic_records)
        path = str(tmp_path / "models" / "model.joblib")

        model.save(path)
        loaded = WineQualityModel.load(path)

        X, _ = build_feature_matrix(synthetic_records)
        np.testing.assert_array_equal(loaded.predict(X), model.predict(X))
        assert loaded.algorithm == model.algorithm
        assert loaded.is_fitted

    def test_save_untrained(self, tmp_path):
        """Test that an untrained model cannot be saved."""
        with pytest.raises(ValueError, match="untrained"):
            WineQualityModel().save(str(tmp_path / "model.joblib"))

    def test_load_missing(self, tmp_path):
        """Test loading a model that does not exist."""
        with pytest.raises(FileNotFoundError):
            WineQualityModel.load(str(tmp_path / "missing.joblib"))


class TestTrainModel:
    """Tests for the train_model helper."""

    def test_reads_config(self, synthetic_records):
        """Test that algorithm and hyperparameters come from the config."""
        config = {'algorithm': 'gradient_boosting', 'random_state': 7, 'n_estimators': 30}

        model = train_model(synthetic_records, config)

        assert model.algorithm == 'gradient_boosting'
        assert model.random_state == 7
        assert model.hyperparameters['n_estimators'] == 30
        assert config == {'algorithm': 'gradient_boosting', 'random_state': 7, 'n_estimators': 30}

    def test_empty_raises(self):
        """Test that train_model rejects empty input."""
        with pytest.raises(InsufficientDataError):
            train_model([], {})

    def test_save_path(self, train_records, tmp_path):
        """Test that train_model saves when asked."""
        path = tmp_path / "model.joblib"

        train_model(train_records, None, save_path=str(path))

        assert path.exists()

    def test_print_summary(self, train_records, capsys):
        """Test the model summary output."""
        print_model_summary(train_model(train_records))

        out = capsys.readouterr().out
        assert "MODEL SUMMARY" in out
        assert "HistGradientBoostingRegressor" in out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
