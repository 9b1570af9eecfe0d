"""
Model Training Module
=====================

Handles regression model training for wine quality.

Features:
    - QualityRegressor interface so the learning algorithm is swappable
    - Tree-ensemble regressors from scikit-learn, selected by name
    - Hyperparameter configuration via config file
    - Model persistence (save/load)
    - Training progress logging
"""

import abc
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Sequence
from datetime import datetime

import numpy as np
import joblib
from sklearn.ensemble import (
    GradientBoostingRegressor,
    HistGradientBoostingRegressor,
    RandomForestRegressor,
)

from .data_loader import WineRecord
from .exceptions import InsufficientDataError
from .features import N_FEATURES, build_feature_matrix, get_feature_names

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = 'hist_gradient_boosting'

ALGORITHMS = {
    'hist_gradient_boosting': HistGradientBoostingRegressor,
    'gradient_boosting': GradientBoostingRegressor,
    'random_forest': RandomForestRegressor,
}

# Boosting defaults follow a 20-leaf, 100-tree ensemble with at least 10 rows per leaf.
DEFAULT_HYPERPARAMETERS = {
    'hist_gradient_boosting': {
        'max_iter': 100,
        'max_leaf_nodes': 20,
        'min_samples_leaf': 10,
        'learning_rate': 0.2,
        'l2_regularization': 0.0,
        'early_stopping': False,
    },
    'gradient_boosting': {
        'n_estimators': 100,
        'max_leaf_nodes': 20,
        'min_samples_leaf': 10,
        'learning_rate': 0.2,
        'subsample': 1.0,
    },
    'random_forest': {
        'n_estimators': 200,
        'max_depth': None,
        'min_samples_leaf': 1,
        'n_jobs': -1,
    },
}


class QualityRegressor(abc.ABC):
    """Interface between the pipeline and a learning algorithm."""

    @abc.abstractmethod
    def fit(self, records: Sequence[WineRecord]) -> 'QualityRegressor':
        """Train on records and return self."""

    @abc.abstractmethod
    def predict(self, X: np.ndarray) -> np.ndarray:
        """Predict quality for a (n, 11) feature matrix."""

    def predict_one(self, feature_vector: Sequence[float]) -> float:
        """Predict quality for a single feature vector."""
        vector = np.asarray(feature_vector, dtype=float)
        if vector.shape != (N_FEATURES,):
            raise ValueError(
                f"Expected a feature vector of length {N_FEATURES}, got shape {vector.shape}"
            )
        return float(self.predict(vector.reshape(1, -1))[0])


class WineQualityModel(QualityRegressor):
    """
    Wine quality regressor backed by a scikit-learn tree ensemble.

    The estimator is chosen by name from ALGORITHMS; hyperparameters not given
    fall back to DEFAULT_HYPERPARAMETERS for that algorithm.
    """

    def __init__(
        self,
        algorithm: str = DEFAULT_ALGORITHM,
        random_state: Optional[int] = 42,
        **hyperparameters: Any
    ):
        """
        Initialize the model.

        Args:
            algorithm: One of ALGORITHMS
            random_state: Random seed for reproducibility
            **hyperparameters: Estimator keyword arguments

        Raises:
            ValueError: If the algorithm or a hyperparameter is unknown
        """
        if algorithm not in ALGORITHMS:
            raise ValueError(
                f"Unknown algorithm: {algorithm}. Choose from: {', '.join(ALGORITHMS)}"
            )

        valid_params = ALGORITHMS[algorithm]().get_params()
        unknown = sorted(set(hyperparameters) - set(valid_params))
        if unknown:
            raise ValueError(f"Unknown hyperparameters for {algorithm}: {unknown}")

        self.algorithm = algorithm
        self.random_state = random_state
        self.hyperparameters: Dict[str, Any] = dict(DEFAULT_HYPERPARAMETERS[algorithm])
        self.hyperparameters.update(hyperparameters)

        self.estimator = None
        self.training_info: Dict[str, Any] = {}
        self._is_fitted = False

    def _create_estimator(self):
        """Create the underlying scikit-learn estimator."""
        return ALGORITHMS[self.algorithm](
            random_state=self.random_state,
            **self.hyperparameters
        )

    @property
    def is_fitted(self) -> bool:
        return self._is_fitted

    def fit(self, records: Sequence[WineRecord]) -> 'WineQualityModel':
        """
        Train the model on the provided records.

        Args:
            records: Training records

        Returns:
            Self for method chaining

        Raises:
            InsufficientDataError: If records is empty
        """
        if len(records) == 0:
            raise InsufficientDataError("Cannot train a model without training rows.")

        start_time = datetime.now()

        logger.info("=" * 60)
        logger.info("STARTING MODEL TRAINING")
        logger.info("=" * 60)

        X, y = build_feature_matrix(records)

        logger.info(f"Training data shape: X={X.shape}, y={y.shape}")
        logger.info(f"Algorithm: {self.algorithm}")
        logger.info("Hyperparameters:")
        for name, value in self.hyperparameters.items():
            logger.info(f"  - {name}: {value}")

        estimator = self._create_estimator()
        estimator.fit(X, y)

        end_time = datetime.now()
        training_duration = (end_time - start_time).total_seconds()

        self.estimator = estimator
        self.training_info = {
            'training_duration_seconds': training_duration,
            'n_samples': X.shape[0],
            'n_features': X.shape[1],
            'trained_at': end_time.isoformat(),
            'algorithm': self.algorithm,
            'hyperparameters': dict(self.hyperparameters),
        }
        if hasattr(estimator, 'n_iter_'):
            self.training_info['actual_iterations'] = int(estimator.n_iter_)

        self._is_fitted = True

        logger.info("=" * 60)
        logger.info(f"MODEL TRAINING COMPLETE in {training_duration:.2f} seconds")
        logger.info("=" * 60)

        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        Make predictions using the trained model.

        Args:
            X: Feature array of shape (n_samples, 11)

        Returns:
            Predictions array of shape (n_samples,)
        """
        if not self._is_fitted:
            raise ValueError("Model must be trained before prediction. Call fit() first.")

        X = np.asarray(X, dtype=float)
        if X.ndim != 2 or X.shape[1] != N_FEATURES:
            raise ValueError(f"Expected {N_FEATURES} features, but got shape {X.shape}")

        return self.estimator.predict(X)

    def get_feature_importances(self) -> Dict[str, float]:
        """
        Get per-feature importances.

        Returns:
            Mapping of feature name to importance score

        Raises:
            ValueError: If the model is untrained or the algorithm has no importances
        """
        if not self._is_fitted:
            raise ValueError("Model must be trained first.")

        if not hasattr(self.estimator, 'feature_importances_'):
            raise ValueError(f"Algorithm {self.algorithm} does not expose feature importances.")

        return {
            name: float(score)
            for name, score in zip(get_feature_names(), self.estimator.feature_importances_)
        }

    def save(self, filepath: str) -> None:
        """
        Save the trained model to disk.

        Args:
            filepath: Path to save the model
        """
        if not self._is_fitted:
            raise ValueError("Cannot save untrained model.")

        state = {
            'estimator': self.estimator,
            'algorithm': self.algorithm,
            'random_state': self.random_state,
            'hyperparameters': self.hyperparameters,
            'training_info': self.training_info,
            '_is_fitted': self._is_fitted
        }

        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(state, filepath)
        logger.info(f"Model saved to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> 'WineQualityModel':
        """
        Load a trained model from disk.

        Args:
            filepath: Path to the saved model

        Returns:
            Loaded WineQualityModel instance
        """
        if not Path(filepath).exists():
            raise FileNotFoundError(f"Model file not found: {filepath}")

        state = joblib.load(filepath)

        model = cls(
            algorithm=state['algorithm'],
            random_state=state['random_state'],
            **state['hyperparameters']
        )
        model.estimator = state['estimator']
        model.training_info = state['training_info']
        model._is_fitted = state['_is_fitted']

        logger.info(f"Model loaded from {filepath}")
        return model


def train_model(
    records: Sequence[WineRecord],
    model_config: Optional[Dict[str, Any]] = None,
    save_path: Optional[str] = None
) -> WineQualityModel:
    """
    Train a model using configuration parameters.

    Args:
        records: Training records
        model_config: The 'model' configuration section. 'algorithm' and
            'random_state' are read from it; every other key is passed to
            the estimator as a hyperparameter.
        save_path: Path to save the trained model (optional)

    Returns:
        Trained WineQualityModel
    """
    model_config = dict(model_config or {})
    algorithm = model_config.pop('algorithm', DEFAULT_ALGORITHM)
    random_state = model_config.pop('random_state', 42)

    model = WineQualityModel(algorithm=algorithm, random_state=random_state, **model_config)
    model.fit(records)

    if save_path:
        model.save(save_path)

    return model


def print_model_summary(model: WineQualityModel) -> None:
    """
    Print a summary of the trained model.

    Args:
        model: Trained model instance
    """
    print("\n" + "=" * 50)
    print("MODEL SUMMARY")
    print("=" * 50)
    print(f"Model Type: {type(model.estimator).__name__} ({model.algorithm})")
    print(f"Number of input features: {N_FEATURES}")
    print("\nHyperparameters:")
    for name, value in model.hyperparameters.items():
        print(f"  - {name}: {value}")

    if model.training_info:
        print("\nTraining Info:")
        print(f"  - Duration: {model.training_info.get('training_duration_seconds', 0.0):.2f}s")
        print(f"  - Samples: {model.training_info.get('n_samples', 'N/A')}")
        if 'actual_iterations' in model.training_info:
            print(f"  - Actual iterations: {model.training_info['actual_iterations']}")

    print("=" * 50 + "\n")
