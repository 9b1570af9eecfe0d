"""
Feature Assembly Module
=======================

Turns wine records into model inputs.

The identifier column is dropped and the 11 physicochemical columns are
packed, in fixed order, into one feature vector per record. The quality
column becomes the regression target.

Functions:
    - assemble_features: Feature vector for a single record
    - build_feature_matrix: Feature matrix and label vector for many records
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np

from .data_loader import FEATURE_COLUMNS, WineRecord

logger = logging.getLogger(__name__)

N_FEATURES = len(FEATURE_COLUMNS)


def assemble_features(record: WineRecord) -> np.ndarray:
    """
    Build the feature vector of a record.

    Args:
        record: Input record

    Returns:
        Float array of shape (11,), label and identifier excluded
    """
    return np.array([getattr(record, col) for col in FEATURE_COLUMNS], dtype=float)


def build_feature_matrix(records: Sequence[WineRecord]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Stack feature vectors and labels for a sequence of records.

    Args:
        records: Input records

    Returns:
        Tuple of (X, y) with shapes (n, 11) and (n,)
    """
    if len(records) == 0:
        return np.empty((0, N_FEATURES), dtype=float), np.empty((0,), dtype=float)

    X = np.vstack([assemble_features(record) for record in records])
    y = np.array([record.quality for record in records], dtype=float)
    logger.debug(f"Assembled feature matrix: X shape {X.shape}, y shape {y.shape}")
    return X, y


def get_feature_names() -> List[str]:
    """Names of the feature vector entries, in order."""
    return list(FEATURE_COLUMNS)
