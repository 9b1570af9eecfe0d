"""
Shared fixtures for the wine quality test suite.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from winequality.data_loader import WineRecord

HEADER = (
    "fixed acidity,volatile acidity,citric acid,residual sugar,chlorides,"
    "free sulfur dioxide,total sulfur dioxide,density,pH,sulphates,alcohol,quality,id"
)

TRAIN_ROWS = [
    [7.4, 0.70, 0.00, 1.9, 0.076, 11, 34, 0.9978, 3.51, 0.56, 9.4, 5, 1],
    [7.8, 0.88, 0.00, 2.6, 0.098, 25, 67, 0.9968, 3.20, 0.68, 9.8, 5, 2],
]
TEST_ROWS = [
    [7.4, 0.70, 0.00, 1.9, 0.076, 11, 34, 0.9978, 3.51, 0.56, 9.4, 5, 3],
]


def format_rows(rows, delimiter=","):
    return [delimiter.join(f"{v:g}" if not isinstance(v, str) else v for v in row) for row in rows]


@pytest.fixture
def write_csv(tmp_path):
    """Factory writing rows (lists of values or raw strings) to a CSV file."""
    counter = {'n': 0}

    def _write(rows, header=True, delimiter=",", name=None):
        counter['n'] += 1
        path = tmp_path / (name or f"data_{counter['n']}.csv")
        lines = []
        if header:
            lines.append(HEADER.replace(",", delimiter))
        for row in rows:
            if isinstance(row, str):
                lines.append(row)
            else:
                lines.extend(format_rows([row], delimiter))
        path.write_text("\n".join(lines) + ("\n" if lines else ""))
        return str(path)

    return _write


def make_synthetic_rows(n_rows=120, seed=42):
    """Rows whose quality rises with alcohol and falls with volatile acidity."""
    rng = np.random.default_rng(seed)
    rows = []
    for i in range(n_rows):
        alcohol = rng.uniform(8.5, 14.0)
        volatile = rng.uniform(0.2, 1.2)
        quality = float(np.clip(round(3 + 0.6 * (alcohol - 8.5) - 2.0 * (volatile - 0.2)), 3, 8))
        rows.append([
            rng.normal(8.3, 1.5),
            volatile,
            rng.uniform(0.0, 0.7),
            rng.uniform(1.2, 6.0),
            rng.uniform(0.04, 0.2),
            rng.uniform(5, 50),
            rng.uniform(10, 150),
            rng.normal(0.9967, 0.0015),
            rng.normal(3.3, 0.15),
            rng.uniform(0.4, 1.2),
            alcohol,
            quality,
            float(i + 1),
        ])
    return rows


@pytest.fixture
def synthetic_rows():
    return make_synthetic_rows()


@pytest.fixture
def synthetic_records(synthetic_rows):
    return [WineRecord(*(float(v) for v in row)) for row in synthetic_rows]


@pytest.fixture
def train_records():
    return [WineRecord(*(float(v) for v in row)) for row in TRAIN_ROWS]


@pytest.fixture
def holdout_records():
    return [WineRecord(*(float(v) for v in row)) for row in TEST_ROWS]
