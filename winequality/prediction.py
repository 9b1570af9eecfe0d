"""
Prediction Module
=================

Runs a trained model over wine records and reports the results.

Features:
    - One prediction per record, in input order
    - Highlight of the last record (identifier, true quality, prediction)
    - Export of all predictions to CSV
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List, Optional, Sequence

import pandas as pd

from .data_loader import WineRecord
from .exceptions import EmptyInputError
from .features import assemble_features
from .model import QualityRegressor

logger = logging.getLogger(__name__)

PREDICTIONS_FILENAME = "predictions.csv"


@dataclass(frozen=True)
class Prediction:
    """Predicted quality of one record, with its identifier and true label."""
    record_id: float
    quality: float
    predicted_quality: float

    @property
    def error(self) -> float:
        return self.predicted_quality - self.quality


def predict_records(
    model: QualityRegressor,
    records: Sequence[WineRecord]
) -> List[Prediction]:
    """
    Predict the quality of every record.

    Args:
        model: Trained model
        records: Records to predict

    Returns:
        One Prediction per record, in input order

    Raises:
        EmptyInputError: If records is empty
    """
    if len(records) == 0:
        raise EmptyInputError("No rows to predict on.")

    predictions = []
    for record in records:
        value = model.predict_one(assemble_features(record))
        predictions.append(Prediction(record.id, record.quality, value))

    logger.info(f"Generated {len(predictions)} predictions")
    return predictions


def format_value(value: float) -> str:
    """Render whole numbers without a fraction and other values exactly."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_prediction(prediction: Prediction) -> str:
    """Render a prediction as 'Wine Id: <id>, Quality: <label> | Prediction: <value>'."""
    return (
        f"Wine Id: {format_value(prediction.record_id)}, "
        f"Quality: {format_value(prediction.quality)} "
        f"| Prediction: {prediction.predicted_quality}"
    )


def export_predictions(
    predictions: Sequence[Prediction],
    output_path: str,
    filename: str = PREDICTIONS_FILENAME
) -> str:
    """
    Export predictions to CSV file.

    Args:
        predictions: Predictions to write
        output_path: Directory to save the file
        filename: Name of the CSV file

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(
        {
            'id': [p.record_id for p in predictions],
            'quality': [p.quality for p in predictions],
            'predicted_quality': [p.predicted_quality for p in predictions],
        }
    )

    filepath = output_path / filename
    df.to_csv(filepath, index=False)

    logger.info(f"Predictions exported to {filepath}")
    return str(filepath)


def run_final_prediction(
    model: QualityRegressor,
    records: Sequence[WineRecord],
    output_dir: Optional[str] = None
) -> Dict[str, Any]:
    """
    Predict every record and highlight the last one.

    Args:
        model: Trained model
        records: Records to predict
        output_dir: Directory for the predictions CSV (optional)

    Returns:
        Dictionary with 'predictions', 'last' and 'csv_path'

    Raises:
        EmptyInputError: If records is empty
    """
    logger.info("=" * 60)
    logger.info("STARTING PREDICTION")
    logger.info("=" * 60)

    predictions = predict_records(model, records)
    last = predictions[-1]

    csv_path = None
    if output_dir:
        csv_path = export_predictions(predictions, output_dir)

    logger.info("=" * 60)
    logger.info("PREDICTION COMPLETE")
    logger.info(f"  {format_prediction(last)}")
    logger.info("=" * 60)

    return {
        'predictions': predictions,
        'last': last,
        'csv_path': csv_path
    }


def print_prediction_results(result: Dict[str, Any]) -> None:
    """
    Print all predictions, then the last one in the single-line form.

    Args:
        result: Result dictionary from run_final_prediction
    """
    print("\n" + "=" * 70)
    print("PREDICTION RESULTS")
    print("=" * 70)

    print(f"\n{'Wine Id':<12} {'Quality':<12} {'Prediction':<15} {'Error':<12}")
    print("-" * 70)

    for p in result['predictions']:
        print(f"{format_value(p.record_id):<12} {format_value(p.quality):<12} "
              f"{p.predicted_quality:<15.6f} {p.error:<+12.6f}")

    print("-" * 70)
    print(format_prediction(result['last']))

    if result.get('csv_path'):
        print(f"\nPredictions exported to: {result['csv_path']}")

    print("=" * 70 + "\n")
