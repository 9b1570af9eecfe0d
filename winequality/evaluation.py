"""
Model Evaluation Module
=======================

Scores a trained model against held-out wine records.

Features:
    - RMS, loss, R², L1 and L2 calculation
    - Actual vs Predicted plot
    - Residual analysis
    - Evaluation report generation
"""

import logging
import json
from pathlib import Path
from typing import Dict, Any, Optional, Sequence, Tuple

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns
from sklearn.metrics import mean_squared_error, mean_absolute_error, r2_score

from .data_loader import WineRecord
from .exceptions import EmptyInputError
from .features import build_feature_matrix
from .model import QualityRegressor

logger = logging.getLogger(__name__)


def calculate_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> Dict[str, Any]:
    """
    Calculate regression metrics.

    Args:
        y_true: Ground truth quality values of shape (n_samples,)
        y_pred: Predicted quality values of shape (n_samples,)

    Returns:
        Dictionary with rms, loss_fn, r_squared, l1, l2 and n_samples.
        r_squared is nan when fewer than two samples are given.
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)

    if len(y_true) == 0:
        raise EmptyInputError("Cannot compute metrics on an empty set.")

    l2 = mean_squared_error(y_true, y_pred)
    l1 = mean_absolute_error(y_true, y_pred)
    r2 = r2_score(y_true, y_pred) if len(y_true) > 1 else float('nan')

    return {
        'rms': float(np.sqrt(l2)),
        'loss_fn': float(l2),  # mean squared loss
        'r_squared': float(r2),
        'l1': float(l1),
        'l2': float(l2),
        'n_samples': int(len(y_true)),
    }


def plot_actual_vs_predicted(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    figsize: Tuple[int, int] = (7, 6),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Create an actual vs predicted scatter plot.

    Args:
        y_true: Ground truth values
        y_pred: Predicted values
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    ax.scatter(y_true, y_pred, alpha=0.5, s=20)

    # Perfect prediction line
    min_val = min(y_true.min(), y_pred.min())
    max_val = max(y_true.max(), y_pred.max())
    ax.plot([min_val, max_val], [min_val, max_val], 'r--', linewidth=2, label='Perfect')

    rmse = np.sqrt(mean_squared_error(y_true, y_pred))
    title = f'Quality: Actual vs Predicted\nRMSE={rmse:.4f}'
    if len(y_true) > 1:
        title += f', R²={r2_score(y_true, y_pred):.4f}'

    ax.set_xlabel('Actual quality')
    ax.set_ylabel('Predicted quality')
    ax.set_title(title, fontsize=10, fontweight='bold')
    ax.legend(loc='upper left', fontsize=8)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Actual vs Predicted plot saved to {save_path}")

    return fig


def plot_residuals(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    figsize: Tuple[int, int] = (7, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Create a residual distribution plot.

    Args:
        y_true: Ground truth values
        y_pred: Predicted values
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    residuals = y_true - y_pred

    fig, ax = plt.subplots(figsize=figsize)

    sns.histplot(residuals, kde=len(residuals) > 1, ax=ax, bins=30, alpha=0.7)

    ax.axvline(0, color='red', linestyle='--', linewidth=2, label='Zero')
    ax.axvline(np.mean(residuals), color='green', linestyle='--',
               linewidth=2, label=f'Mean: {np.mean(residuals):.4f}')

    ax.set_xlabel('Residual (Actual - Predicted)')
    ax.set_ylabel('Frequency')
    ax.set_title(f'Residual Analysis (Std: {np.std(residuals):.4f})', fontsize=10, fontweight='bold')
    ax.legend(fontsize=8)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Residuals plot saved to {save_path}")

    return fig


def evaluate_model(
    model: QualityRegressor,
    records: Sequence[WineRecord],
    output_dir: Optional[str] = None,
    save_plots: bool = False
) -> Dict[str, Any]:
    """
    Score a trained model against held-out records.

    Args:
        model: Trained model
        records: Held-out records
        output_dir: Directory for metrics JSON and figures (optional)
        save_plots: Whether to write figures into output_dir

    Returns:
        Dictionary containing metrics and any written file paths

    Raises:
        EmptyInputError: If records is empty
    """
    if len(records) == 0:
        raise EmptyInputError("Cannot evaluate a model without test rows.")

    logger.info("=" * 60)
    logger.info("STARTING MODEL EVALUATION")
    logger.info("=" * 60)

    X, y_true = build_feature_matrix(records)
    y_pred = model.predict(X)

    logger.info("Calculating evaluation metrics...")
    metrics = calculate_metrics(y_true, y_pred)

    result = {
        'metrics': metrics,
        'figures': [],
        'metrics_file': None
    }

    if output_dir:
        output_dir = Path(output_dir)
        metrics_dir = output_dir / "metrics"
        metrics_dir.mkdir(parents=True, exist_ok=True)

        metrics_file = metrics_dir / "evaluation_metrics.json"
        with open(metrics_file, 'w') as f:
            json.dump(metrics, f, indent=2)
        logger.info(f"Metrics saved to {metrics_file}")
        result['metrics_file'] = str(metrics_file)

        if save_plots:
            figures_dir = output_dir / "figures"
            figures_dir.mkdir(parents=True, exist_ok=True)

            logger.info("Generating Actual vs Predicted plot...")
            plot_actual_vs_predicted(
                y_true, y_pred,
                save_path=str(figures_dir / "eval_actual_vs_predicted.png")
            )
            result['figures'].append("eval_actual_vs_predicted.png")

            logger.info("Generating residual analysis...")
            plot_residuals(
                y_true, y_pred,
                save_path=str(figures_dir / "eval_residuals.png")
            )
            result['figures'].append("eval_residuals.png")

            plt.close('all')

    logger.info("=" * 60)
    logger.info("EVALUATION COMPLETE")
    logger.info(f"  RMS: {metrics['rms']:.6f}")
    logger.info(f"  LossFn: {metrics['loss_fn']:.6f}")
    logger.info(f"  R²: {metrics['r_squared']:.6f}")
    logger.info("=" * 60)

    return result


def print_evaluation_report(metrics: Dict[str, Any]) -> None:
    """
    Print a formatted evaluation report to console.

    Args:
        metrics: Metrics dictionary from calculate_metrics
    """
    print("\n" + "=" * 70)
    print("MODEL EVALUATION REPORT")
    print("=" * 70)

    print(f"Rms={metrics['rms']}")
    print(f"LossFn={metrics['loss_fn']}")
    print(f"RSquared = {metrics['r_squared']}")

    print("-" * 70)
    print(f"  • L1 (MAE): {metrics['l1']:.6f}")
    print(f"  • L2 (MSE): {metrics['l2']:.6f}")
    print(f"  • Samples evaluated: {metrics['n_samples']}")

    r2 = metrics['r_squared']
    print("\nInterpretation:")
    if np.isnan(r2):
        print("  - R² undefined for a single test row")
    elif r2 > 0.7:
        print("  ✓ Good model performance (R² > 0.7)")
    elif r2 > 0.3:
        print("  ⚠ Moderate model performance (R² > 0.3)")
    else:
        print("  ✗ Poor model performance (R² <= 0.3)")

    print("=" * 70 + "\n")
