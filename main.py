#!/usr/bin/env python3
"""
Wine Quality Prediction - Main Pipeline
=======================================

Trains a regression model on wine physicochemical features, evaluates it
against a held-out test file and reports predictions for the test rows.

Phases:
    1. Training - Load training CSV and fit a tree-ensemble regressor
    2. Evaluation - RMS, loss and R² on the test CSV
    3. Prediction - Predict every test row, highlight the last one

Usage:
    # Run complete pipeline with config/config.yaml (or built-in defaults)
    python main.py

    # Override data locations
    python main.py --train data/winequality-data.csv --test data/winequality-test-data.csv

    # Train once, then reuse the saved model
    python main.py --phase train --model-path models/wine_quality.joblib
    python main.py --phase predict --model-path models/wine_quality.joblib
"""

import argparse
import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional, List

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from winequality.config import PipelineConfig, load_config
from winequality.data_loader import (
    load_data, load_records, records_from_frame, validate_data, print_data_summary
)
from winequality.model import WineQualityModel, train_model, print_model_summary
from winequality.evaluation import evaluate_model, print_evaluation_report
from winequality.prediction import run_final_prediction, print_prediction_results

DEFAULT_CONFIG_PATH = "config/config.yaml"
PHASES = ['train', 'evaluate', 'predict', 'all']

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure logging for the pipeline."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = log_file.replace("{timestamp}", datetime.now().strftime("%Y%m%d_%H%M%S"))
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def run_training(config: PipelineConfig, model_path: Optional[str] = None) -> WineQualityModel:
    """
    Execute Phase 1: Model Training.

    Args:
        config: Pipeline configuration
        model_path: Where to save the trained model (optional)

    Returns:
        Trained model
    """
    print("\n" + "=" * 70)
    print("PHASE 1: MODEL TRAINING")
    print("=" * 70)

    df = load_data(config.train_path, config.delimiter, config.has_header)
    print_data_summary(df)

    is_valid, _ = validate_data(df, strict=False)
    if not is_valid:
        print("⚠️  Data validation warnings detected. Proceeding anyway...")

    model = train_model(records_from_frame(df), config.model, save_path=model_path)
    print_model_summary(model)

    return model


def run_evaluation(model: WineQualityModel, config: PipelineConfig) -> Dict[str, Any]:
    """
    Execute Phase 2: Model Evaluation.

    Args:
        model: Trained model
        config: Pipeline configuration

    Returns:
        Evaluation result dictionary
    """
    print("\n" + "=" * 70)
    print("PHASE 2: MODEL EVALUATION")
    print("=" * 70)

    records = load_records(config.test_path, config.delimiter, config.has_header)

    result = evaluate_model(
        model,
        records,
        output_dir=config.output.get('reports_path'),
        save_plots=bool(config.output.get('save_plots', False))
    )

    print_evaluation_report(result['metrics'])

    return result


def run_prediction(model: WineQualityModel, config: PipelineConfig) -> Dict[str, Any]:
    """
    Execute Phase 3: Prediction.

    Reloads the test file and predicts every row.

    Args:
        model: Trained model
        config: Pipeline configuration

    Returns:
        Prediction result dictionary
    """
    print("\n" + "=" * 70)
    print("PHASE 3: PREDICTION")
    print("=" * 70)

    records = load_records(config.test_path, config.delimiter, config.has_header)

    result = run_final_prediction(
        model,
        records,
        output_dir=config.output.get('predictions_path')
    )

    print_prediction_results(result)

    return result


def obtain_model(config: PipelineConfig, model_path: Optional[str] = None) -> WineQualityModel:
    """Load a saved model when one exists at model_path, otherwise train one."""
    if model_path and Path(model_path).exists():
        model = WineQualityModel.load(model_path)
        print_model_summary(model)
        return model

    return run_training(config, model_path)


def run_pipeline(
    config: PipelineConfig,
    phase: str = 'all',
    model_path: Optional[str] = None
) -> Dict[str, Any]:
    """
    Execute the pipeline.

    Args:
        config: Pipeline configuration
        phase: One of 'train', 'evaluate', 'predict', 'all'
        model_path: Model file to save to ('train', 'all') or reuse
            ('evaluate', 'predict'); defaults to config.output['model_path']

    Returns:
        Dictionary containing the results of the phases that ran
    """
    if phase not in PHASES:
        raise ValueError(f"Unknown phase: {phase}. Choose from: {', '.join(PHASES)}")

    model_path = model_path or config.output.get('model_path')

    print("\n" + "=" * 70)
    print("WINE QUALITY PIPELINE")
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 70)

    results: Dict[str, Any] = {'config': config}

    if phase in ('train', 'all'):
        results['model'] = run_training(config, model_path)
    else:
        results['model'] = obtain_model(config, model_path)

    if phase in ('evaluate', 'all'):
        results['evaluation'] = run_evaluation(results['model'], config)

    if phase in ('predict', 'all'):
        results['prediction'] = run_prediction(results['model'], config)

    print("\n" + "=" * 70)
    print("PIPELINE COMPLETE")
    print("=" * 70)
    if 'evaluation' in results:
        print(f"  • Model R²: {results['evaluation']['metrics']['r_squared']:.4f}")
    if 'prediction' in results:
        print(f"  • Rows predicted: {len(results['prediction']['predictions'])}")
    print(f"Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 70 + "\n")

    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Wine quality regression pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --train data/winequality-data.csv --test data/winequality-test-data.csv
  python main.py --phase predict --model-path models/wine_quality.joblib
        """
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default=None,
        help=f'Path to configuration file (default: {DEFAULT_CONFIG_PATH} when present)'
    )

    parser.add_argument(
        '--train',
        type=str,
        default=None,
        help='Training CSV file (overrides the config)'
    )

    parser.add_argument(
        '--test',
        type=str,
        default=None,
        help='Test CSV file (overrides the config)'
    )

    parser.add_argument(
        '--phase', '-p',
        type=str,
        choices=PHASES,
        default='all',
        help='Phase to run (default: all)'
    )

    parser.add_argument(
        '--model-path', '-m',
        type=str,
        default=None,
        help='Model file to save to or load from'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with argument parsing."""
    args = build_parser().parse_args(argv)

    try:
        if args.config is not None:
            config = load_config(args.config)
        elif Path(DEFAULT_CONFIG_PATH).exists():
            config = load_config(DEFAULT_CONFIG_PATH)
        else:
            config = PipelineConfig()

        if args.train:
            config.train_path = args.train
        if args.test:
            config.test_path = args.test

        level = 'DEBUG' if args.verbose else config.logging.get('level', 'INFO')
        setup_logging(level, config.logging.get('log_file'))

        run_pipeline(config, phase=args.phase, model_path=args.model_path)
        return 0

    except Exception as e:
        logger.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\n❌ Pipeline failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
