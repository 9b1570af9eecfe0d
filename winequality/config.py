"""
Configuration Module
====================

Explicit pipeline configuration, loaded from YAML or built in code.

Functions:
    - load_config: Load YAML configuration file into a PipelineConfig
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_TRAIN_PATH = "data/winequality-data.csv"
DEFAULT_TEST_PATH = "data/winequality-test-data.csv"

DEFAULT_OUTPUT = {
    'model_path': None,
    'reports_path': None,
    'predictions_path': None,
    'save_plots': False,
}

DEFAULT_LOGGING = {
    'level': 'INFO',
    'log_file': None,
}


@dataclass
class PipelineConfig:
    """
    Settings passed into the pipeline entry point.

    Attributes:
        train_path: Training CSV file location
        test_path: Test CSV file location
        delimiter: Field delimiter of both files
        has_header: Whether both files start with a header row
        model: Model hyperparameters (see winequality.model.train_model)
        output: Output locations for model, reports and predictions
        logging: Logging level and optional log file
    """
    train_path: str = DEFAULT_TRAIN_PATH
    test_path: str = DEFAULT_TEST_PATH
    delimiter: str = ","
    has_header: bool = True
    model: Dict[str, Any] = field(default_factory=dict)
    output: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_OUTPUT))
    logging: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_LOGGING))

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> 'PipelineConfig':
        """
        Build a configuration from a parsed YAML mapping.

        Missing keys take their defaults and unknown top-level keys are ignored.
        """
        raw = raw or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Configuration must be a mapping, got {type(raw).__name__}")

        known = {'data', 'model', 'output', 'logging'}
        for key in raw:
            if key not in known:
                logger.warning(f"Ignoring unknown configuration section: {key}")

        data = raw.get('data') or {}
        output = dict(DEFAULT_OUTPUT)
        output.update(raw.get('output') or {})
        log_settings = dict(DEFAULT_LOGGING)
        log_settings.update(raw.get('logging') or {})

        return cls(
            train_path=data.get('train_path', DEFAULT_TRAIN_PATH),
            test_path=data.get('test_path', DEFAULT_TEST_PATH),
            delimiter=data.get('delimiter', ","),
            has_header=bool(data.get('has_header', True)),
            model=dict(raw.get('model') or {}),
            output=output,
            logging=log_settings,
        )


def load_config(config_path: str = "config/config.yaml") -> PipelineConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to the configuration file

    Returns:
        PipelineConfig built from the file

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        raw = yaml.safe_load(f)

    config = PipelineConfig.from_dict(raw)
    logger.info(f"Loaded configuration from {config_path}")
    return config
