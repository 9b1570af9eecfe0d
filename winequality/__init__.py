"""
Wine Quality Prediction
=======================

A machine learning pipeline that predicts wine quality from physicochemical features.

Modules:
    - config: Pipeline configuration (YAML)
    - data_loader: CSV ingestion and validation
    - features: Feature vector assembly
    - model: Model training with scikit-learn tree ensembles
    - evaluation: Model evaluation and metrics
    - prediction: Inference and reporting
    - exceptions: Pipeline error types
"""

__version__ = "1.0.0"
__author__ = "Predictive Analytics Team"
