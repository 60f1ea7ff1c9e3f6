"""
Evaluation Module for the Expense Extraction Engine.

This module provides:
    - GroundTruthLoader: JSON/CSV/Excel ground truth indexed by file name
    - MetricsCalculator: per-field exact and partial matching
    - Evaluator: matching, metrics and reports
"""

from .ground_truth import GroundTruthLoader
from .metrics import EvaluationResult, FieldMetrics, MetricsCalculator, levenshtein_ratio
from .evaluator import Evaluator

__all__ = [
    'GroundTruthLoader',
    'EvaluationResult',
    'FieldMetrics',
    'MetricsCalculator',
    'levenshtein_ratio',
    'Evaluator',
]
