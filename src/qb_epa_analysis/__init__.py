"""
QB Passing-EPA Analysis Package
Regression models of NFL quarterback passing EPA on box-score statistics.
"""

__version__ = "1.0.0"
__author__ = "NFL Analytics Team"

# Import main classes for easy access
from .config import config
from .data.loader import DataLoader
from .data.preprocessor import DataPreprocessor, clean, train_test_split_by_week
from .models.linear_suite import DegenerateFitError, FittedModel, LinearModelSuite
from .utils.metrics import MissingPredictorError, RegressionEvaluator

__all__ = [
    'config',
    'DataLoader',
    'DataPreprocessor',
    'clean',
    'train_test_split_by_week',
    'DegenerateFitError',
    'FittedModel',
    'LinearModelSuite',
    'MissingPredictorError',
    'RegressionEvaluator',
]
