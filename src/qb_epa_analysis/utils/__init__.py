"""Utils module for the QB passing-EPA analysis."""

from .metrics import MissingPredictorError, RegressionEvaluator

__all__ = ['MissingPredictorError', 'RegressionEvaluator']
