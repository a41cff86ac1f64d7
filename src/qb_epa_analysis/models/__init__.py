"""Models module for the QB passing-EPA analysis."""

from .linear_suite import DegenerateFitError, FittedModel, LinearModelSuite

__all__ = ['DegenerateFitError', 'FittedModel', 'LinearModelSuite']
