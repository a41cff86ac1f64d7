"""
Data module for the QB passing-EPA analysis.
"""

from .feature_schema import FeatureSchema
from .loader import DataLoader
from .preprocessor import DataPreprocessor, clean, train_test_split_by_week

__all__ = ['FeatureSchema', 'DataLoader', 'DataPreprocessor', 'clean', 'train_test_split_by_week']
