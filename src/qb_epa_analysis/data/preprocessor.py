"""
Data preprocessing module for the QB passing-EPA analysis.
Handles dropping rows without a target and the week-based train/test split.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple, cast

import pandas as pd

from qb_epa_analysis.config import config

logger = logging.getLogger(__name__)


def clean(df: pd.DataFrame, target: str = config.TARGET) -> pd.DataFrame:
    """
    Drop player-weeks whose target is missing.

    Row order is preserved and no value is imputed; every returned row is an
    unmodified copy of a row of *df*.
    """
    cleaned = cast(pd.DataFrame, df[df[target].notna()].copy())
    dropped = len(df) - len(cleaned)
    if dropped:
        logger.info("Dropped %d player-weeks with missing %s", dropped, target)
    return cleaned


def train_test_split_by_week(
    df: pd.DataFrame,
    cutoff_week: int = config.CUTOFF_WEEK,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Leakage-free week split used across the package.

    Parameters
    ----------
    df : DataFrame with a 'week' column
    cutoff_week : last week assigned to the training fold; every later week
        goes to the test fold. Weeks outside 1-18 are passed through as-is.
    """
    train_mask = df["week"] <= cutoff_week
    train = cast(pd.DataFrame, df[train_mask].copy())
    test  = cast(pd.DataFrame, df[~train_mask].copy())
    logger.info(
        "Split at week %d: %d train player-weeks, %d test player-weeks",
        cutoff_week, len(train), len(test),
    )
    return train, test


class DataPreprocessor:
    """Runs the cleaning and splitting stages with configurable defaults."""

    def __init__(self):
        """Create a preprocessor with defaults from central config."""
        self.TARGET: str = config.TARGET
        self.CUTOFF_WEEK: int = config.CUTOFF_WEEK

        self.raw_data: pd.DataFrame | None = None
        self.processed_data: pd.DataFrame | None = None

    def update_config(self,
                      target: Optional[str] = None,
                      cutoff_week: Optional[int] = None):
        """
        Update preprocessing configuration.

        Args:
            target: Name of the column that must be present for a row to be kept
            cutoff_week: Last week of the training fold
        """
        if target is not None:
            self.TARGET = target
        if cutoff_week is not None:
            self.CUTOFF_WEEK = cutoff_week

    def preprocess(self, df: pd.DataFrame) -> pd.DataFrame:
        """Clean *df* and remember both the raw and processed frames."""
        self.raw_data = df
        self.processed_data = clean(df, target=self.TARGET)
        return self.processed_data

    def split(self, df: Optional[pd.DataFrame] = None) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Split *df* (default: the last processed frame) into train and test."""
        if df is None:
            if self.processed_data is None:
                raise ValueError("No processed data. Call preprocess() first.")
            df = self.processed_data
        return train_test_split_by_week(df, cutoff_week=self.CUTOFF_WEEK)
