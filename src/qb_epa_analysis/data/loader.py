"""
Data loading module for the QB passing-EPA analysis.
Handles reading and writing the per-player-per-week passing tables.
"""
import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from qb_epa_analysis.config import config
from qb_epa_analysis.data.feature_schema import FeatureSchema

logger = logging.getLogger(__name__)


class DataLoader:
    """Handles loading and typing of QB weekly passing tables."""

    def __init__(self, schema: Optional[FeatureSchema] = None):
        """Initialize the data loader."""
        self.schema = schema or FeatureSchema()
        self.player_stats_df: Optional[pd.DataFrame] = None

    def load_player_stats(self, filepath: Optional[Union[str, Path]] = None) -> pd.DataFrame:
        """
        Load a per-player-per-week passing table.

        Args:
            filepath: Optional path to the CSV file (defaults to the analysis data file)

        Returns:
            DataFrame with typed identity, predictor and target columns

        Raises:
            FileNotFoundError: if the file does not exist
            IOError: if the file cannot be parsed or lacks required columns
        """
        if filepath is None:
            filepath = config.ANALYSIS_DATA_FILE
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"Player stats file not found: {filepath}")

        try:
            df = pd.read_csv(filepath)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise IOError(f"Could not parse player stats file {filepath}: {e}") from e

        missing = self.schema.missing_columns(df)
        if missing:
            raise IOError(f"Player stats file {filepath} is missing columns: {missing}")

        self.player_stats_df = self._coerce_types(df, filepath)
        logger.info("Loaded %d player-weeks from %s", len(self.player_stats_df), filepath)
        return self.player_stats_df

    def _coerce_types(self, df: pd.DataFrame, filepath: Path) -> pd.DataFrame:
        """Cast each required column to its declared dtype."""
        df = df.copy()
        for col, dtype in self.schema.dtypes.items():
            try:
                if dtype in ("int64", "Int64"):
                    numeric = pd.to_numeric(df[col], errors="raise")
                    if dtype == "int64" and numeric.isna().any():
                        raise ValueError(f"null values in identity column '{col}'")
                    if (numeric.dropna() % 1 != 0).any():
                        raise ValueError(f"non-integer values in column '{col}'")
                    df[col] = numeric.astype(dtype)
                else:
                    df[col] = df[col].astype(dtype)
            except (TypeError, ValueError) as e:
                raise IOError(f"Column '{col}' in {filepath} is not {dtype}: {e}") from e
        return df

    def save_player_stats(self, df: pd.DataFrame, filepath: Union[str, Path]) -> Path:
        """
        Write a passing table to CSV (no index), creating parent directories.

        Returns:
            The path written
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(filepath, index=False)
        logger.info("Wrote %d rows to %s", len(df), filepath)
        return filepath

    def get_data_summary(self) -> dict:
        """
        Get summary statistics of loaded data.

        Returns:
            Dictionary with data summary information
        """
        if self.player_stats_df is None:
            raise ValueError("No data loaded. Call load_player_stats() first.")

        df = self.player_stats_df
        summary = {
            'total_player_weeks': len(df),
            'unique_players': df['player_name'].nunique(),
            'unique_teams': df['recent_team'].nunique(),
            'seasons': sorted(int(s) for s in df['season'].unique()),
            'week_range': (int(df['week'].min()), int(df['week'].max())) if len(df) else None,
            'missing_target': int(df[self.schema.target].isna().sum()),
        }
        return summary
