"""
Download weekly quarterback passing statistics from nflverse.
"""
import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

import pandas as pd

from qb_epa_analysis.config import config

logger = logging.getLogger(__name__)


def filter_qb_regular_season(
    df: pd.DataFrame,
    season: int = config.SEASON,
    season_type: str = config.SEASON_TYPE,
    position: str = config.POSITION,
) -> pd.DataFrame:
    """Keep one season's regular-season rows for a single position."""
    mask = (
        (df["season_type"] == season_type)
        & (df["position"] == position)
        & (df["season"] == season)
    )
    return df.loc[mask].reset_index(drop=True)


def _import_weekly_data(years: List[int]) -> pd.DataFrame:
    import nfl_data_py as nfl  # optional "download" extra

    return nfl.import_weekly_data(years)


def download_qb_stats(
    season: int = config.SEASON,
    filepath: Optional[Union[str, Path]] = None,
    fetch: Optional[Callable[[List[int]], pd.DataFrame]] = None,
) -> pd.DataFrame:
    """
    Fetch weekly player stats for *season*, keep regular-season quarterbacks
    and write them to the raw data file.

    *fetch* defaults to ``nfl_data_py.import_weekly_data``. Network and
    upstream errors propagate unchanged.
    """
    filepath = Path(filepath) if filepath is not None else config.RAW_DATA_FILE
    fetch = fetch or _import_weekly_data

    logger.info("Downloading %d weekly player stats from nflverse", season)
    weekly = fetch([season])
    qbs = filter_qb_regular_season(weekly, season=season)

    filepath.parent.mkdir(parents=True, exist_ok=True)
    qbs.to_csv(filepath, index=False)
    logger.info("Saved %d QB player-weeks to %s", len(qbs), filepath)
    return qbs
