# tasks.py  ── invoke ≥2.2
from invoke import task, Context  # type: ignore
from typing import Optional

import logging


def _configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s │ %(levelname)s │ %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@task(
    help={
        "season": "Season to download (default: config.SEASON)",
        "output": "Raw CSV path (default: data/raw_data/raw_data.csv)",
    }
)
def download(c: Context, season: Optional[int] = None, output: Optional[str] = None) -> None:
    """Download regular-season QB weekly stats from nflverse."""
    _configure_logging()
    from qb_epa_analysis.config import config
    from qb_epa_analysis.data.downloader import download_qb_stats

    config.ensure_directories()
    df = download_qb_stats(season=int(season) if season else config.SEASON, filepath=output)
    print(f"📥 Downloaded {len(df):,} QB player-weeks")


@task(
    help={
        "raw": "Raw CSV path (default: data/raw_data/raw_data.csv)",
        "output": "Cleaned CSV path (default: data/analysis_data/analysis_data.csv)",
    }
)
def clean(c: Context, raw: Optional[str] = None, output: Optional[str] = None) -> None:
    """Drop player-weeks without passing EPA and save the analysis data."""
    _configure_logging()
    from qb_epa_analysis.pipeline import prepare_analysis_data

    df = prepare_analysis_data(raw, output)
    print(f"🧹 Kept {len(df):,} player-weeks with passing EPA")


@task(
    help={
        "cutoff_week": "Last training week (default: config.CUTOFF_WEEK)",
        "data": "Cleaned CSV path (default: data/analysis_data/analysis_data.csv)",
    }
)
def split(c: Context, cutoff_week: Optional[int] = None, data: Optional[str] = None) -> None:
    """Split the analysis data into train/test CSVs by week."""
    _configure_logging()
    from qb_epa_analysis.config import config
    from qb_epa_analysis.data.loader import DataLoader
    from qb_epa_analysis.data.preprocessor import train_test_split_by_week

    loader = DataLoader()
    df = loader.load_player_stats(data)
    train, test = train_test_split_by_week(df, int(cutoff_week) if cutoff_week else config.CUTOFF_WEEK)
    loader.save_player_stats(train, config.TRAIN_DATA_FILE)
    loader.save_player_stats(test, config.TEST_DATA_FILE)
    print(f"✂️  {len(train):,} train / {len(test):,} test player-weeks")


@task(
    help={
        "raw": "Raw CSV path (default: data/raw_data/raw_data.csv)",
        "output_dir": "Report directory (default: output/)",
        "cutoff_week": "Last training week (default: config.CUTOFF_WEEK)",
        "track": "Log the run to MLflow",
        "tracking_uri": "MLflow tracking URI (default: MLFLOW_TRACKING_URI, else sqlite:///mlflow.db in the project root)",
    }
)
def analyze(
    c: Context,
    raw: Optional[str] = None,
    output_dir: Optional[str] = None,
    cutoff_week: Optional[int] = None,
    track: bool = False,
    tracking_uri: Optional[str] = None,
) -> None:
    """Run the full analysis and render the report."""
    _configure_logging()
    from qb_epa_analysis.config import config
    from qb_epa_analysis.pipeline import run_analysis

    config.ensure_directories()
    result = run_analysis(
        raw, output_dir,
        cutoff_week=int(cutoff_week) if cutoff_week is not None else None,
        track=track, tracking_uri=tracking_uri,
    )
    print(result.comparison.round(4).to_string())
    print(f"\n🏆 Best model: {result.best_model}")
    print(f"📄 Report: {result.report_path}")


@task
def test(c: Context) -> None:
    """Run the test-suite."""
    c.run("pytest -q tests", pty=False)
