"""
End-to-end QB passing-EPA analysis.

raw CSV → clean → week split → six OLS fits → comparison → predictions → report
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from qb_epa_analysis.config import config
from qb_epa_analysis.data.loader import DataLoader
from qb_epa_analysis.data.preprocessor import DataPreprocessor
from qb_epa_analysis.models.linear_suite import FittedModel, LinearModelSuite
from qb_epa_analysis.report import render_report
from qb_epa_analysis.utils.metrics import RegressionEvaluator
from qb_epa_analysis.utils.model_utils import save_models

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """
    Everything one analysis run produced.

    *predictions* hold the test-set predictions of the `all` model (the one
    plotted); *best_predictions* those of *best_model*, the same frame when
    the two coincide.
    """
    train: pd.DataFrame
    test: pd.DataFrame
    models: Dict[str, FittedModel]
    comparison: pd.DataFrame
    predictions: pd.DataFrame
    best_predictions: pd.DataFrame
    best_model: str
    report_path: Path
    run_id: Optional[str] = None


def prepare_analysis_data(
    raw_path: Path | str | None = None,
    analysis_path: Path | str | None = None,
    loader: Optional[DataLoader] = None,
) -> pd.DataFrame:
    """Load the raw download, drop rows without passing EPA and save the result."""
    loader = loader or DataLoader()
    raw = loader.load_player_stats(raw_path if raw_path is not None else config.RAW_DATA_FILE)
    cleaned = DataPreprocessor().preprocess(raw)
    loader.save_player_stats(
        cleaned, analysis_path if analysis_path is not None else config.ANALYSIS_DATA_FILE
    )
    return cleaned


def run_analysis(
    raw_path: Path | str | None = None,
    output_dir: Path | str | None = None,
    *,
    cutoff_week: Optional[int] = None,
    data_dir: Path | str | None = None,
    save_snapshot: bool = True,
    track: bool = False,
    tracking_uri: Optional[str] = None,
) -> AnalysisResult:
    """
    Run every stage of the analysis and write its artefacts.

    Args:
        raw_path: raw QB weekly stats CSV (default: config.RAW_DATA_FILE)
        output_dir: where the report and figures go (default: config.OUTPUT_DIR)
        cutoff_week: last training week (default: config.CUTOFF_WEEK)
        data_dir: where analysis/train/test CSVs go (default: config.ANALYSIS_DATA_DIR)
        save_snapshot: also persist the fitted models with joblib
        track: log the run to MLflow
        tracking_uri: MLflow tracking URI used when *track* is set

    Errors from any stage propagate unchanged.
    """
    output_dir = Path(output_dir) if output_dir is not None else config.OUTPUT_DIR
    data_dir = Path(data_dir) if data_dir is not None else config.ANALYSIS_DATA_DIR

    loader = DataLoader()
    cleaned = prepare_analysis_data(raw_path, data_dir / config.ANALYSIS_DATA_FILE.name, loader)

    preprocessor = DataPreprocessor()
    if cutoff_week is not None:
        preprocessor.update_config(cutoff_week=cutoff_week)
    train, test = preprocessor.split(cleaned)
    loader.save_player_stats(train, data_dir / config.TRAIN_DATA_FILE.name)
    loader.save_player_stats(test, data_dir / config.TEST_DATA_FILE.name)

    models = LinearModelSuite().fit_all(train)

    evaluator = RegressionEvaluator()
    comparison = evaluator.compare_models(models, train, test)
    best_model = evaluator.select_best_model(comparison)
    predictions = evaluator.predict(models[config.COMPARISON_MODEL], test)
    if best_model == config.COMPARISON_MODEL:
        best_predictions = predictions
    else:
        best_predictions = evaluator.predict(models[best_model], test)

    report_path = render_report(
        comparison, predictions, output_dir,
        best_model=best_model, train=train, cutoff_week=preprocessor.CUTOFF_WEEK,
    )

    if save_snapshot:
        save_models(models, output_dir / config.MODELS_FILE.name,
                    meta={"cutoff_week": preprocessor.CUTOFF_WEEK, "best_model": best_model})

    run_id = None
    if track:
        from qb_epa_analysis.tracking import log_analysis_run
        run_id = log_analysis_run(
            models, comparison, predictions,
            tracking_uri=tracking_uri,
            params={"cutoff_week": preprocessor.CUTOFF_WEEK, "best_model": best_model},
        )

    logger.info("Analysis complete: best model %s, report at %s", best_model, report_path)
    return AnalysisResult(
        train=train,
        test=test,
        models=models,
        comparison=comparison,
        predictions=predictions,
        best_predictions=best_predictions,
        best_model=best_model,
        report_path=report_path,
        run_id=run_id,
    )


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s │ %(levelname)s │ %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    config.ensure_directories()
    result = run_analysis()
    print(result.comparison.round(4).to_string())
    print(f"Best model: {result.best_model}")
