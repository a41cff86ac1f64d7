"""
MLflow logging helpers for an analysis run.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

import matplotlib.pyplot as plt
import mlflow
import pandas as pd
from matplotlib.figure import Figure

from qb_epa_analysis.config import config
from qb_epa_analysis.models.linear_suite import FittedModel
from qb_epa_analysis.report import plot_predicted_vs_actual

logger = logging.getLogger(__name__)


def _log_fig(fig: Figure, name: str) -> None:
    """Log a Matplotlib figure directly without temp files."""
    mlflow.log_figure(fig, artifact_file=name)
    plt.close(fig)


def comparison_metrics(comparison: pd.DataFrame) -> Dict[str, float]:
    """Flatten the comparison table into ``<model>_<metric>`` keys, skipping NaN."""
    metrics: Dict[str, float] = {}
    for name, row in comparison.iterrows():
        for col, value in row.items():
            if pd.notna(value):
                key = f"{name}_{col}".replace("(", "").replace(")", "")
                metrics[key] = float(value)
    return metrics


def log_analysis_run(
    models: Mapping[str, FittedModel],
    comparison: pd.DataFrame,
    predictions: pd.DataFrame,
    *,
    run_name: str = "qb_epa_regression",
    tracking_uri: Optional[str] = None,
    experiment_name: Optional[str] = None,
    artifact_location: Path | str | None = None,
    params: Optional[Dict[str, object]] = None,
) -> str:
    """
    Log one analysis run to MLflow and return its run id.

    Parameters, per-model metrics and the predicted-vs-actual figure are
    recorded under *experiment_name* (default from config). Without
    *tracking_uri* the ``MLFLOW_TRACKING_URI`` environment variable is used,
    falling back to the sqlite store in config. A new experiment keeps its
    artefacts under *artifact_location* (default: config.MLFLOW_ARTIFACT_DIR).
    """
    mlflow.set_tracking_uri(
        tracking_uri or os.environ.get("MLFLOW_TRACKING_URI") or config.MLFLOW_TRACKING_URI
    )
    experiment_name = experiment_name or config.MLFLOW_EXPERIMENT_NAME
    if mlflow.get_experiment_by_name(experiment_name) is None:
        artifacts = Path(artifact_location or config.MLFLOW_ARTIFACT_DIR).resolve()
        mlflow.create_experiment(experiment_name, artifact_location=artifacts.as_uri())
    mlflow.set_experiment(experiment_name)

    run_params = {
        "season": config.SEASON,
        "target": config.TARGET,
        "models": ",".join(models),
        "n_train": next(iter(models.values())).n_obs if models else 0,
        "n_test": len(predictions),
        **(params or {}),
    }

    with mlflow.start_run(run_name=run_name) as run:
        mlflow.log_params(run_params)
        mlflow.log_metrics(comparison_metrics(comparison))
        _log_fig(plot_predicted_vs_actual(predictions), "predicted_vs_actual.png")
        run_id = run.info.run_id

    logger.info("Logged analysis run %s to MLflow experiment %s",
                run_id, experiment_name)
    return run_id
