"""
Metrics utilities for the QB passing-EPA analysis.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from qb_epa_analysis.config import FEATURE_LISTS, MODEL_CATALOGUE
from qb_epa_analysis.models.linear_suite import INTERCEPT, FittedModel, design_matrix

logger = logging.getLogger(__name__)

FIT_COLUMNS: List[str] = ["r_squared", "adj_r_squared", "rmse"]
TEST_COLUMNS: List[str] = ["test_rmse", "test_mae", "test_r_squared"]


class MissingPredictorError(ValueError):
    """Raised when a row to predict lacks a value for a required predictor."""

    def __init__(self, model_name: str, columns: Sequence[str], n_rows: int):
        self.model_name = model_name
        self.columns = list(columns)
        self.n_rows = n_rows
        super().__init__(
            f"Model '{model_name}' cannot predict {n_rows} row(s) with missing "
            f"predictor values in {self.columns}"
        )


class RegressionEvaluator:
    """Compute fit-quality statistics and out-of-sample predictions."""

    # ---------- single-metric helpers ----------
    @staticmethod
    def calculate_rmse(y, p) -> float:
        return float(np.sqrt(mean_squared_error(y, p)))

    @staticmethod
    def calculate_r_squared(y, p) -> float:
        return float(r2_score(y, p))

    @staticmethod
    def calculate_adj_r_squared(r_squared: float, n_obs: int, n_predictors: int) -> float:
        """Adjusted R²; NaN when no residual degrees of freedom remain."""
        df_resid = n_obs - n_predictors - 1
        if df_resid <= 0:
            return float("nan")
        return 1.0 - (1.0 - r_squared) * (n_obs - 1) / df_resid

    # ---------- in-sample ----------
    def fit_quality(self, model: FittedModel, train: pd.DataFrame) -> Dict[str, Union[float, int]]:
        """R², adjusted R² and residual RMSE of *model* on its training rows."""
        y = train[model.target].to_numpy(dtype=np.float64)
        fitted = model.predict(train)
        r2 = self.calculate_r_squared(y, fitted)
        return {
            "r_squared": r2,
            "adj_r_squared": self.calculate_adj_r_squared(r2, len(y), len(model.predictors)),
            "rmse": self.calculate_rmse(y, fitted),
            "residual_std_error": model.residual_std_error,
            "n_obs": len(y),
        }

    # ---------- out-of-sample ----------
    def predict(self, model: FittedModel, test: pd.DataFrame) -> pd.DataFrame:
        """
        Predict every test row with *model*.

        Extrapolation outside the training range is allowed.

        Raises:
            MissingPredictorError: if any required predictor is null
        """
        X = design_matrix(test, model.predictors)
        missing_mask = np.isnan(X)
        if missing_mask.any():
            cols = [c for c, bad in zip(model.predictors, missing_mask.any(axis=0)) if bad]
            raise MissingPredictorError(model.name, cols, int(missing_mask.any(axis=1).sum()))

        identity = [c for c in FEATURE_LISTS["identity"] if c in test.columns]
        predictions = test.loc[:, identity].reset_index(drop=True)
        predictions["model"] = model.name
        predictions["actual"] = test[model.target].to_numpy(dtype=np.float64, na_value=np.nan)
        predictions["predicted"] = model.predict_matrix(X)
        return predictions

    def out_of_sample_metrics(self, predictions: pd.DataFrame) -> Dict[str, float]:
        """RMSE, MAE and R² of a prediction frame; NaN where undefined."""
        scored = predictions.dropna(subset=["actual"])
        y, p = scored["actual"].to_numpy(), scored["predicted"].to_numpy()
        if len(scored) == 0:
            return {c: float("nan") for c in TEST_COLUMNS}
        return {
            "test_rmse": self.calculate_rmse(y, p),
            "test_mae": float(mean_absolute_error(y, p)),
            "test_r_squared": self.calculate_r_squared(y, p) if len(scored) > 1 else float("nan"),
        }

    # ---------- comparison helper ----------
    def compare_models(
        self,
        models: Mapping[str, FittedModel],
        train: pd.DataFrame,
        test: Optional[pd.DataFrame] = None,
    ) -> pd.DataFrame:
        """
        One row per model (catalogue order) with coefficients and fit metrics.
        Coefficients a model does not use are NaN.
        """
        ordered = [n for n in MODEL_CATALOGUE if n in models] + [n for n in models if n not in MODEL_CATALOGUE]
        coef_cols: List[str] = [INTERCEPT]
        for name in ordered:
            coef_cols += [p for p in models[name].predictors if p not in coef_cols]

        rows: Dict[str, Dict[str, float]] = {}
        for name in ordered:
            model = models[name]
            row = {c: float(model.coefficients.get(c, np.nan)) for c in coef_cols}
            quality = self.fit_quality(model, train)
            row.update({c: quality[c] for c in FIT_COLUMNS})
            if test is not None:
                row.update(self.out_of_sample_metrics(self.predict(model, test)))
            rows[name] = row

        columns = coef_cols + FIT_COLUMNS + (TEST_COLUMNS if test is not None else [])
        df = pd.DataFrame.from_dict(rows, orient="index")
        df = df.reindex(columns=columns)
        df.index.name = "model"
        return df

    # ---------- selection policy ----------
    @staticmethod
    def select_best_model(comparison: pd.DataFrame) -> str:
        """
        Pick the preferred model from a comparison table.

        A model that has the highest R², the highest adjusted R² and the lowest
        RMSE at once wins outright. When the criteria disagree, or when several
        models tie on a criterion, the highest adjusted R² wins (first in table
        order on ties).
        """
        if comparison.empty:
            raise ValueError("Cannot select a model from an empty comparison table")

        top_r2 = set(comparison.index[comparison["r_squared"] == comparison["r_squared"].max()])
        top_adj = set(comparison.index[comparison["adj_r_squared"] == comparison["adj_r_squared"].max()])
        low_rmse = set(comparison.index[comparison["rmse"] == comparison["rmse"].min()])

        winners = top_r2 & top_adj & low_rmse
        if len(winners) == 1:
            return winners.pop()

        adj = comparison["adj_r_squared"]
        best = str(adj.idxmax()) if adj.notna().any() else str(comparison.index[0])
        logger.warning(
            "Fit criteria disagree (R²: %s, adjusted R²: %s, RMSE: %s); choosing %s by adjusted R²",
            sorted(top_r2), sorted(top_adj), sorted(low_rmse), best,
        )
        return best
