"""
Ordinary-least-squares models of passing EPA.
Fits one linear regression per entry of the model catalogue on the training
weeks; every model carries an intercept.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from sklearn.linear_model import LinearRegression

from qb_epa_analysis.config import config, MODEL_CATALOGUE

logger = logging.getLogger(__name__)

INTERCEPT = "(Intercept)"


class DegenerateFitError(ValueError):
    """Raised when a model's design matrix cannot be solved uniquely."""

    def __init__(self, model_name: str, reason: str):
        self.model_name = model_name
        self.reason = reason
        super().__init__(f"Cannot fit model '{model_name}': {reason}")


def design_matrix(df: pd.DataFrame, predictors: Sequence[str]) -> NDArray[np.float64]:
    """Predictor columns as a float matrix, NaN where a value is missing."""
    return df.loc[:, list(predictors)].to_numpy(dtype=np.float64, na_value=np.nan)


@dataclass(frozen=True, eq=False)
class FittedModel:
    """An OLS fit of the target on a fixed predictor subset."""
    name: str
    predictors: Tuple[str, ...]
    coefficients: pd.Series
    residual_std_error: float
    n_obs: int
    df_resid: int
    target: str = config.TARGET

    @property
    def intercept(self) -> float:
        return float(self.coefficients[INTERCEPT])

    @property
    def n_params(self) -> int:
        return len(self.predictors) + 1

    def predict_matrix(self, X: NDArray[np.float64]) -> NDArray[np.float64]:
        weights = self.coefficients[list(self.predictors)].to_numpy(dtype=np.float64)
        return self.intercept + X @ weights

    def predict(self, df: pd.DataFrame) -> NDArray[np.float64]:
        """Apply the fitted coefficients to the predictor columns of *df*."""
        return self.predict_matrix(design_matrix(df, self.predictors))


class LinearModelSuite:
    """Fits the catalogue of single- and multi-predictor OLS models."""

    def __init__(
        self,
        catalogue: Optional[Mapping[str, Sequence[str]]] = None,
        target: str = config.TARGET,
    ):
        self.catalogue: Dict[str, Tuple[str, ...]] = {
            name: tuple(preds) for name, preds in (catalogue or MODEL_CATALOGUE).items()
        }
        self.target = target
        self.fitted_models: Dict[str, FittedModel] = {}

    def fit_model(self, train: pd.DataFrame, name: str) -> FittedModel:
        """
        Fit the model called *name* on *train*.

        Raises:
            KeyError: if *name* is not in the model catalogue
            DegenerateFitError: if the design matrix is rank-deficient or has
                missing values
        """
        if name not in self.catalogue:
            raise KeyError(f"Unknown model '{name}'. Known: {list(self.catalogue)}")
        predictors = self.catalogue[name]

        X = design_matrix(train, predictors)
        y = train[self.target].to_numpy(dtype=np.float64, na_value=np.nan)
        n_obs, n_params = len(y), len(predictors) + 1

        if n_obs == 0:
            raise DegenerateFitError(name, "training set is empty")
        if np.isnan(X).any() or np.isnan(y).any():
            raise DegenerateFitError(name, "training set has missing values")

        # intercept column + predictors must have full column rank
        full = np.column_stack([np.ones(n_obs), X])
        rank = int(np.linalg.matrix_rank(full))
        if rank < n_params:
            raise DegenerateFitError(
                name, f"design matrix has rank {rank} < {n_params} parameters"
            )

        reg = LinearRegression(fit_intercept=True)
        reg.fit(X, y)

        coefficients = pd.Series(
            [float(reg.intercept_), *map(float, reg.coef_)],
            index=[INTERCEPT, *predictors],
            name=name,
        )
        residuals = y - (reg.intercept_ + X @ reg.coef_)
        rss = float(residuals @ residuals)
        df_resid = n_obs - n_params
        rse = math.sqrt(rss / df_resid) if df_resid > 0 else float("nan")

        model = FittedModel(
            name=name,
            predictors=predictors,
            coefficients=coefficients,
            residual_std_error=rse,
            n_obs=n_obs,
            df_resid=df_resid,
            target=self.target,
        )
        logger.info(
            "Fitted %s on %d player-weeks (residual std. error %.4f)", name, n_obs, rse
        )
        return model

    def fit_all(self, train: pd.DataFrame) -> Dict[str, FittedModel]:
        """Fit every catalogued model; insertion order follows the catalogue."""
        self.fitted_models = {name: self.fit_model(train, name) for name in self.catalogue}
        return self.fitted_models
