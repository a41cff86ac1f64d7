"""
Model persistence utilities for the QB passing-EPA analysis.

Fitted model suites are snapshotted to disk with joblib next to a small
JSON metadata file describing when and on what they were fitted.
"""
from __future__ import annotations

import datetime as _dt
import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping

import joblib  # fast, compressed persistence

from qb_epa_analysis.config import config
from qb_epa_analysis.models.linear_suite import FittedModel

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    """Current timestamp as a string."""
    return _dt.datetime.now().strftime("%Y%m%d_%H%M%S")


def _hash_dict(d: dict) -> str:
    """Create stable 8-char SHA-1 hash of dict for cache keys."""
    raw = json.dumps(d, sort_keys=True).encode()
    return hashlib.sha1(raw).hexdigest()[:8]


def _meta_path(path: Path) -> Path:
    return path.with_suffix(".meta.json")


def save_models(
    models: Mapping[str, FittedModel],
    path: Path | str | None = None,
    meta: dict | None = None,
) -> Path:
    """
    Persist a mapping of fitted models with joblib.

    Returns:
        The path of the joblib file
    """
    path = Path(path) if path is not None else config.MODELS_FILE
    path.parent.mkdir(parents=True, exist_ok=True)

    joblib.dump(dict(models), path)

    coefficients = {name: m.coefficients.to_dict() for name, m in models.items()}
    metadata: Dict[str, Any] = {
        "saved_at": _timestamp(),
        "models": list(models),
        "n_obs": {name: m.n_obs for name, m in models.items()},
        "coefficients_hash": _hash_dict(coefficients),
        **(meta or {}),
    }
    with _meta_path(path).open("w") as fp:
        json.dump(metadata, fp, indent=2)

    logger.info("Saved %d fitted models to %s", len(models), path)
    return path


def load_models(path: Path | str | None = None) -> Dict[str, FittedModel]:
    """Reload a mapping saved by :func:`save_models`."""
    path = Path(path) if path is not None else config.MODELS_FILE
    if not path.exists():
        raise FileNotFoundError(f"No saved models at {path}")
    models = joblib.load(path)
    logger.info("Loaded %d fitted models from %s", len(models), path)
    return models


def get_model_metadata(path: Path | str | None = None) -> dict[str, Any]:
    """Load the metadata written next to a snapshot without loading the models."""
    path = Path(path) if path is not None else config.MODELS_FILE
    meta_path = _meta_path(path)
    if not meta_path.exists():
        return {}
    with meta_path.open("r") as fp:
        return json.load(fp)
