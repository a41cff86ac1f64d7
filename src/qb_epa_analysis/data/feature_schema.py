"""
FeatureSchema – canonical column lists for loading & modelling.
"""
from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from qb_epa_analysis.config import FEATURE_LISTS


@dataclass
class FeatureSchema:
    """Container class listing every column by semantic type."""
    identity: List[str] = field(default_factory=lambda: list(FEATURE_LISTS["identity"]))
    floats:   List[str] = field(default_factory=lambda: list(FEATURE_LISTS["float"]))
    integers: List[str] = field(default_factory=lambda: list(FEATURE_LISTS["integer"]))
    target:   str       = FEATURE_LISTS["y_variable"][0]

    # ───── convenience helpers ────────────────────────────────────
    @property
    def predictors(self) -> List[str]:
        """All box-score predictors in modelling order."""
        return self.floats + self.integers

    @property
    def required_columns(self) -> List[str]:
        """Every column an input table must carry."""
        return self.identity + self.predictors + [self.target]

    @property
    def dtypes(self) -> Dict[str, str]:
        """Column → pandas dtype used when typing a loaded frame."""
        types = {c: "string" for c in ("player_name", "recent_team") if c in self.identity}
        types.update({c: "int64" for c in self.identity if c not in types})
        types.update({c: "Int64" for c in self.integers})
        types.update({c: "float64" for c in self.floats + [self.target]})
        return types

    def missing_columns(self, df: pd.DataFrame) -> List[str]:
        """Required columns absent from *df*, in schema order."""
        return [c for c in self.required_columns if c not in df.columns]

