"""
Configuration module for the QB passing-EPA analysis package.
Contains all constants, paths, and configuration parameters.
"""
from pathlib import Path
from typing import Dict, List, Tuple


class Config:
    """Main configuration class for the QB passing-EPA analysis package."""
    MLFLOW_EXPERIMENT_NAME = "qb_passing_epa"

    # Base paths - relative to the project root so they work from any cwd
    _CONFIG_DIR = Path(__file__).parent.parent.parent  # Go up to project root
    PROJECT_ROOT = _CONFIG_DIR.resolve()

    DATA_DIR = PROJECT_ROOT / "data"
    RAW_DATA_DIR = DATA_DIR / "raw_data"
    ANALYSIS_DATA_DIR = DATA_DIR / "analysis_data"
    OUTPUT_DIR = PROJECT_ROOT / "output"
    MODELS_DIR = PROJECT_ROOT / "models"

    # Data files
    RAW_DATA_FILE = RAW_DATA_DIR / "raw_data.csv"
    ANALYSIS_DATA_FILE = ANALYSIS_DATA_DIR / "analysis_data.csv"
    TRAIN_DATA_FILE = ANALYSIS_DATA_DIR / "train_data.csv"
    TEST_DATA_FILE = ANALYSIS_DATA_DIR / "test_data.csv"
    MODELS_FILE = MODELS_DIR / "linear_models.joblib"

    # MLflow: sqlite backend store, artefacts on the local filesystem
    MLFLOW_TRACKING_URI = "sqlite:///" + (PROJECT_ROOT / "mlflow.db").as_posix()
    MLFLOW_ARTIFACT_DIR = PROJECT_ROOT / "mlartifacts"

    # Download filters
    SEASON = 2023
    SEASON_TYPE = "REG"
    POSITION = "QB"

    # Analysis parameters
    TARGET = "passing_epa"
    CUTOFF_WEEK = 9          # weeks 1-9 train, 10+ test
    COMPARISON_MODEL = "all"  # model plotted against the held-out weeks

    # Visualization settings
    FIGURE_SIZE: Tuple[int, int] = (10, 7)
    DPI = 100

    @classmethod
    def ensure_directories(cls):
        """Create all required directories if they don't exist."""
        for dir_path in [cls.RAW_DATA_DIR, cls.ANALYSIS_DATA_DIR,
                         cls.OUTPUT_DIR, cls.MODELS_DIR]:
            dir_path.mkdir(parents=True, exist_ok=True)


# Create global config instance
config = Config()

# ───────────────────────── Column catalogue ─────────────────────────
# Single source of truth for column roles
FEATURE_LISTS: Dict[str, List[str]] = {
    "identity": ["player_name", "recent_team", "season", "week"],
    "float": ["passing_yards"],
    "integer": ["completions", "attempts", "interceptions", "passing_tds"],
    "y_variable": ["passing_epa"],
}

PREDICTORS: List[str] = [
    "passing_yards", "completions", "attempts", "interceptions", "passing_tds",
]

# ───────────────────────── Model catalogue ──────────────────────────
# Ordered: reporting tables list the models in this order
MODEL_CATALOGUE: Dict[str, Tuple[str, ...]] = {
    "passing_yards": ("passing_yards",),
    "completions": ("completions",),
    "attempts": ("attempts",),
    "interceptions": ("interceptions",),
    "passing_tds": ("passing_tds",),
    "all": tuple(PREDICTORS),
}

# Attach the catalogues onto the config instance for ease of use
config.FEATURE_LISTS = FEATURE_LISTS
config.PREDICTORS = PREDICTORS
config.MODEL_CATALOGUE = MODEL_CATALOGUE
