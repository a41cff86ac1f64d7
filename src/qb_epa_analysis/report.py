"""
QB passing-EPA report utilities

Figures and the markdown document comparing the six regression models.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from qb_epa_analysis.config import config, MODEL_CATALOGUE, PREDICTORS

# ───────────────────── configuration ────────────────────────────
logger = logging.getLogger(__name__)

plt.rcParams.update({
    "axes.spines.top": False,
    "axes.spines.right": False,
})
sns.set_palette("husl")

_PRETTY = {
    "passing_yards": "Passing yards",
    "completions": "Completions",
    "attempts": "Attempts",
    "interceptions": "Interceptions",
    "passing_tds": "Passing TDs",
    "passing_epa": "Passing EPA",
    "all": "All predictors",
}


# ──────────────────────── figures ───────────────────────────────
def plot_predicted_vs_actual(
    predictions: pd.DataFrame,
    *,
    ax: Optional[plt.Axes] = None,
    savefig: Path | None = None,
) -> plt.Figure:
    """Scatter of actual (x) vs predicted (y) passing EPA with the identity line."""
    if ax is None:
        fig, ax = plt.subplots(figsize=config.FIGURE_SIZE)
    else:
        fig = ax.figure

    sns.scatterplot(data=predictions, x="actual", y="predicted", alpha=0.6, ax=ax)

    values = pd.concat([predictions["actual"], predictions["predicted"]]).dropna()
    lo, hi = (values.min(), values.max()) if len(values) else (0.0, 1.0)
    ax.plot([lo, hi], [lo, hi], "r--", linewidth=2, label="Perfect prediction")

    model_names = predictions["model"].unique() if "model" in predictions else []
    title_model = _PRETTY.get(model_names[0], model_names[0]) if len(model_names) == 1 else "model"
    ax.set_title(f"Predicted vs actual passing EPA ({title_model}, held-out weeks)")
    ax.set_xlabel("Actual passing EPA")
    ax.set_ylabel("Predicted passing EPA")
    ax.legend()

    fig.tight_layout()
    if savefig:
        fig.savefig(savefig, dpi=config.DPI, bbox_inches="tight")
    return fig


def plot_predictor_relationships(
    df: pd.DataFrame,
    predictors: Sequence[str] = PREDICTORS,
    *,
    target: str = config.TARGET,
    savefig: Path | None = None,
) -> plt.Figure:
    """One scatter + OLS trend panel per predictor against the target."""
    n = len(predictors)
    ncols = min(3, n)
    nrows = int(np.ceil(n / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(5 * ncols, 4 * nrows), squeeze=False)

    plot_df = df.loc[:, list(predictors) + [target]].astype("float64")
    for ax, col in zip(axes.flat, predictors):
        sns.regplot(
            data=plot_df, x=col, y=target, ax=ax,
            scatter_kws={"alpha": 0.4, "s": 15},
            line_kws={"color": "red"},
        )
        ax.set_title(f"{_PRETTY.get(col, col)} vs {_PRETTY.get(target, target)}")
        ax.set_xlabel(_PRETTY.get(col, col))
        ax.set_ylabel(_PRETTY.get(target, target))
    for ax in list(axes.flat)[n:]:
        ax.set_visible(False)

    fig.tight_layout()
    if savefig:
        fig.savefig(savefig, dpi=config.DPI, bbox_inches="tight")
    return fig


# ──────────────────────── tables ────────────────────────────────
def format_comparison_table(comparison: pd.DataFrame, decimals: int = 4) -> pd.DataFrame:
    """Round the comparison table and put rows in catalogue order."""
    order = [n for n in MODEL_CATALOGUE if n in comparison.index]
    order += [n for n in comparison.index if n not in order]
    return comparison.loc[order].round(decimals)


def _markdown_table(df: pd.DataFrame) -> str:
    """Render *df* (index included) as a GitHub-style markdown table."""
    header = [df.index.name or ""] + [str(c) for c in df.columns]
    lines = [
        "| " + " | ".join(header) + " |",
        "|" + "|".join(["---"] * len(header)) + "|",
    ]
    for idx, row in df.iterrows():
        cells = ["" if pd.isna(v) else f"{v:g}" if isinstance(v, float) else str(v) for v in row]
        lines.append("| " + " | ".join([str(idx)] + cells) + " |")
    return "\n".join(lines)


# ──────────────────────── document ──────────────────────────────
def _conclusions(comparison: pd.DataFrame, best_model: str) -> str:
    best = comparison.loc[best_model]
    singles = comparison.drop(index=[best_model], errors="ignore")
    singles = singles[[n in MODEL_CATALOGUE and len(MODEL_CATALOGUE[n]) == 1 for n in singles.index]]

    lines = [
        f"The preferred model is **{_PRETTY.get(best_model, best_model)}** "
        f"(R² = {best['r_squared']:.3f}, adjusted R² = {best['adj_r_squared']:.3f}, "
        f"RMSE = {best['rmse']:.3f})."
    ]
    if len(singles):
        strongest = singles["r_squared"].idxmax()
        weakest = singles["r_squared"].idxmin()
        lines.append(
            f"Among single-predictor models, {_PRETTY.get(strongest, strongest).lower()} explains the most "
            f"variance (R² = {singles.loc[strongest, 'r_squared']:.3f}) and "
            f"{_PRETTY.get(weakest, weakest).lower()} the least "
            f"(R² = {singles.loc[weakest, 'r_squared']:.3f})."
        )
    if "test_rmse" in comparison.columns and pd.notna(best.get("test_rmse", np.nan)):
        lines.append(
            f"On the held-out weeks the preferred model reaches RMSE = {best['test_rmse']:.3f}."
        )
    return " ".join(lines)


def render_report(
    comparison: pd.DataFrame,
    predictions: pd.DataFrame,
    output_dir: Path | str | None = None,
    *,
    best_model: str,
    train: Optional[pd.DataFrame] = None,
    cutoff_week: int = config.CUTOFF_WEEK,
) -> Path:
    """
    Write the report document and its artefacts into *output_dir*.

    Produces ``model_comparison.csv``, ``predicted_vs_actual.png``,
    ``predictor_relationships.png`` (when *train* is given) and ``report.md``.

    Returns:
        Path of ``report.md``
    """
    output_dir = Path(output_dir) if output_dir is not None else config.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    table = format_comparison_table(comparison)
    table.to_csv(output_dir / "model_comparison.csv")

    fig = plot_predicted_vs_actual(predictions, savefig=output_dir / "predicted_vs_actual.png")
    plt.close(fig)

    sections = [
        f"# Passing EPA of NFL quarterbacks, {config.SEASON} regular season",
        "",
        "## Data",
        "",
        f"Player-weeks from weeks 1-{cutoff_week} train the models; later weeks are held out "
        f"({len(predictions):,} held-out player-weeks).",
        "",
    ]

    if train is not None:
        fig = plot_predictor_relationships(train, savefig=output_dir / "predictor_relationships.png")
        plt.close(fig)
        sections += [
            f"Training rows: {len(train):,}.",
            "",
            "![Predictor relationships](predictor_relationships.png)",
            "",
        ]

    sections += [
        "## Model comparison",
        "",
        _markdown_table(table),
        "",
        "## Predictions on held-out weeks",
        "",
        "![Predicted vs actual](predicted_vs_actual.png)",
        "",
        "## Conclusions",
        "",
        _conclusions(comparison, best_model),
        "",
    ]

    report_path = output_dir / "report.md"
    report_path.write_text("\n".join(sections), encoding="utf-8")
    logger.info("Report written to %s", report_path)
    return report_path
