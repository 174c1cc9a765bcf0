"""
tek_contagion/viz/figures.py — Static matplotlib figures for the study report.

Usage:
    from tek_contagion.viz.figures import generate_all_figures
    paths = generate_all_figures(result, output_dir="output/figures")
    # paths = {"fig1_network_size.png": "/abs/path/...", ...}
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import matplotlib
try:
    matplotlib.use("Agg")
except Exception:
    pass  # backend already set

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from tek_contagion.pipeline import PipelineResult

logger = logging.getLogger(__name__)

C_MAIN = "#2196A6"      # teal
C_ALERT = "#E05E3A"     # orange-red
C_DARK = "#1A2B3C"
C_LIGHT = "#E8EFF5"

STYLE = {
    "figure.facecolor": "white",
    "axes.facecolor": C_LIGHT,
    "axes.edgecolor": C_DARK,
    "axes.labelcolor": C_DARK,
    "xtick.color": C_DARK,
    "ytick.color": C_DARK,
    "text.color": C_DARK,
    "grid.color": "white",
    "grid.linewidth": 1.0,
    "axes.spines.top": False,
    "axes.spines.right": False,
}

CLUSTERING_BINS = [0.0, 0.25, 0.5, 0.75, 1.0]


def generate_all_figures(result: "PipelineResult", output_dir: str) -> dict[str, str]:
    """
    Generate every study figure from a PipelineResult.

    Args:
        result:     PipelineResult from run_full_pipeline().
        output_dir: Directory to save PNG files into (created if needed).

    Returns:
        Dict mapping filename -> absolute path for each generated figure.
    """
    os.makedirs(output_dir, exist_ok=True)
    plt.rcParams.update(STYLE)
    paths: dict[str, str] = {}

    for builder in (_fig1_network_size, _fig2_clustering_over_time):
        p = builder(result.year_summary, output_dir)
        if p:
            paths[os.path.basename(p)] = p

    p = _fig3_war_rate_by_clustering(result.panel, output_dir)
    if p:
        paths[os.path.basename(p)] = p

    logger.info("Generated %d figure(s) in %s.", len(paths), output_dir)
    return paths


def _fig1_network_size(summary: pd.DataFrame, output_dir: str) -> str | None:
    if summary.empty:
        return None
    fig, ax = plt.subplots(figsize=(9, 5))
    ax.plot(summary["year"], summary["nodes"], color=C_DARK, linewidth=2, label="States", zorder=3)
    ax.plot(summary["year"], summary["edges"], color=C_MAIN, linewidth=2, label="Kinship ties", zorder=3)
    ax.plot(summary["year"], summary["isolated"], color=C_ALERT, linewidth=1.5,
            linestyle="--", label="Isolated states", zorder=3)
    ax.set_xlabel("Year", fontsize=12)
    ax.set_ylabel("Count", fontsize=12)
    ax.set_title("Kinship Network Size by Year", fontsize=13, fontweight="bold", pad=12)
    ax.yaxis.grid(True, zorder=0)
    ax.legend(fontsize=10, loc="upper left")
    fig.tight_layout()
    path = os.path.join(output_dir, "fig1_network_size.png")
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return os.path.abspath(path)


def _fig2_clustering_over_time(summary: pd.DataFrame, output_dir: str) -> str | None:
    if summary.empty or summary["mean_clustering"].isna().all():
        return None
    fig, ax = plt.subplots(figsize=(9, 5))
    ax.plot(summary["year"], summary["mean_clustering"], color=C_MAIN, linewidth=2, zorder=3)
    ax.set_xlabel("Year", fontsize=12)
    ax.set_ylabel("Mean ego clustering (degree ≥ 2)", fontsize=12)
    ax.set_ylim(0, 1)
    ax.set_title("Transitivity of Kinship Ties Over Time", fontsize=13, fontweight="bold", pad=12)
    ax.yaxis.grid(True, zorder=0)
    fig.tight_layout()
    path = os.path.join(output_dir, "fig2_clustering_over_time.png")
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return os.path.abspath(path)


def _fig3_war_rate_by_clustering(panel: pd.DataFrame, output_dir: str) -> str | None:
    if "tek_clustering" not in panel.columns:
        return None
    data = panel[(panel["tek_degree"] >= 2) & panel["war"].notna()]
    if data.empty:
        return None

    bins = pd.cut(data["tek_clustering"], CLUSTERING_BINS, include_lowest=True)
    exposed = data["tek_neighbor_war"] > 0
    rates = pd.DataFrame({
        "exposed": data[exposed].groupby(bins[exposed], observed=False)["war"].mean(),
        "unexposed": data[~exposed].groupby(bins[~exposed], observed=False)["war"].mean(),
    })

    fig, ax = plt.subplots(figsize=(9, 5))
    x = np.arange(len(rates))
    width = 0.38
    ax.bar(x - width / 2, rates["unexposed"].fillna(0), width, color=C_MAIN,
           label="No kin neighbor at war", zorder=3)
    ax.bar(x + width / 2, rates["exposed"].fillna(0), width, color=C_ALERT,
           label="≥1 kin neighbor at war", zorder=3)
    ax.set_xticks(x)
    ax.set_xticklabels([str(i) for i in rates.index])
    ax.set_xlabel("Ego clustering coefficient", fontsize=12)
    ax.set_ylabel("War incidence rate", fontsize=12)
    ax.set_title("War Incidence by Kinship Transitivity and Exposure",
                 fontsize=13, fontweight="bold", pad=12)
    ax.yaxis.grid(True, zorder=0)
    ax.legend(fontsize=10, loc="upper left")
    fig.tight_layout()
    path = os.path.join(output_dir, "fig3_war_rate_by_clustering.png")
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return os.path.abspath(path)
