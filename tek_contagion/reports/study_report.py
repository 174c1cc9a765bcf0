"""
tek_contagion/reports/study_report.py — Study summary and exports.

Collects the headline numbers of one pipeline run into a StudySummary that can
be written as JSON (for diffing between replication variants) and rendered as
a Markdown report with the model comparison table.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime

import pandas as pd

from tek_contagion.config import DEFAULT_CONFIG, TekConfig
from tek_contagion.panel.imputation import ImputationReport

logger = logging.getLogger(__name__)


@dataclass
class StudySummary:
    """Headline numbers of one pipeline run."""

    run_date: str
    study_start_year: int
    study_end_year: int

    # Panel
    panel_rows: int
    model_rows: int
    n_states: int

    # Network
    mean_clustering: float
    share_isolated: float
    mean_neighbor_war: float

    imputation: dict = field(default_factory=dict)
    models: list = field(default_factory=list)


def build_study_summary(
    panel: pd.DataFrame,
    model_data: pd.DataFrame,
    imputation_report: ImputationReport,
    comparison: pd.DataFrame,
    config: TekConfig = DEFAULT_CONFIG,
) -> StudySummary:
    """
    Summarize a pipeline run.

    Args:
        panel:             Panel with network metrics merged (pre-imputation).
        model_data:        Imputed, listwise-complete modeling frame.
        imputation_report: ImputationReport from impute_panel().
        comparison:        comparison_table() output (may be empty).
        config:            TekConfig (study horizon, sentinels).

    Notes:
        - mean_clustering covers states with at least two kin neighbors, so
          sentinel values never enter it.

    Raises:
        ValueError: If panel carries no network metric columns.
    """
    if "tek_clustering" not in panel.columns:
        raise ValueError("Panel has no network metrics; run merge_network_metrics() first.")

    in_horizon = panel[panel["tek_clustering"].notna()]
    defined = in_horizon.loc[in_horizon["tek_degree"] >= 2, "tek_clustering"]
    share_isolated = float((in_horizon["tek_degree"] == 0).mean()) if len(in_horizon) else 0.0

    return StudySummary(
        run_date=datetime.now().strftime("%Y-%m-%d"),
        study_start_year=config.study_start_year,
        study_end_year=config.study_end_year,
        panel_rows=len(panel),
        model_rows=len(model_data),
        n_states=int(panel["state_id"].nunique()),
        mean_clustering=round(float(defined.mean()), 4) if len(defined) else 0.0,
        share_isolated=round(share_isolated, 4),
        mean_neighbor_war=round(float(in_horizon["tek_neighbor_war"].mean()), 4) if len(in_horizon) else 0.0,
        imputation=asdict(imputation_report),
        models=comparison.to_dict("records"),
    )


def export_summary_json(summary: StudySummary, output_path: str) -> str:
    """Write summary as indented JSON; returns the path written."""
    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(asdict(summary), f, indent=2, default=str)
    logger.info("Study summary written to %s.", output_path)
    return output_path


def _markdown_table(df: pd.DataFrame, float_fmt: str = "{:.3f}") -> str:
    if df.empty:
        return "_No models fitted._"
    header = "| " + " | ".join(df.columns) + " |"
    rule = "|" + "|".join("---" for _ in df.columns) + "|"
    lines = [header, rule]
    for row in df.itertuples(index=False):
        cells = [float_fmt.format(v) if isinstance(v, float) else str(v) for v in row]
        lines.append("| " + " | ".join(cells) + " |")
    return "\n".join(lines)


def export_report_markdown(
    summary: StudySummary,
    comparison: pd.DataFrame,
    output_path: str,
    model_summaries: dict[str, str] | None = None,
    figure_paths: dict[str, str] | None = None,
) -> str:
    """
    Render the study report as Markdown.

    Args:
        summary:         StudySummary from build_study_summary().
        comparison:      comparison_table() output.
        output_path:     Destination .md file (parent dirs created).
        model_summaries: Optional {model name: statsmodels summary text}.
        figure_paths:    Optional {figure name: path}, linked relative to the
                         report's directory.

    Returns:
        The path written.
    """
    imp = summary.imputation
    lines = [
        "# Kinship Network Transitivity and Conflict Spread",
        "",
        f"Run date: {summary.run_date}  ",
        f"Study horizon: {summary.study_start_year}–{summary.study_end_year}",
        "",
        "## Panel",
        "",
        f"- State-years in panel: {summary.panel_rows}",
        f"- State-years in model frame: {summary.model_rows}",
        f"- States: {summary.n_states}",
        "",
        "## Kinship network",
        "",
        f"- Mean ego clustering (degree ≥ 2): {summary.mean_clustering:.3f}",
        f"- Share of isolated state-years: {summary.share_isolated:.1%}",
        f"- Mean kin neighbors at war (prior year): {summary.mean_neighbor_war:.3f}",
        "",
        "## Imputation",
        "",
        f"- Filled by state mean: {imp.get('filled_by_state_mean', {})}",
        f"- Filled by fallback: {imp.get('filled_by_fallback', {})}",
        f"- Rows dropped: {imp.get('rows_dropped', 0)} {imp.get('dropped_by_column', {})}",
        "",
        "## Model comparison",
        "",
        _markdown_table(comparison),
        "",
    ]

    if model_summaries:
        lines += ["## Model summaries", ""]
        for name, text in model_summaries.items():
            lines += [f"### {name}", "", "```", text, "```", ""]

    if figure_paths:
        report_dir = os.path.dirname(os.path.abspath(output_path))
        lines += ["## Figures", ""]
        for name, path in figure_paths.items():
            rel = os.path.relpath(os.path.abspath(path), report_dir)
            lines.append(f"![{name}]({rel})")
        lines.append("")

    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))
    logger.info("Markdown report written to %s.", output_path)
    return output_path
