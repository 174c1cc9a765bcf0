"""
tek_contagion/pipeline.py — Single-call pipeline orchestrator.

Provides run_full_pipeline(), which executes the study in dependency order and
returns a PipelineResult holding every intermediate table.

Usage:
    from tek_contagion.pipeline import run_full_pipeline
    result = run_full_pipeline(data_dir="data")
    print(result.comparison)
"""

import logging
import os
from dataclasses import dataclass, field

import pandas as pd

from tek_contagion.config import DEFAULT_CONFIG, TekConfig
from tek_contagion.ingestion.loaders import StudyInputs, load_study_inputs
from tek_contagion.metrics.yearly import compute_yearly_network_metrics, merge_network_metrics
from tek_contagion.models.logit import ModelResult, comparison_table, run_model_sequence
from tek_contagion.panel.imputation import ImputationReport, impute_panel
from tek_contagion.panel.merge import build_panel
from tek_contagion.reports.study_report import (
    StudySummary,
    build_study_summary,
    export_report_markdown,
    export_summary_json,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Complete output of one pipeline run."""

    inputs: StudyInputs
    panel: pd.DataFrame                 # merged panel + network metrics
    network_metrics: pd.DataFrame       # one row per state-year in horizon
    year_summary: pd.DataFrame          # one row per year
    model_data: pd.DataFrame            # imputed, complete-case frame
    imputation_report: ImputationReport
    model_results: list[ModelResult] = field(default_factory=list)
    comparison: pd.DataFrame = field(default_factory=pd.DataFrame)
    summary: StudySummary | None = None
    figure_paths: dict = field(default_factory=dict)


def compute_network_panel(
    inputs: StudyInputs,
    config: TekConfig = DEFAULT_CONFIG,
) -> tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """
    Build the panel and attach the per-year kinship metrics.

    Returns:
        (panel with metrics, metrics_df, year_summary)
    """
    panel = build_panel(inputs)
    metrics_df, year_summary = compute_yearly_network_metrics(panel, inputs.kinship, config)
    panel = merge_network_metrics(panel, metrics_df)
    return panel, metrics_df, year_summary


def run_full_pipeline(
    data_dir: str | None = None,
    config: TekConfig = DEFAULT_CONFIG,
    output_dir: str | None = None,
    fit_models: bool = True,
    generate_figures: bool = True,
) -> PipelineResult:
    """
    Execute the full study in one call.

    Dependency order:
        1. Load the six input tables
        2. Merge the state-year panel (lags, war history)
        3. Per-year kinship graphs → clustering + neighbor conflict
        4. Left-join metrics onto the panel
        5. Imputation + listwise drop
        6. Logit sequence + k-fold CV
        7. Summary JSON + Markdown report (when output_dir is set)
        8. Figures (when output_dir is set and generate_figures)

    Args:
        data_dir:         Directory holding the input CSVs (config.data_dir).
        config:           TekConfig with all tunables.
        output_dir:       Where reports/figures go; None skips all file output.
        fit_models:       Skip phase 6 when False.
        generate_figures: Skip phase 8 when False.

    Returns:
        PipelineResult with every intermediate and final table.
    """
    logger.info("Kinship contagion pipeline starting.")

    inputs = load_study_inputs(data_dir, config)
    logger.info("Phase 1/8: Inputs loaded — %d kinship memberships.", len(inputs.kinship))

    panel, metrics_df, year_summary = compute_network_panel(inputs, config)
    logger.info(
        "Phases 2–4/8: Panel %d rows; network metrics for %d state-years.",
        len(panel), len(metrics_df),
    )

    in_horizon = panel[panel["year"].between(config.study_start_year, config.study_end_year)]
    model_data, imputation_report = impute_panel(in_horizon, config)
    logger.info("Phase 5/8: Model frame %d rows.", len(model_data))

    model_results: list[ModelResult] = []
    comparison = pd.DataFrame()
    if fit_models:
        model_results = run_model_sequence(model_data, config)
        comparison = comparison_table(model_results)
        logger.info("Phase 6/8: %d models fitted and cross-validated.", len(model_results))
    else:
        logger.info("Phase 6/8: Model fitting skipped.")

    result = PipelineResult(
        inputs=inputs,
        panel=panel,
        network_metrics=metrics_df,
        year_summary=year_summary,
        model_data=model_data,
        imputation_report=imputation_report,
        model_results=model_results,
        comparison=comparison,
    )
    result.summary = build_study_summary(panel, model_data, imputation_report, comparison, config)

    if output_dir is None:
        logger.info("Phases 7–8/8: No output_dir — file output skipped.")
        return result

    os.makedirs(output_dir, exist_ok=True)
    panel.to_csv(os.path.join(output_dir, "panel_with_network_metrics.csv"), index=False)

    if generate_figures:
        from tek_contagion.viz.figures import generate_all_figures
        result.figure_paths = generate_all_figures(result, os.path.join(output_dir, "figures"))
        logger.info("Phase 8/8: %d figure(s) generated.", len(result.figure_paths))

    export_summary_json(result.summary, os.path.join(output_dir, "study_summary.json"))
    export_report_markdown(
        result.summary,
        comparison,
        os.path.join(output_dir, "study_report.md"),
        model_summaries={r.spec.name: r.summary_text() for r in model_results},
        figure_paths=result.figure_paths,
    )
    logger.info("Phase 7/8: Reports written to %s.", output_dir)

    logger.info("Kinship contagion pipeline complete.")
    return result
