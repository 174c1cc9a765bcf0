"""
tek_contagion/cli.py — Command-line interface for the kinship contagion study.

Usage:
    tek-contagion run --data-dir data --output-dir output
    tek-contagion network --data-dir data
    tek-contagion plot-year 1991 --data-dir data

(or ``python -m tek_contagion.cli ...``)
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
import time

from tek_contagion.config import DEFAULT_CONFIG, TekConfig


# ── Logging setup ─────────────────────────────────────────────────────────────

def _setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with timestamps on stderr."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    fmt = "%(asctime)s  %(levelname)-8s  %(name)s — %(message)s"
    datefmt = "%H:%M:%S"
    logging.basicConfig(level=numeric, format=fmt, datefmt=datefmt, stream=sys.stderr)
    logging.getLogger("matplotlib").setLevel(logging.WARNING)


logger = logging.getLogger("tek_contagion.cli")


def _config_from_args(args: argparse.Namespace) -> TekConfig:
    overrides = {}
    if args.start_year is not None:
        overrides["study_start_year"] = args.start_year
    if args.end_year is not None:
        overrides["study_end_year"] = args.end_year
    if getattr(args, "folds", None) is not None:
        overrides["cv_folds"] = args.folds
    overrides["data_dir"] = args.data_dir
    overrides["output_dir"] = args.output_dir
    return dataclasses.replace(DEFAULT_CONFIG, **overrides)


# ── Subcommand: run ───────────────────────────────────────────────────────────

def cmd_run(args: argparse.Namespace) -> int:
    """Full pipeline: load → panel → network metrics → models → report."""
    _setup_logging(args.log_level)
    config = _config_from_args(args)

    from tek_contagion.pipeline import run_full_pipeline

    logger.info("=" * 60)
    logger.info("Kinship Contagion — Full Pipeline Run")
    logger.info("  Data dir    : %s", config.data_dir)
    logger.info("  Output dir  : %s", config.output_dir)
    logger.info("  Horizon     : %d–%d", config.study_start_year, config.study_end_year)
    logger.info("  CV folds    : %d", config.cv_folds)
    logger.info("=" * 60)

    t0 = time.monotonic()
    result = run_full_pipeline(
        data_dir=config.data_dir,
        config=config,
        output_dir=config.output_dir,
        generate_figures=not args.no_figures,
    )
    elapsed = time.monotonic() - t0

    summary = result.summary
    print()
    print("=" * 60)
    print("  KINSHIP CONTAGION — RUN COMPLETE")
    print("=" * 60)
    print(f"  Elapsed          : {elapsed:.1f}s")
    print(f"  Panel rows       : {summary.panel_rows}")
    print(f"  Model rows       : {summary.model_rows}")
    print(f"  Mean clustering  : {summary.mean_clustering:.3f}")
    print(f"  Isolated share   : {summary.share_isolated:.1%}")
    print()
    if not result.comparison.empty:
        print(result.comparison.to_string(index=False, float_format=lambda v: f"{v:.3f}"))
        print()
    print(f"  Report saved to  : {os.path.join(config.output_dir, 'study_report.md')}")
    print("=" * 60)
    return 0


# ── Subcommand: network ───────────────────────────────────────────────────────

def cmd_network(args: argparse.Namespace) -> int:
    """Compute kinship network metrics only and write them to CSV."""
    _setup_logging(args.log_level)
    config = _config_from_args(args)

    from tek_contagion.ingestion.loaders import load_study_inputs
    from tek_contagion.pipeline import compute_network_panel

    inputs = load_study_inputs(config.data_dir, config)
    _, metrics_df, year_summary = compute_network_panel(inputs, config)

    os.makedirs(config.output_dir, exist_ok=True)
    metrics_path = os.path.join(config.output_dir, "network_metrics.csv")
    summary_path = os.path.join(config.output_dir, "network_year_summary.csv")
    metrics_df.to_csv(metrics_path, index=False)
    year_summary.to_csv(summary_path, index=False)

    print(f"  Network metrics  : {metrics_path} ({len(metrics_df)} rows)")
    print(f"  Year summary     : {summary_path} ({len(year_summary)} years)")
    return 0


# ── Subcommand: plot-year ─────────────────────────────────────────────────────

def cmd_plot_year(args: argparse.Namespace) -> int:
    """Write the interactive kinship network for one year as HTML."""
    _setup_logging(args.log_level)
    config = _config_from_args(args)

    from tek_contagion.graph.builder import active_states_for_year, build_year_graph
    from tek_contagion.ingestion.loaders import load_study_inputs
    from tek_contagion.metrics.clustering import compute_ego_clustering
    from tek_contagion.metrics.neighborhood import compute_neighbor_conflict
    from tek_contagion.panel.merge import build_panel
    from tek_contagion.viz.plotly_graph import build_kinship_figure, save_figure_html

    inputs = load_study_inputs(config.data_dir, config)
    panel = build_panel(inputs)
    active = active_states_for_year(panel, args.year)
    if not active:
        logger.error("No states on record for %d.", args.year)
        return 1

    flag_col = f"{config.conflict_flag}_lag"
    rows = panel[panel["year"] == args.year]
    flags = dict(zip(rows["state_id"], rows[flag_col]))
    labels = {}
    if "abbrev3" in rows.columns:
        labels = {s: a for s, a in zip(rows["state_id"], rows["abbrev3"]) if isinstance(a, str)}

    G = build_year_graph(inputs.kinship, active, year=args.year)
    fig = build_kinship_figure(
        G,
        compute_ego_clustering(G, config),
        compute_neighbor_conflict(G, flags, config),
        flags=flags,
        labels=labels,
    )

    os.makedirs(config.output_dir, exist_ok=True)
    path = args.html_path or os.path.join(config.output_dir, f"kinship_network_{args.year}.html")
    save_figure_html(fig, path)
    print(f"  Network figure   : {path}")
    return 0


# ── Argument parser ───────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tek-contagion",
        description="Transborder ethnic kinship networks and the spread of armed conflict.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common_flags(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--data-dir", default=DEFAULT_CONFIG.data_dir, metavar="PATH",
            help=f"Directory with the input CSVs (default: {DEFAULT_CONFIG.data_dir})",
        )
        p.add_argument(
            "--output-dir", default=DEFAULT_CONFIG.output_dir, metavar="PATH",
            help=f"Directory for outputs (default: {DEFAULT_CONFIG.output_dir})",
        )
        p.add_argument(
            "--start-year", type=int, default=None, metavar="YEAR",
            help=f"First study year (default: {DEFAULT_CONFIG.study_start_year})",
        )
        p.add_argument(
            "--end-year", type=int, default=None, metavar="YEAR",
            help=f"Last study year (default: {DEFAULT_CONFIG.study_end_year})",
        )
        p.add_argument(
            "--log-level", default="INFO",
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
            help="Logging verbosity (default: INFO)",
        )

    # run
    p_run = subparsers.add_parser("run", help="Full pipeline: panel → network → models → report")
    add_common_flags(p_run)
    p_run.add_argument(
        "--folds", type=int, default=None, metavar="K",
        help=f"Cross-validation folds (default: {DEFAULT_CONFIG.cv_folds})",
    )
    p_run.add_argument("--no-figures", action="store_true", help="Skip figure generation")
    p_run.set_defaults(func=cmd_run)

    # network
    p_network = subparsers.add_parser("network", help="Network metrics only, written to CSV")
    add_common_flags(p_network)
    p_network.set_defaults(func=cmd_network)

    # plot-year
    p_plot = subparsers.add_parser("plot-year", help="Interactive HTML kinship network for one year")
    p_plot.add_argument("year", type=int, metavar="YEAR")
    add_common_flags(p_plot)
    p_plot.add_argument(
        "--html-path", default=None, metavar="PATH",
        help="Output HTML path (default: <output-dir>/kinship_network_<YEAR>.html)",
    )
    p_plot.set_defaults(func=cmd_plot_year)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
