"""
tek_contagion/metrics/yearly.py — Year-loop driver for the kinship metrics.

For every study year: take the states on record, build that year's kinship
graph, compute ego clustering and neighbor conflict, and append one row per
state. Nothing crosses year boundaries except the accumulated rows. The
result is left-joined back onto the panel by (state_id, year).

Columns produced:
    tek_clustering    — ego-network clustering (sentinel for degree 0/1)
    tek_neighbor_war  — kin neighbors with the prior-year conflict flag set
    tek_degree        — number of kin neighbors
    tek_groups        — kinship groups hosted by the state (any year)
"""

import logging
from collections.abc import Iterable

import networkx as nx
import pandas as pd

from tek_contagion.config import DEFAULT_CONFIG, TekConfig
from tek_contagion.graph.builder import active_states_for_year, build_year_graph
from tek_contagion.metrics.clustering import compute_ego_clustering
from tek_contagion.metrics.neighborhood import compute_neighbor_conflict
from tek_contagion.panel.merge import PANEL_KEYS

logger = logging.getLogger(__name__)

METRIC_COLUMNS = ["tek_clustering", "tek_neighbor_war", "tek_degree", "tek_groups"]


def year_metrics(
    G: nx.Graph,
    year: int,
    flags: dict,
    group_counts: dict,
    config: TekConfig = DEFAULT_CONFIG,
) -> list[dict]:
    """Compute the per-state metric rows for one already-built year graph."""
    clustering = compute_ego_clustering(G, config)
    neighbor_war = compute_neighbor_conflict(G, flags, config)
    return [
        {
            "state_id": node,
            "year": year,
            "tek_clustering": clustering[node],
            "tek_neighbor_war": neighbor_war[node],
            "tek_degree": G.degree(node),
            "tek_groups": group_counts.get(node, 0),
        }
        for node in G.nodes()
    ]


def compute_yearly_network_metrics(
    panel: pd.DataFrame,
    kinship_df: pd.DataFrame,
    config: TekConfig = DEFAULT_CONFIG,
    years: Iterable[int] | None = None,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Run the per-year graph + metric computation over the study horizon.

    Args:
        panel:      State-year panel. Must carry state_id, year and the lagged
                    conflict flag f"{config.conflict_flag}_lag".
        kinship_df: Membership table (state_id, group_id, group_name).
        config:     TekConfig. Uses study_years, conflict_flag and sentinels.
        years:      Optional explicit year list overriding config.study_years.

    Returns:
        metrics_df: One row per (state_id, year) with METRIC_COLUMNS.
        summary_df: One row per year with nodes, edges, isolated,
                    mean_clustering (years with no active state omitted).

    Raises:
        ValueError: If the lagged conflict column is missing from panel.
    """
    flag_col = f"{config.conflict_flag}_lag"
    if flag_col not in panel.columns:
        raise ValueError(
            f"Panel lacks '{flag_col}'; add lags before computing network metrics."
        )

    years = list(years) if years is not None else list(config.study_years)
    group_counts = kinship_df.groupby("state_id")["group_id"].nunique().to_dict()

    rows: list[dict] = []
    summary: list[dict] = []

    for year in years:
        active = active_states_for_year(panel, year)
        if not active:
            logger.warning("Year %d: no active states in panel; skipped.", year)
            continue

        year_rows = panel.loc[panel["year"] == year, ["state_id", flag_col]]
        flags = dict(zip(year_rows["state_id"], year_rows[flag_col]))

        G = build_year_graph(kinship_df, active, year=year)
        per_state = year_metrics(G, year, flags, group_counts, config)
        rows.extend(per_state)

        isolated = nx.number_of_isolates(G)
        # Mean over states with a defined coefficient; sentinels excluded.
        defined = [r["tek_clustering"] for r in per_state if r["tek_degree"] >= 2]
        mean_clustering = sum(defined) / len(defined) if defined else float("nan")
        summary.append(
            {
                "year": year,
                "nodes": G.number_of_nodes(),
                "edges": G.number_of_edges(),
                "isolated": isolated,
                "mean_clustering": round(mean_clustering, config.clustering_precision),
            }
        )
        logger.debug(
            "Year %d: %d states, %d kin edges, %d isolated.",
            year, G.number_of_nodes(), G.number_of_edges(), isolated,
        )

    metrics_df = pd.DataFrame(rows, columns=PANEL_KEYS + METRIC_COLUMNS)
    summary_df = pd.DataFrame(
        summary, columns=["year", "nodes", "edges", "isolated", "mean_clustering"]
    )

    logger.info(
        "Network metrics computed: %d state-years over %d years.",
        len(metrics_df), len(summary_df),
    )
    return metrics_df, summary_df


def merge_network_metrics(panel: pd.DataFrame, metrics_df: pd.DataFrame) -> pd.DataFrame:
    """
    Left-join the per-state-year metrics onto the panel.

    State-years outside the computed horizon keep NaN metrics.

    Raises:
        ValueError: If a metric row has no matching panel row, if metrics
                    repeat a (state_id, year) key, or if the join would
                    change the panel's row count.
    """
    keys = panel[PANEL_KEYS].drop_duplicates()
    orphan = metrics_df.merge(keys, on=PANEL_KEYS, how="left", indicator=True)
    orphan_count = int((orphan["_merge"] == "left_only").sum())
    if orphan_count:
        raise ValueError(f"{orphan_count} metric row(s) have no matching panel state-year.")

    panel_cols = [c for c in METRIC_COLUMNS if c in panel.columns]
    base = panel.drop(columns=panel_cols) if panel_cols else panel

    merged = base.merge(metrics_df, on=PANEL_KEYS, how="left", validate="many_to_one")
    if len(merged) != len(panel):
        raise ValueError(
            f"Metric merge changed panel row count: {len(panel)} → {len(merged)}"
        )
    return merged
