"""
tek_contagion/graph/builder.py — Per-year kinship graph construction.

State membership in the international system changes every year (new states,
unifications, dissolutions), so one static graph would connect states that
never coexisted. The graph is therefore rebuilt for each calendar year from
the kinship table filtered to that year's active states, used for the year's
metrics, and discarded.

Graph schema (nx.Graph, undirected, simple):
    Node    : state_id (int)
    Edge    : groups (list of shared group ids), label (str), weight (int)
    G.graph : year, n_active_states, n_edges
"""

import logging
from collections.abc import Iterable

import networkx as nx
import pandas as pd

from tek_contagion.graph.edge_list import build_kinship_edge_list

logger = logging.getLogger(__name__)

LABEL_SEPARATOR = "; "


def active_states_for_year(panel: pd.DataFrame, year: int) -> list[int]:
    """Return the sorted distinct state ids with at least one panel row in year."""
    states = panel.loc[panel["year"] == year, "state_id"].unique()
    return sorted(int(s) for s in states)


def build_year_graph(
    kinship_df: pd.DataFrame,
    active_states: Iterable[int],
    year: int | None = None,
) -> nx.Graph:
    """
    Build the undirected kinship graph for one year.

    Algorithm:
        1. Keep only membership rows whose state is active.
        2. Build the edge list (build_kinship_edge_list).
        3. Add every active state as a node, so states with no kin tie this
           year are present as isolated nodes.
        4. Fold edge records into simple edges: a pair sharing several groups
           gets one edge whose label concatenates every shared group's label
           and whose weight is the number of shared groups.

    Args:
        kinship_df:    Membership table (state_id, group_id, group_name).
        active_states: States on record for the year.
        year:          Calendar year, recorded in G.graph for audit.

    Returns:
        G: nx.Graph with exactly one node per active state.
    """
    active = list(dict.fromkeys(active_states))
    active_set = set(active)

    members = kinship_df[kinship_df["state_id"].isin(active_set)]
    edges = build_kinship_edge_list(members)

    G = nx.Graph()
    G.add_nodes_from(active)

    for row in edges.itertuples(index=False):
        u, v = row.source, row.destination
        if G.has_edge(u, v):
            data = G.edges[u, v]
            data["groups"].append(row.group_id)
            data["label"] = data["label"] + LABEL_SEPARATOR + row.label
            data["weight"] += 1
        else:
            G.add_edge(u, v, groups=[row.group_id], label=row.label, weight=1)

    G.graph["year"] = year
    G.graph["n_active_states"] = len(active)
    G.graph["n_edges"] = G.number_of_edges()

    logger.debug(
        "Year graph %s: %d nodes, %d edges, %d isolated.",
        year,
        G.number_of_nodes(),
        G.number_of_edges(),
        nx.number_of_isolates(G),
    )
    return G
