"""
tek_contagion/metrics/clustering.py — Ego-network transitivity of kin ties.

The study's key regressor. For each state we take its closed kinship
neighborhood (itself plus every state it shares a kinship group with) and ask
how many of its kin partners are also kin of each other. A state whose kin
partners are mutually tied sits in a dense transborder ethnic cluster; one
whose partners are strangers to each other is a hub of separate ties.

Two degenerate neighborhoods cannot produce a coefficient and get configured
sentinels instead of 0, so they stay separable from genuinely open (0.0)
neighborhoods in the regression:
    degree 0 → config.isolated_clustering
    degree 1 → config.undefined_clustering
"""

import logging

import networkx as nx

from tek_contagion.config import DEFAULT_CONFIG, TekConfig

logger = logging.getLogger(__name__)


def ego_clustering(G: nx.Graph, node) -> float | None:
    """
    Local clustering coefficient of node within its closed-neighborhood subgraph.

    Returns None when the coefficient is undefined (fewer than two neighbors).
    """
    neighbors = list(G.neighbors(node))
    if len(neighbors) < 2:
        return None
    ego = G.subgraph(neighbors + [node])
    return nx.clustering(ego, node)


def compute_ego_clustering(
    G: nx.Graph,
    config: TekConfig = DEFAULT_CONFIG,
) -> dict:
    """
    Compute the sentinel-aware ego clustering coefficient for every node.

    Algorithm:
        1. For each node, collect its open neighborhood and add the node.
        2. Extract the induced subgraph over that closed neighborhood.
        3. Compute the node's local clustering coefficient
           (closed neighbor pairs / possible neighbor pairs).
        4. Substitute the sentinel for degree 0 and degree 1; otherwise
           round to config.clustering_precision.

    Args:
        G:      Year graph from build_year_graph().
        config: TekConfig with isolated_clustering, undefined_clustering and
                clustering_precision.

    Returns:
        Dict mapping node → clustering value (float).
    """
    result: dict = {}
    isolated = 0
    undefined = 0

    for node in G.nodes():
        degree = G.degree(node)
        if degree == 0:
            result[node] = config.isolated_clustering
            isolated += 1
            continue
        coefficient = ego_clustering(G, node)
        if coefficient is None:
            result[node] = config.undefined_clustering
            undefined += 1
        else:
            result[node] = round(float(coefficient), config.clustering_precision)

    logger.debug(
        "Ego clustering: %d nodes (%d isolated, %d single-neighbor).",
        len(result), isolated, undefined,
    )
    return result
