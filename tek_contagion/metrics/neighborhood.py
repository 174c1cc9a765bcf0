"""
tek_contagion/metrics/neighborhood.py — Conflict exposure through kin ties.

Counts how many of a state's kinship neighbors carry a conflict flag. The
year-loop driver feeds it the prior-year war flag, so the result reads as
"kin states that were at war last year". The state's own flag is excluded.
"""

import logging
from collections.abc import Mapping

import networkx as nx
import pandas as pd

from tek_contagion.config import DEFAULT_CONFIG, TekConfig

logger = logging.getLogger(__name__)


def _flag_value(value) -> int:
    if value is None or pd.isna(value):
        return 0
    return int(value)


def compute_neighbor_conflict(
    G: nx.Graph,
    flags: Mapping,
    config: TekConfig = DEFAULT_CONFIG,
) -> dict:
    """
    Sum a conflict flag over each node's direct kinship neighbors.

    Args:
        G:      Year graph from build_year_graph().
        flags:  Mapping node → 0/1 flag. Missing or NaN flags count as 0.
        config: TekConfig; isolated_neighbor_war is returned for nodes with
                no neighbors.

    Returns:
        Dict mapping node → neighbor conflict count (int).
    """
    result: dict = {}
    missing = 0

    for node in G.nodes():
        neighbors = list(G.neighbors(node))
        if not neighbors:
            result[node] = config.isolated_neighbor_war
            continue
        total = 0
        for neighbor in neighbors:
            if neighbor not in flags:
                missing += 1
            total += _flag_value(flags.get(neighbor))
        result[node] = total

    if missing:
        logger.debug("Neighbor conflict: %d neighbor flag lookup(s) had no value.", missing)
    return result
