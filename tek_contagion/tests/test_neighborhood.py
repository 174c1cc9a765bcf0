"""
tek_contagion/tests/test_neighborhood.py — Tests for the neighbor conflict counter.

Tests verify:
- Sums run over direct neighbors only, never the node's own flag.
- Isolated nodes get the configured isolated value.
- Missing and NaN flags count as zero.
"""

import math

import networkx as nx

from tek_contagion.config import TekConfig
from tek_contagion.metrics.neighborhood import compute_neighbor_conflict


def test_counts_neighbors_not_self():
    G = nx.Graph([(1, 2), (1, 3), (2, 3), (3, 4)])
    flags = {1: 1, 2: 1, 3: 0, 4: 1}
    result = compute_neighbor_conflict(G, flags)
    assert result[1] == 1      # neighbors 2 (1), 3 (0)
    assert result[3] == 3      # neighbors 1, 2, 4 all at war
    assert result[4] == 0      # neighbor 3 at peace, own flag ignored


def test_isolated_node_gets_isolated_value():
    G = nx.Graph()
    G.add_node(1)
    assert compute_neighbor_conflict(G, {1: 1})[1] == 0
    config = TekConfig(isolated_neighbor_war=-1)
    assert compute_neighbor_conflict(G, {1: 1}, config)[1] == -1


def test_missing_and_nan_flags_count_as_zero():
    G = nx.Graph([(1, 2), (1, 3), (1, 4)])
    flags = {2: 1, 3: math.nan}  # 4 absent
    assert compute_neighbor_conflict(G, flags)[1] == 1


def test_float_flags_are_cast_to_int():
    G = nx.Graph([(1, 2), (1, 3)])
    result = compute_neighbor_conflict(G, {2: 1.0, 3: 1.0})
    assert result[1] == 2
    assert isinstance(result[1], int)


def test_every_node_scored():
    G = nx.path_graph(5)
    result = compute_neighbor_conflict(G, {n: 1 for n in G})
    assert set(result) == set(G.nodes())
    assert result[0] == 1 and result[2] == 2
