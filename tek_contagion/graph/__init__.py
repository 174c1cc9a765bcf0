"""
tek_contagion.graph — NetworkX construction of the yearly kinship graph.

Modules:
    edge_list — Pair member states within each kinship group.
    builder   — One undirected graph per year over that year's active states.

All graph objects are undirected nx.Graph instances keyed by state_id.
"""
