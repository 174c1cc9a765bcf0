"""
tek_contagion/tests/test_viz.py — Tests for the Plotly kinship network figure.

Tests verify:
- One node marker per state, split by prior-year war status.
- Edge traces grouped by number of shared groups.
- HTML export writes a file.
"""

import networkx as nx
import plotly.graph_objects as go

from tek_contagion.graph.builder import active_states_for_year, build_year_graph
from tek_contagion.metrics.clustering import compute_ego_clustering
from tek_contagion.metrics.neighborhood import compute_neighbor_conflict
from tek_contagion.viz.plotly_graph import build_kinship_figure, save_figure_html


def _figure_for(small_inputs, small_panel, year: int):
    G = build_year_graph(small_inputs.kinship, active_states_for_year(small_panel, year), year=year)
    rows = small_panel[small_panel["year"] == year]
    flags = dict(zip(rows["state_id"], rows["war_lag"]))
    fig = build_kinship_figure(
        G, compute_ego_clustering(G), compute_neighbor_conflict(G, flags), flags=flags,
        labels=dict(zip(rows["state_id"], rows["abbrev3"])),
    )
    return G, fig


def _node_traces(fig: go.Figure) -> list:
    return [t for t in fig.data if t.mode == "markers+text"]


def test_returns_plotly_figure(small_inputs, small_panel):
    _, fig = _figure_for(small_inputs, small_panel, 1990)
    assert isinstance(fig, go.Figure)
    assert "1990" in fig.layout.title.text


def test_one_marker_per_state(small_inputs, small_panel):
    G, fig = _figure_for(small_inputs, small_panel, 1991)
    total = sum(len(t.x) for t in _node_traces(fig))
    assert total == G.number_of_nodes()


def test_war_and_peace_traces(small_inputs, small_panel):
    _, fig = _figure_for(small_inputs, small_panel, 1991)
    names = {t.name: t for t in _node_traces(fig)}
    # war_lag 1991: 101 and 103 were at war in 1990.
    assert set(names["War prior year"].text) == {"BBB", "DDD"}
    assert len(names["No war prior year"].text) == 5


def test_edge_traces_grouped_by_weight(small_inputs, small_panel):
    _, fig = _figure_for(small_inputs, small_panel, 1990)
    edge_names = {t.name for t in fig.data if t.mode == "lines"}
    assert edge_names == {"1 shared group(s)", "2 shared group(s)"}


def test_empty_graph_figure():
    fig = build_kinship_figure(nx.Graph(), {}, {})
    assert isinstance(fig, go.Figure)
    assert _node_traces(fig) == []


def test_save_figure_html(tmp_path, small_inputs, small_panel):
    _, fig = _figure_for(small_inputs, small_panel, 1990)
    path = tmp_path / "net.html"
    save_figure_html(fig, str(path))
    assert path.is_file()
    assert path.stat().st_size > 0
