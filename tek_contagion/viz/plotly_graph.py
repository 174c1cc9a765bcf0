"""
tek_contagion/viz/plotly_graph.py — Interactive Plotly kinship network.

Renders one year's kinship graph as a zoomable force-directed HTML figure.

Visual encoding:
    - Node size:   Ego clustering coefficient (sentinels drawn at the minimum)
    - Node color:  Red if the state was at war the prior year, steel blue otherwise
    - Edge width:  Number of shared kinship groups
    - Hover:       State label, degree, clustering, kin neighbors at war,
                   shared-group labels on edges
"""

import logging
from math import sqrt

import networkx as nx
import plotly.graph_objects as go

logger = logging.getLogger(__name__)

_WAR_COLOR = "#E05E3A"
_PEACE_COLOR = "steelblue"
_EDGE_COLOR = "rgba(150, 150, 150, 0.5)"


def _compute_layout(
    G: nx.Graph,
    seed: int = 42,
) -> dict:
    """
    Spring layout with k=2/sqrt(N+1) so spacing scales with graph size.

    Returns:
        Dict mapping node → (x, y).
    """
    k_value = 2.0 / sqrt(len(G.nodes) + 1)
    pos = nx.spring_layout(G, seed=seed, k=k_value)
    return {node: (float(x), float(y)) for node, (x, y) in pos.items()}


def build_kinship_figure(
    G: nx.Graph,
    clustering: dict,
    neighbor_war: dict,
    flags: dict | None = None,
    labels: dict | None = None,
    title: str | None = None,
) -> go.Figure:
    """
    Build an interactive Plotly figure of one year's kinship graph.

    Args:
        G:            Year graph from build_year_graph().
        clustering:   compute_ego_clustering() output for G.
        neighbor_war: compute_neighbor_conflict() output for G.
        flags:        Optional node → prior-year war flag (node color).
        labels:       Optional node → display label (e.g. 3-letter code).
        title:        Figure title; defaults to the graph's year.

    Returns:
        Plotly Figure object (no IO).
    """
    flags = flags or {}
    labels = labels or {}
    pos = _compute_layout(G, seed=42)

    # ── Edge traces: one per weight so widths can differ ─────────────────────
    edge_traces = []
    by_weight: dict[int, list[tuple]] = {}
    for u, v, data in G.edges(data=True):
        by_weight.setdefault(int(data.get("weight", 1)), []).append((u, v))

    for weight, edges in sorted(by_weight.items()):
        x_coords: list = []
        y_coords: list = []
        for u, v in edges:
            x0, y0 = pos[u]
            x1, y1 = pos[v]
            x_coords += [x0, x1, None]
            y_coords += [y0, y1, None]
        edge_traces.append(
            go.Scatter(
                x=x_coords,
                y=y_coords,
                mode="lines",
                line={"width": 0.8 + weight, "color": _EDGE_COLOR},
                name=f"{weight} shared group(s)",
                hoverinfo="none",
            )
        )

    # Edge midpoints carry the shared-group label on hover.
    mid_x, mid_y, mid_text = [], [], []
    for u, v, data in G.edges(data=True):
        (x0, y0), (x1, y1) = pos[u], pos[v]
        mid_x.append((x0 + x1) / 2)
        mid_y.append((y0 + y1) / 2)
        mid_text.append(f"{labels.get(u, u)} — {labels.get(v, v)}<br>{data.get('label', '')}")
    label_trace = go.Scatter(
        x=mid_x,
        y=mid_y,
        mode="markers",
        marker={"size": 4, "color": "rgba(0,0,0,0)"},
        text=mid_text,
        hovertemplate="%{text}<extra></extra>",
        showlegend=False,
    )

    # ── Node traces grouped by prior-year war status ─────────────────────────
    node_traces = []
    for at_war, color, name in ((True, _WAR_COLOR, "War prior year"), (False, _PEACE_COLOR, "No war prior year")):
        nodes = [n for n in G.nodes() if bool(flags.get(n) == 1) == at_war]
        if not nodes:
            continue
        sizes = [8 + 24 * max(0.0, float(clustering.get(n, 0.0))) for n in nodes]
        hover = [
            f"<b>{labels.get(n, n)}</b><br>"
            f"Kin neighbors: {G.degree(n)}<br>"
            f"Clustering: {clustering.get(n, 'N/A')}<br>"
            f"Kin neighbors at war: {neighbor_war.get(n, 'N/A')}"
            for n in nodes
        ]
        node_traces.append(
            go.Scatter(
                x=[pos[n][0] for n in nodes],
                y=[pos[n][1] for n in nodes],
                mode="markers+text",
                name=name,
                text=[str(labels.get(n, n)) for n in nodes],
                textposition="top center",
                marker={"size": sizes, "color": color, "line": {"color": "white", "width": 1}},
                hovertext=hover,
                hoverinfo="text",
            )
        )

    year = G.graph.get("year")
    fig = go.Figure(
        data=edge_traces + [label_trace] + node_traces,
        layout=go.Layout(
            title=title or f"Transborder Ethnic Kinship Network — {year}",
            showlegend=True,
            hovermode="closest",
            xaxis={"showgrid": False, "zeroline": False, "showticklabels": False},
            yaxis={"showgrid": False, "zeroline": False, "showticklabels": False},
            margin={"l": 20, "r": 20, "t": 60, "b": 20},
            paper_bgcolor="white",
            plot_bgcolor="white",
        ),
    )

    logger.info(
        "Kinship figure built for %s: %d nodes, %d edges.",
        year, G.number_of_nodes(), G.number_of_edges(),
    )
    return fig


def save_figure_html(fig: go.Figure, output_path: str) -> None:
    """Write a Plotly figure to an HTML file (plotly.js from CDN)."""
    fig.write_html(output_path, include_plotlyjs="cdn")
    logger.info("Plotly figure saved to: %s", output_path)
