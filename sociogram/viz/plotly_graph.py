"""
sociogram/viz/plotly_graph.py — Interactive Plotly snapshot of the live store.

Turns the current GraphStore (positions included, so drags are preserved)
into a standalone Plotly figure for sharing as HTML or embedding in the
Streamlit host page.

Visual encoding (same as the matplotlib renderer):
    - Node size:   store size (Score Model policy), in pixels
    - Node color:  band of ceil(average incoming score)
    - Edge color:  band of the relationship score; one trace per band
    - Curves:      bidirectional pairs drawn as sampled quadratic Béziers
    - Hover:       label, average incoming score, evaluations received
"""

import logging
from typing import Optional, Sequence

import plotly.graph_objects as go

from sociogram.graph.edges import bezier_points
from sociogram.graph.store import GraphStore
from sociogram.models import Relationship
from sociogram.scoring import SCORE_BANDS, average_incoming_score, score_band

logger = logging.getLogger(__name__)


def build_plotly_figure(
    store: GraphStore,
    relationships: Sequence[Relationship] = (),
    title: str = "Sociogramme — collaboration",
) -> go.Figure:
    """
    Build a Plotly figure of every node and edge currently in `store`.

    Args:
        store:         The view's GraphStore.
        relationships: Relationships used for hover statistics.
        title:         Figure title.

    Returns:
        Plotly Figure object (no IO, no files written).
    """
    positions = store.positions()

    # ── Edge traces grouped by score band ─────────────────────────────────────
    edge_groups: dict[int, tuple[list, list]] = {}
    label_x, label_y, label_text, label_color = [], [], [], []

    for edge in store.edges():
        band = score_band(edge.score)
        xs, ys = edge_groups.setdefault(band.level, ([], []))
        points = bezier_points(positions[edge.source], positions[edge.target], edge.as_render_edge())
        xs += list(points[:, 0]) + [None]
        ys += list(points[:, 1]) + [None]

        middle = points[len(points) // 2]
        label_x.append(middle[0])
        label_y.append(middle[1])
        label_text.append(edge.label)
        label_color.append(edge.color)

    traces = []
    for level in sorted(edge_groups):
        band = SCORE_BANDS[level]
        xs, ys = edge_groups[level]
        traces.append(go.Scatter(
            x=xs,
            y=ys,
            mode="lines",
            line={"width": 2, "color": band.color},
            name=f"{band.title} ({band.level})",
            legendgroup=f"band_{band.level}",
            hoverinfo="none",
        ))

    if label_text:
        traces.append(go.Scatter(
            x=label_x,
            y=label_y,
            mode="text",
            text=label_text,
            textfont={"color": label_color, "family": "monospace"},
            showlegend=False,
            hoverinfo="none",
        ))

    # ── Node trace ────────────────────────────────────────────────────────────
    nodes = store.nodes()
    if nodes:
        hover_texts = []
        for node in nodes:
            received = sum(1 for r in relationships if r.target == node.id)
            avg = average_incoming_score(node.id, relationships)
            hover_texts.append(
                f"<b>{node.label}</b><br>"
                f"Score moyen reçu: {avg:.2f}<br>"
                f"Évaluations reçues: {received}"
            )
        traces.append(go.Scatter(
            x=[n.x for n in nodes],
            y=[n.y for n in nodes],
            mode="markers+text",
            text=[n.label for n in nodes],
            textposition="middle right",
            textfont={"family": "monospace", "size": 14, "color": "#000000"},
            marker={
                "size": [2 * n.size for n in nodes],
                "color": [n.color for n in nodes],
                "line": {"color": "white", "width": 1},
            },
            customdata=[n.id for n in nodes],
            hovertext=hover_texts,
            hovertemplate="%{hovertext}<extra></extra>",
            name="Membres",
            showlegend=False,
        ))

    fig = go.Figure(
        data=traces,
        layout=go.Layout(
            title=title,
            showlegend=True,
            hovermode="closest",
            dragmode="pan",
            xaxis={"showgrid": False, "zeroline": False, "showticklabels": False},
            yaxis={"showgrid": False, "zeroline": False, "showticklabels": False,
                   "scaleanchor": "x", "scaleratio": 1},
            margin={"l": 20, "r": 20, "t": 60, "b": 20},
            paper_bgcolor="white",
            plot_bgcolor="white",
        ),
    )

    logger.info(
        "Plotly figure built: %d nodes, %d edges, %d traces.",
        len(store),
        store.number_of_edges(),
        len(traces),
    )
    return fig


def save_figure_html(fig: go.Figure, output_path: str, title: Optional[str] = None) -> None:
    """Write a Plotly figure to a self-contained HTML file."""
    if title:
        fig.update_layout(title=title)
    fig.write_html(output_path, include_plotlyjs="cdn")
    logger.info("Plotly figure saved to: %s", output_path)
