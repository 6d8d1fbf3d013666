"""
sociogram/tests/test_plotly_graph.py — Tests for the Plotly snapshot.

Tests verify:
- One line trace per score band present, plus edge labels and a node trace.
- Node trace carries member ids and store positions (drags included).
- Empty store still yields a valid figure.
"""

from sociogram.scoring import SCORE_BANDS
from sociogram.viz.plotly_graph import build_plotly_figure, save_figure_html


def traces_by_name(fig):
    return {t.name: t for t in fig.data if t.name}


def test_one_trace_per_band(view, relationships):
    fig = build_plotly_figure(view.store, relationships)
    names = set(traces_by_name(fig))
    # Scores used: 0, 1, 2, 3, 4.
    for band in SCORE_BANDS:
        assert f"{band.title} ({band.level})" in names
    assert "Membres" in names


def test_node_trace_uses_store_positions(view, relationships):
    view.store.move_node("alice", 2.5, -1.0)
    fig = build_plotly_figure(view.store, relationships)
    nodes = traces_by_name(fig)["Membres"]
    ids = list(nodes.customdata)
    i = ids.index("alice")
    assert (nodes.x[i], nodes.y[i]) == (2.5, -1.0)
    assert "Score moyen reçu: 4.00" in nodes.hovertext[i]


def test_edge_labels_trace(view, relationships):
    fig = build_plotly_figure(view.store, relationships)
    text_traces = [t for t in fig.data if t.mode == "text"]
    assert len(text_traces) == 1
    assert sorted(text_traces[0].text) == ["0", "1", "2", "3", "4"]


def test_empty_store(view):
    view.update([], [])
    fig = build_plotly_figure(view.store)
    assert len(fig.data) == 0


def test_save_figure_html(view, relationships, tmp_path):
    fig = build_plotly_figure(view.store, relationships)
    out = tmp_path / "graph.html"
    save_figure_html(fig, str(out), title="Équipe")
    assert out.exists()
    assert fig.layout.title.text == "Équipe"
