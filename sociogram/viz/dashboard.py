"""
sociogram/viz/dashboard.py — Streamlit host page for the sociogram view.

A thin surrounding application: it owns the filter/size controls and the
evaluation request, and mounts one SociogramView per browser session.

Layout:
    Sidebar   name filter, department selector, node size (5–20),
              zoom in / zoom out / center, PNG export
    Main      "Graphe" tab (rendered view) and "Interactif" tab (Plotly)

Usage:
    streamlit run sociogram/viz/dashboard.py -- path/to/team.json

Streamlit cannot deliver clicks on a static image, so evaluation requests go
through a member selector that calls the same on_evaluate callback.
"""

import logging
import math
import sys

import streamlit as st

from sociogram.graph.filters import list_departments
from sociogram.models import load_dataset
from sociogram.view import SociogramView
from sociogram.viz.plotly_graph import build_plotly_figure

logger = logging.getLogger(__name__)

_ALL_DEPARTMENTS = "Tous les départements"


def _request_evaluation(member_id: str) -> None:
    st.session_state["evaluation_request"] = member_id


def _get_view() -> SociogramView:
    if "sociogram_view" not in st.session_state:
        st.session_state["sociogram_view"] = SociogramView(on_evaluate=_request_evaluation)
    return st.session_state["sociogram_view"]


def run_dashboard(dataset_path: str) -> None:
    """
    Render the page for the dataset at `dataset_path`.

    Args:
        dataset_path: JSON snapshot {"nodes": [...], "edges": [...]}.
    """
    st.set_page_config(page_title="Sociogramme", layout="wide")
    st.title("Sociogramme de collaboration")

    members, relationships = load_dataset(dataset_path)
    view = _get_view()

    # ── Controls ──────────────────────────────────────────────────────────────
    name_filter = st.sidebar.text_input("Rechercher un membre")
    department = st.sidebar.selectbox(
        "Département", [_ALL_DEPARTMENTS] + list_departments(members),
    )
    node_size = st.sidebar.slider(
        "Taille des nœuds",
        min_value=int(view.config.min_node_size),
        max_value=int(view.config.max_node_size),
        value=int(view.config.base_node_size),
        step=1,
    )

    view.update(
        members,
        relationships,
        name_filter=name_filter,
        department_filter="" if department == _ALL_DEPARTMENTS else department,
        base_size=node_size,
    )

    col1, col2, col3 = st.sidebar.columns(3)
    if col1.button("＋"):
        view.zoom_in()
    if col2.button("－"):
        view.zoom_out()
    if col3.button("⌖"):
        view.center()
    # A static page shows the end state of the camera animation.
    view.renderer.step(now=math.inf)

    # ── Evaluation request ────────────────────────────────────────────────────
    shown = {n.id: n.label for n in view.store.nodes()}
    if shown:
        target = st.sidebar.selectbox("Évaluer", list(shown), format_func=shown.get)
        if st.sidebar.button("Évaluer la collaboration"):
            _request_evaluation(target)
    requested = st.session_state.get("evaluation_request")
    if requested:
        st.info(f"Évaluation demandée pour : {shown.get(requested, requested)}")

    # ── Main area ─────────────────────────────────────────────────────────────
    image = view.export_image()
    tab_graph, tab_interactive = st.tabs(["Graphe", "Interactif"])
    with tab_graph:
        if image is None:
            st.warning("Le rendu hors écran est indisponible.")
        else:
            st.image(image.data)
            st.sidebar.download_button(
                "Exporter en PNG", data=image.data, file_name=image.filename, mime="image/png",
            )
    with tab_interactive:
        st.plotly_chart(build_plotly_figure(view.store, relationships), use_container_width=True)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        sys.exit("usage: streamlit run sociogram/viz/dashboard.py -- DATASET.json")
    run_dashboard(sys.argv[1])
