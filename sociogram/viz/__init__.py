"""
sociogram.viz — Presentation components over the GraphStore.

Modules:
    camera        — Camera state and time-based zoom/center animations.
    renderer      — Layered matplotlib drawing of the store.
    interaction   — Pointer state machine (drag, click, pan) + matplotlib binding.
    export        — Off-screen PNG export.
    plotly_graph  — Plotly HTML snapshot.
    dashboard     — Streamlit host page.
"""
