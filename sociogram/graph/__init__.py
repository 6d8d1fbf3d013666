"""
sociogram.graph — Data-side engine: filtering, edge resolution, live store.

Modules:
    filters  — filter_graph(): name match + one-hop expansion, department narrowing.
    edges    — resolve_edges(): one straight or two curved arrows per member pair.
    store    — GraphStore: NetworkX-backed positioned graph, diffed on every update.
"""
