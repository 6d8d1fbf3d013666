"""
sociogram — Collaboration graph synchronization and rendering engine.

Turns an externally owned snapshot of team members and scored, directed
collaboration evaluations into a live, positioned, interactive graph.

Modules:
    scoring          — Score Model: incoming scores → node color and size.
    graph.filters    — Filter Engine: name/department ego-network filtering.
    graph.edges      — Edge Resolver: bidirectional pair disambiguation.
    graph.store      — Graph State Store: position-preserving diff sync.
    viz.renderer     — matplotlib renderer and camera mapping.
    viz.interaction  — drag / click / pan state machine.
    viz.export       — off-screen PNG export with legend strip and watermark.
    view             — SociogramView, the handle the host application holds.
"""

__version__ = "0.1.0"
