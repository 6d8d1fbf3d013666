"""
sociogram/tests/test_store.py — Tests for the Graph State Store.

Tests verify:
- New nodes use their x,y hint, else scatter / circular placement.
- Re-running sync with unchanged input leaves positions and edges unchanged.
- A data refresh never moves an existing node; size/color/label update in place.
- Absent nodes are removed; edges to unknown nodes are skipped, not raised.
- Rebuild re-places nodes on a circle except those held by a drag.
"""

import logging
import math

import pytest

from sociogram.config import DEFAULT_CONFIG
from sociogram.graph.edges import resolve_edges
from sociogram.graph.store import GraphStore, LayoutMode, circular_positions
from sociogram.models import Member, Relationship
from sociogram.scoring import SCORE_BANDS


def unplaced(*ids: str) -> list[Member]:
    return [Member(i, i.title(), "", "Team") for i in ids]


def sync(store, members, relationships=(), **kwargs):
    return store.sync(members, resolve_edges(relationships), 10.0, relationships=relationships, **kwargs)


# ── Node creation ─────────────────────────────────────────────────────────────

def test_hint_position_used_for_new_node(members, relationships):
    store = GraphStore()
    sync(store, members, relationships)
    assert (store.node("alice").x, store.node("alice").y) == (-3.0, 0.0)


def test_scatter_positions_inside_box():
    store = GraphStore()
    sync(store, unplaced("a", "b", "c", "d"))
    extent = DEFAULT_CONFIG.scatter_extent
    for node in store.nodes():
        assert -extent <= node.x <= extent
        assert -extent <= node.y <= extent


def test_scatter_is_seeded():
    a, b = GraphStore(), GraphStore()
    sync(a, unplaced("a", "b", "c"))
    sync(b, unplaced("a", "b", "c"))
    assert a.positions() == b.positions()


def test_circular_positions_even_angles():
    ring = circular_positions(4, 5.0)
    assert ring[0] == pytest.approx((5.0, 0.0))
    assert ring[1] == pytest.approx((0.0, 5.0), abs=1e-9)
    assert ring[2] == pytest.approx((-5.0, 0.0), abs=1e-9)
    for x, y in ring:
        assert math.hypot(x, y) == pytest.approx(5.0)
    assert circular_positions(0, 5.0) == []


def test_circular_layout_for_new_nodes():
    store = GraphStore()
    sync(store, unplaced("a", "b", "c", "d"), layout=LayoutMode.CIRCULAR)
    assert store.positions()["a"] == pytest.approx((DEFAULT_CONFIG.circle_radius, 0.0))


# ── Idempotence and position preservation ─────────────────────────────────────

def test_sync_twice_keeps_positions_and_edges():
    store = GraphStore()
    rels = [Relationship("a", "b", 2), Relationship("b", "a", 4), Relationship("b", "c", 1)]
    sync(store, unplaced("a", "b", "c"), rels)
    positions = store.positions()
    edges = store.edges()

    report = sync(store, unplaced("a", "b", "c"), rels)

    assert store.positions() == positions
    assert store.edges() == edges
    assert report.added == 0 and report.removed == 0 and report.updated == 3


def test_refresh_updates_visuals_but_not_position():
    store = GraphStore()
    sync(store, unplaced("a", "b"))
    before = store.node("b")

    renamed = [Member("a", "A"), Member("b", "Bea", x=99.0, y=99.0)]
    sync(store, renamed, [Relationship("a", "b", 4)])
    after = store.node("b")

    assert (after.x, after.y) == (before.x, before.y)
    assert after.label == "Bea"
    assert after.color == SCORE_BANDS[4].color
    assert after.size == pytest.approx(30.0)


def test_moved_node_survives_refresh():
    store = GraphStore()
    sync(store, unplaced("a", "b"))
    assert store.move_node("a", 1.5, -2.5)
    sync(store, unplaced("a", "b"))
    assert store.positions()["a"] == (1.5, -2.5)


def test_new_node_added_without_moving_others():
    store = GraphStore()
    sync(store, unplaced("a", "b"))
    positions = store.positions()
    report = sync(store, unplaced("a", "b", "c"))
    assert report.added == 1
    assert {k: store.positions()[k] for k in positions} == positions


# ── Removal and edges ─────────────────────────────────────────────────────────

def test_absent_nodes_removed_with_their_edges():
    store = GraphStore()
    sync(store, unplaced("a", "b"), [Relationship("a", "b", 3)])
    report = sync(store, unplaced("a"))
    assert report.removed == 1
    assert "b" not in store
    assert store.number_of_edges() == 0


def test_edge_to_unknown_node_is_skipped(caplog):
    store = GraphStore()
    with caplog.at_level(logging.WARNING, logger="sociogram.graph.store"):
        report = sync(store, unplaced("a"), [Relationship("a", "ghost", 3)])
    assert report.skipped_edges == 1
    assert store.number_of_edges() == 0
    assert "endpoint not in graph" in caplog.text


def test_bidirectional_pair_stored_as_two_edges():
    store = GraphStore()
    sync(store, unplaced("a", "b"), [Relationship("a", "b", 2), Relationship("b", "a", 4)])
    between = store.edges_between("a", "b")
    assert len(between) == 2
    assert {e.edge_type for e in between} == {"curvedArrow"}
    assert sorted(e.curve_offset for e in between) == [-0.2, 0.2]


def test_edges_recomputed_every_sync():
    store = GraphStore()
    sync(store, unplaced("a", "b"), [Relationship("a", "b", 2), Relationship("b", "a", 4)])
    sync(store, unplaced("a", "b"), [Relationship("a", "b", 1)])
    between = store.edges_between("a", "b")
    assert len(between) == 1
    assert between[0].curve_offset == 0.0
    assert between[0].label == "1"


def test_move_missing_node_returns_false():
    store = GraphStore()
    assert store.move_node("nobody", 0.0, 0.0) is False


# ── Rebuild and drag hold ─────────────────────────────────────────────────────

def test_rebuild_places_on_circle():
    store = GraphStore()
    sync(store, unplaced("a", "b"))
    sync(store, unplaced("a", "b"), layout=LayoutMode.CIRCULAR, rebuild=True)
    positions = store.positions()
    r = DEFAULT_CONFIG.circle_radius
    assert positions["a"] == pytest.approx((r, 0.0))
    assert positions["b"] == pytest.approx((-r, 0.0), abs=1e-9)


def test_rebuild_keeps_held_node():
    store = GraphStore()
    sync(store, unplaced("a", "b"))
    store.move_node("a", 7.0, 7.0)
    store.hold("a")
    sync(store, unplaced("a", "b"), layout=LayoutMode.CIRCULAR, rebuild=True)
    assert store.positions()["a"] == (7.0, 7.0)
    store.release("a")
    assert not store.is_held("a")


def test_removing_held_node_releases_it():
    store = GraphStore()
    sync(store, unplaced("a", "b"))
    store.hold("a")
    sync(store, unplaced("b"))
    assert not store.is_held("a")


def test_bounds_and_clear():
    store = GraphStore()
    assert store.bounds() is None
    sync(store, [Member("a", "A", x=-1.0, y=2.0), Member("b", "B", x=3.0, y=-4.0)])
    assert store.bounds() == (-1.0, -4.0, 3.0, 2.0)
    store.clear()
    assert len(store) == 0


def test_custom_size_policy_injected():
    store = GraphStore(size_policy=lambda base, member_id, rels: base * 2)
    sync(store, unplaced("a"))
    assert store.node("a").size == 20.0
