"""
sociogram/tests/test_filters.py — Tests for the Filter Engine.

Tests verify:
- Empty (or None) queries are the identity; whitespace is a real query.
- A name match pulls in direct neighbors in either direction.
- Only relationships touching a matched member survive a name filter.
- Department narrowing keeps relationships with both endpoints inside.
- No match yields an empty result rather than an error.
"""

from sociogram.graph.filters import build_member_graph, filter_graph, list_departments
from sociogram.models import Member, Relationship


def ids(members) -> set[str]:
    return {m.id for m in members}


def pairs(relationships) -> set[tuple[str, str]]:
    return {(r.source, r.target) for r in relationships}


# ── Identity ──────────────────────────────────────────────────────────────────

def test_empty_queries_return_everything(members, relationships):
    out_members, out_rels = filter_graph(members, relationships, "", "")
    assert out_members == members
    assert out_rels == relationships


def test_none_queries_are_empty(members, relationships):
    out_members, out_rels = filter_graph(members, relationships, None, None)
    assert out_members == members
    assert out_rels == relationships


def test_whitespace_name_query_is_applied(members, relationships):
    """No label contains three spaces, so nothing matches."""
    assert filter_graph(members, relationships, "   ", "") == ([], [])


def test_single_space_matches_labels_containing_a_space(members, relationships):
    out_members, _ = filter_graph(members, relationships, " ", "")
    assert ids(out_members) == {"alice", "bob", "carol", "dave"}


# ── Name filter ───────────────────────────────────────────────────────────────

def test_alice_brings_bob_not_carol(members, relationships):
    out_members, out_rels = filter_graph(members, relationships, "alice")
    assert ids(out_members) == {"alice", "bob"}
    assert pairs(out_rels) == {("alice", "bob"), ("bob", "alice")}


def test_neighbor_edges_excluded_even_when_neighbor_is_shown(members, relationships):
    """Carol matched → bob and dave are neighbors, but dave→bob is not shown."""
    out_members, out_rels = filter_graph(members, relationships, "carol")
    assert ids(out_members) == {"carol", "bob", "dave"}
    assert ("dave", "bob") not in pairs(out_rels)
    assert pairs(out_rels) == {("bob", "carol"), ("carol", "dave")}


def test_name_match_is_case_insensitive_substring(members, relationships):
    out_members, _ = filter_graph(members, relationships, "MARTIN")
    assert "alice" in ids(out_members)


def test_incoming_neighbor_is_included(members, relationships):
    """dave → bob makes dave a neighbor of bob even though bob never scored dave."""
    out_members, _ = filter_graph(members, relationships, "bob")
    assert "dave" in ids(out_members)


def test_no_match_is_empty(members, relationships):
    assert filter_graph(members, relationships, "zoé") == ([], [])


def test_multiple_matches_union(members, relationships):
    # "ro" matches "Carol" and "Leroy".
    out_members, out_rels = filter_graph(members, relationships, "ro")
    assert ids(out_members) == {"carol", "dave", "bob"}
    assert pairs(out_rels) == {("bob", "carol"), ("carol", "dave"), ("dave", "bob")}


# ── Department filter ─────────────────────────────────────────────────────────

def test_department_alone(members, relationships):
    out_members, out_rels = filter_graph(members, relationships, "", "Commercial")
    assert ids(out_members) == {"carol", "dave"}
    assert pairs(out_rels) == {("carol", "dave")}


def test_name_then_department_narrows(members, relationships):
    out_members, out_rels = filter_graph(members, relationships, "carol", "Commercial")
    assert ids(out_members) == {"carol", "dave"}
    assert pairs(out_rels) == {("carol", "dave")}


def test_department_with_no_members(members, relationships):
    assert filter_graph(members, relationships, "", "Finance") == ([], [])


# ── Helpers ───────────────────────────────────────────────────────────────────

def test_member_graph_ignores_unknown_endpoints():
    G = build_member_graph(
        [Member("a", "A"), Member("b", "B")],
        [Relationship("a", "b", 3), Relationship("a", "ghost", 1)],
    )
    assert set(G.nodes) == {"a", "b"}
    assert list(G.edges) == [("a", "b")]


def test_list_departments_sorted_and_distinct(members):
    assert list_departments(members) == ["Commercial", "R&D"]
