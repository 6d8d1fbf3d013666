"""
sociogram/graph/filters.py — Filter Engine: name/department induced subgraph.

A name query selects the matched members' ego network: the matches, every
member directly connected to a match (either direction), and only the
relationships touching a match. Relationships among the neighbors themselves
are deliberately left out so the ego network is not flooded.

A department query narrows whatever the name step produced to one department,
keeping only relationships whose two endpoints both survive.
"""

import logging
from typing import Sequence

import networkx as nx

from sociogram.models import Member, Relationship

logger = logging.getLogger(__name__)


def _normalise(query: str | None) -> str:
    return query or ""


def build_member_graph(
    members: Sequence[Member],
    relationships: Sequence[Relationship],
) -> nx.DiGraph:
    """
    Build a DiGraph of members with one edge per relationship.

    Relationships naming an unknown member are not added here; the Graph
    State Store reports them when it tries to draw them.
    """
    G = nx.DiGraph()
    for member in members:
        G.add_node(member.id, department=member.department, label=member.label)
    for rel in relationships:
        if rel.source in G and rel.target in G:
            G.add_edge(rel.source, rel.target, score=rel.score)
    return G


def filter_graph(
    members: Sequence[Member],
    relationships: Sequence[Relationship],
    name_query: str | None = "",
    department_query: str | None = "",
) -> tuple[list[Member], list[Relationship]]:
    """
    Compute the members and relationships to display for the current filters.

    Algorithm:
        1. Both queries empty → identity.
        2. name_query set:
             matched  = members whose label contains the query (case-insensitive)
             nodes    = matched ∪ direct neighbors of matched (either direction)
             edges    = relationships with at least one endpoint in matched
        3. department_query set:
             nodes    = nodes from step 2 (or all) with department == query
             edges    = edges from step 2 (or all) with both endpoints in nodes

    Args:
        members:          Full member snapshot.
        relationships:    Full relationship snapshot.
        name_query:       Substring to look for in member labels.
        department_query: Exact department name.

    Returns:
        (members, relationships) — lists preserving input order. No match
        yields two empty lists.
    """
    name = _normalise(name_query)
    department = _normalise(department_query)

    if not name and not department:
        return list(members), list(relationships)

    kept_members = list(members)
    kept_relationships = list(relationships)

    if name:
        needle = name.casefold()
        matched = {m.id for m in members if needle in m.label.casefold()}

        G = build_member_graph(members, relationships)
        neighborhood = set(matched)
        for member_id in matched:
            neighborhood.update(G.successors(member_id))
            neighborhood.update(G.predecessors(member_id))

        kept_members = [m for m in members if m.id in neighborhood]
        kept_relationships = [
            r for r in relationships
            if r.source in matched or r.target in matched
        ]
        logger.debug(
            "Name filter '%s': %d matched, %d in neighborhood, %d relationships.",
            name,
            len(matched),
            len(neighborhood),
            len(kept_relationships),
        )

    if department:
        kept_members = [m for m in kept_members if m.department == department]
        kept_ids = {m.id for m in kept_members}
        kept_relationships = [
            r for r in kept_relationships
            if r.source in kept_ids and r.target in kept_ids
        ]
        logger.debug(
            "Department filter '%s': %d members, %d relationships.",
            department,
            len(kept_members),
            len(kept_relationships),
        )

    return kept_members, kept_relationships


def list_departments(members: Sequence[Member]) -> list[str]:
    """Sorted distinct non-empty departments, for the department selector."""
    return sorted({m.department for m in members if m.department})
