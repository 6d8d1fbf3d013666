"""
sociogram/graph/store.py — Graph State Store: the live, positioned graph.

One GraphStore exists per mounted view. It owns a private NetworkX DiGraph
whose nodes carry {label, x, y, size, color} and whose edges carry the styling
of a RenderEdge. Collaborators (renderer, interaction controller, export) get
a handle to the store and read immutable GraphNode / GraphEdge snapshots; all
mutation goes through sync(), move_node(), hold()/release() and clear().

Position invariant:
    Once a node exists its x, y are only changed by move_node() (drag) or by a
    rebuild sync (filter change). A plain data refresh never moves a node.
"""

import logging
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

import networkx as nx
import numpy as np

from sociogram.config import DEFAULT_CONFIG, SociogramConfig
from sociogram.graph.edges import RenderEdge
from sociogram.models import Member, Relationship
from sociogram.scoring import SizePolicy, get_size_policy, node_color

logger = logging.getLogger(__name__)


class LayoutMode(str, Enum):
    SCATTER = "scatter"
    CIRCULAR = "circular"


@dataclass(frozen=True)
class GraphNode:
    id: str
    label: str
    x: float
    y: float
    size: float
    color: str


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    score: int
    label: str
    color: str
    size: float
    curve_offset: float
    bidirectional: bool
    edge_type: str

    def as_render_edge(self) -> RenderEdge:
        return RenderEdge(
            source=self.source,
            target=self.target,
            score=self.score,
            bidirectional=self.bidirectional,
            curve_offset=self.curve_offset,
            color=self.color,
            label=self.label,
        )


@dataclass(frozen=True)
class SyncReport:
    """Counts from one sync() call, for logging and tests."""
    added: int
    updated: int
    removed: int
    edges: int
    skipped_edges: int


def circular_positions(n: int, radius: float) -> list[tuple[float, float]]:
    """Even placement on a circle: angle = 2π·i/n."""
    if n <= 0:
        return []
    angles = 2 * math.pi * np.arange(n) / n
    return [(float(radius * math.cos(a)), float(radius * math.sin(a))) for a in angles]


class GraphStore:
    """
    Mutable graph shared by the diffing logic, renderer and interaction layer.

    Args:
        config:      SociogramConfig (placement extents, edge width, policy).
        size_policy: Optional callable overriding config.size_policy.
    """

    def __init__(
        self,
        config: SociogramConfig = DEFAULT_CONFIG,
        size_policy: Optional[SizePolicy] = None,
    ) -> None:
        self._config = config
        self._size_policy = size_policy or get_size_policy(config.size_policy)
        self._graph = nx.DiGraph()
        self._rng = random.Random(config.layout_seed)
        self._held: set[str] = set()

    # ── Read API ──────────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._graph

    def has_node(self, node_id: str) -> bool:
        return node_id in self._graph

    def node(self, node_id: str) -> GraphNode:
        """Snapshot of one node. Raises KeyError if absent."""
        data = self._graph.nodes[node_id]
        return GraphNode(
            id=node_id,
            label=data["label"],
            x=data["x"],
            y=data["y"],
            size=data["size"],
            color=data["color"],
        )

    def nodes(self) -> list[GraphNode]:
        return [self.node(n) for n in self._graph.nodes]

    def positions(self) -> dict[str, tuple[float, float]]:
        return {n: (d["x"], d["y"]) for n, d in self._graph.nodes(data=True)}

    def edges(self) -> list[GraphEdge]:
        return [self._edge(u, v, d) for u, v, d in self._graph.edges(data=True)]

    def edges_between(self, a: str, b: str) -> list[GraphEdge]:
        """Edges between an unordered pair (0, 1 or 2)."""
        found = []
        for u, v in ((a, b), (b, a)):
            if self._graph.has_edge(u, v):
                found.append(self._edge(u, v, self._graph.edges[u, v]))
        return found

    def number_of_edges(self) -> int:
        return self._graph.number_of_edges()

    def bounds(self) -> Optional[tuple[float, float, float, float]]:
        """(min_x, min_y, max_x, max_y) over all nodes, or None when empty."""
        if not len(self):
            return None
        xs = [d["x"] for _, d in self._graph.nodes(data=True)]
        ys = [d["y"] for _, d in self._graph.nodes(data=True)]
        return min(xs), min(ys), max(xs), max(ys)

    def is_held(self, node_id: str) -> bool:
        return node_id in self._held

    @staticmethod
    def _edge(u: str, v: str, data: dict) -> GraphEdge:
        return GraphEdge(
            source=u,
            target=v,
            score=data["score"],
            label=data["label"],
            color=data["color"],
            size=data["size"],
            curve_offset=data["curve_offset"],
            bidirectional=data["bidirectional"],
            edge_type=data["type"],
        )

    # ── Mutation ──────────────────────────────────────────────────────────────

    def _initial_positions(
        self,
        members: Sequence[Member],
        layout: LayoutMode,
    ) -> dict[str, tuple[float, float]]:
        if layout == LayoutMode.CIRCULAR:
            ring = circular_positions(len(members), self._config.circle_radius)
            return {m.id: pos for m, pos in zip(members, ring)}
        extent = self._config.scatter_extent
        return {
            m.id: (self._rng.uniform(-extent, extent), self._rng.uniform(-extent, extent))
            for m in members
        }

    def sync(
        self,
        members: Sequence[Member],
        render_edges: Iterable[RenderEdge],
        base_size: float,
        relationships: Sequence[Relationship] = (),
        layout: LayoutMode = LayoutMode.SCATTER,
        rebuild: bool = False,
    ) -> SyncReport:
        """
        Diff the store against the incoming members and redraw all edges.

        Node diff:
            - absent from `members`  → removed (and released if held)
            - present in store       → label/size/color updated in place
            - new                    → added at its x,y hint, else at a
                                       position from `layout`
        With rebuild=True every surviving node is re-placed by `layout`
        (used after a filter change), except nodes held by a drag.

        Edge sync:
            All edges cleared, one edge inserted per RenderEdge. An edge whose
            endpoint is not in the store is logged and skipped.

        Args:
            members:       Members to display (already filtered).
            render_edges:  Output of resolve_edges().
            base_size:     Node-size control value.
            relationships: Relationships feeding the Score Model.
            layout:        Placement for new (or rebuilt) nodes.
            rebuild:       Re-place existing nodes too.

        Returns:
            SyncReport with added/updated/removed/edge counts.
        """
        incoming_ids = {m.id for m in members}

        removed = [n for n in self._graph.nodes if n not in incoming_ids]
        self._graph.remove_nodes_from(removed)
        self._held.difference_update(removed)

        if rebuild:
            placed = self._initial_positions(members, layout)
        else:
            placed = self._initial_positions(
                [m for m in members if m.id not in self._graph and not m.has_position],
                layout,
            )

        added = updated = 0
        for member in members:
            size = self._size_policy(base_size, member.id, relationships)
            color = node_color(member.id, relationships)
            if member.id in self._graph:
                attrs = self._graph.nodes[member.id]
                attrs.update(label=member.label, size=size, color=color)
                if rebuild and member.id not in self._held:
                    attrs["x"], attrs["y"] = placed[member.id]
                updated += 1
            else:
                if member.has_position and not rebuild:
                    x, y = member.x, member.y
                else:
                    x, y = placed[member.id]
                self._graph.add_node(
                    member.id, label=member.label, x=x, y=y, size=size, color=color,
                )
                added += 1

        edge_count, skipped = self._sync_edges(render_edges)

        report = SyncReport(
            added=added,
            updated=updated,
            removed=len(removed),
            edges=edge_count,
            skipped_edges=skipped,
        )
        logger.debug(
            "Store sync (%s%s): +%d ~%d -%d nodes, %d edges (%d skipped).",
            layout.value,
            ", rebuild" if rebuild else "",
            report.added,
            report.updated,
            report.removed,
            report.edges,
            report.skipped_edges,
        )
        return report

    def _sync_edges(self, render_edges: Iterable[RenderEdge]) -> tuple[int, int]:
        self._graph.remove_edges_from(list(self._graph.edges))
        count = skipped = 0
        for edge in render_edges:
            if edge.source not in self._graph or edge.target not in self._graph:
                logger.warning(
                    "Cannot add edge %s->%s: endpoint not in graph; skipping.",
                    edge.source,
                    edge.target,
                )
                skipped += 1
                continue
            self._graph.add_edge(
                edge.source,
                edge.target,
                score=edge.score,
                label=edge.label,
                color=edge.color,
                size=self._config.edge_width,
                curve_offset=edge.curve_offset,
                bidirectional=edge.bidirectional,
                type=edge.edge_type,
            )
            count += 1
        return count, skipped

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        """Set a node's position. Returns False (and logs) if the node is gone."""
        if node_id not in self._graph:
            logger.warning("move_node: node '%s' not in graph; ignoring.", node_id)
            return False
        attrs = self._graph.nodes[node_id]
        attrs["x"] = float(x)
        attrs["y"] = float(y)
        return True

    def hold(self, node_id: str) -> None:
        """Mark a node as being dragged; rebuilds will not re-place it."""
        if node_id in self._graph:
            self._held.add(node_id)

    def release(self, node_id: str) -> None:
        self._held.discard(node_id)

    def clear(self) -> None:
        """Drop every node and edge (view teardown)."""
        self._graph.clear()
        self._held.clear()
