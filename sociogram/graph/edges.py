"""
sociogram/graph/edges.py — Edge Resolver: relationships → render edges.

Relationships are grouped by unordered member pair. A pair evaluated in one
direction renders as a single straight arrow; a pair evaluated both ways
renders as two arrows bowed to opposite sides so neither hides the other.

Curve offsets are expressed in the pair's canonical frame: the perpendicular
of the segment running from the lexicographically smaller id to the larger
one. The edge leaving the smaller id takes +curve_fraction and the reverse
edge takes -curve_fraction, so the two control points always land on opposite
sides of the segment.
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from sociogram.config import DEFAULT_CONFIG, SociogramConfig
from sociogram.models import Relationship
from sociogram.scoring import score_to_color

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderEdge:
    """
    One directed arrow to draw.

    Fields:
        source, target: Member ids; the arrow points at target.
        score:          The relationship score (arrow label).
        bidirectional:  True when the reverse direction is also drawn.
        curve_offset:   0.0 for straight arrows, ±curve_fraction otherwise.
        color:          Band color of the score.
        label:          str(score).
        timestamp:      Timestamp of the relationship that produced the edge.
    """
    source: str
    target: str
    score: int
    bidirectional: bool
    curve_offset: float
    color: str
    label: str
    timestamp: str = ""

    @property
    def pair_key(self) -> str:
        return "-".join(sorted((self.source, self.target)))

    @property
    def edge_type(self) -> str:
        return "curvedArrow" if self.bidirectional else "arrow"


def _latest_per_direction(
    pair_key: str,
    group: list[Relationship],
) -> list[Relationship]:
    """Keep the most recent relationship for each (source, target) direction."""
    by_direction: dict[tuple[str, str], list[Relationship]] = defaultdict(list)
    for rel in group:
        by_direction[(rel.source, rel.target)].append(rel)

    kept: list[Relationship] = []
    for direction, rels in by_direction.items():
        if len(rels) > 1:
            logger.warning(
                "Pair %s has %d relationships in direction %s->%s; keeping the most "
                "recent and dropping %d.",
                pair_key,
                len(rels),
                direction[0],
                direction[1],
                len(rels) - 1,
            )
        kept.append(max(rels, key=lambda r: r.recorded_at))
    return kept


def _make_edge(rel: Relationship, bidirectional: bool, curve_offset: float) -> RenderEdge:
    return RenderEdge(
        source=rel.source,
        target=rel.target,
        score=rel.score,
        bidirectional=bidirectional,
        curve_offset=curve_offset,
        color=score_to_color(rel.score),
        label=str(rel.score),
        timestamp=rel.timestamp,
    )


def resolve_edges(
    relationships: Iterable[Relationship],
    config: SociogramConfig = DEFAULT_CONFIG,
) -> list[RenderEdge]:
    """
    Classify every member pair as unidirectional or bidirectional.

    Algorithm (O(E)):
        1. Drop self-relationships (source == target) with a warning.
        2. Group by unordered pair key, preserving first-seen order.
        3. Within a pair keep the most recent relationship per direction
           (a data anomaly upstream if there is more than one).
        4. One direction  → one straight RenderEdge (curve_offset 0).
           Two directions → two RenderEdges with ±config.curve_fraction.

    Returns:
        RenderEdges in first-seen pair order. For any pair the number of
        edges equals the number of distinct directions present (1 or 2).
    """
    groups: dict[str, list[Relationship]] = {}
    for rel in relationships:
        if rel.source == rel.target:
            logger.warning(
                "Skipping self-evaluation on member '%s' (score %s).",
                rel.source,
                rel.score,
            )
            continue
        groups.setdefault(rel.pair_key, []).append(rel)

    edges: list[RenderEdge] = []
    for pair_key, group in groups.items():
        kept = _latest_per_direction(pair_key, group)

        if len(kept) == 1:
            edges.append(_make_edge(kept[0], bidirectional=False, curve_offset=0.0))
            continue

        for rel in sorted(kept, key=lambda r: r.source):
            # The edge leaving the smaller id bows to the positive side.
            sign = 1.0 if rel.source < rel.target else -1.0
            edges.append(_make_edge(rel, bidirectional=True, curve_offset=sign * config.curve_fraction))

    logger.debug(
        "Resolved %d relationships into %d render edges across %d pairs.",
        sum(len(g) for g in groups.values()),
        len(edges),
        len(groups),
    )
    return edges


def curve_control_point(
    p_source: tuple[float, float],
    p_target: tuple[float, float],
    edge: RenderEdge,
) -> tuple[float, float]:
    """
    Quadratic Bézier control point for `edge` drawn from p_source to p_target.

    control = midpoint + perpendicular_unit * curve_offset * segment_length,
    where the perpendicular is taken in the pair's canonical frame. Straight
    edges (and coincident endpoints) return the midpoint.
    """
    a = np.asarray(p_source, dtype=float)
    b = np.asarray(p_target, dtype=float)
    midpoint = (a + b) / 2.0
    if edge.curve_offset == 0.0:
        return float(midpoint[0]), float(midpoint[1])

    # Canonical frame: low id → high id.
    low, high = (a, b) if edge.source < edge.target else (b, a)
    delta = high - low
    length = float(math.hypot(delta[0], delta[1]))
    if length < 1e-12:
        return float(midpoint[0]), float(midpoint[1])

    perpendicular = np.array([-delta[1], delta[0]]) / length
    control = midpoint + perpendicular * edge.curve_offset * length
    return float(control[0]), float(control[1])


def bezier_points(
    p_source: tuple[float, float],
    p_target: tuple[float, float],
    edge: RenderEdge,
    samples: int = 24,
) -> np.ndarray:
    """Sample the edge's quadratic Bézier into a (samples, 2) array."""
    a = np.asarray(p_source, dtype=float)
    b = np.asarray(p_target, dtype=float)
    c = np.asarray(curve_control_point(p_source, p_target, edge), dtype=float)
    t = np.linspace(0.0, 1.0, samples)[:, None]
    return (1 - t) ** 2 * a + 2 * (1 - t) * t * c + t ** 2 * b
