"""
sociogram/models.py — Read-only input records consumed by the engine.

Members and relationships are owned by the surrounding application (CRUD,
authentication, score forms). The engine receives an immutable snapshot of
both on every data change and never writes back.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

DIRECTIONS = ("outgoing", "incoming")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class Member:
    """
    A team member (graph node source record).

    Fields:
        id:         Unique, stable identifier.
        label:      Display name; the name filter matches against it.
        role:       Free-text role.
        department: Department name; the department filter matches it exactly.
        x, y:       Optional layout hint, used only when the node is first seen.
    """
    id: str
    label: str
    role: str = ""
    department: str = ""
    x: Optional[float] = None
    y: Optional[float] = None

    @property
    def has_position(self) -> bool:
        return self.x is not None and self.y is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Member":
        member_id = data.get("id")
        if member_id is None or str(member_id) == "":
            raise ValueError(f"Member record without id: {data!r}")
        x = data.get("x")
        y = data.get("y")
        return cls(
            id=str(member_id),
            label=str(data.get("label", member_id)),
            role=str(data.get("role", "")),
            department=str(data.get("department", "")),
            x=float(x) if x is not None else None,
            y=float(y) if y is not None else None,
        )


@dataclass(frozen=True)
class Relationship:
    """
    A directed, scored evaluation: `source` evaluating collaboration with `target`.

    Fields:
        source:    Evaluating member id.
        target:    Evaluated member id.
        score:     Integer 0..4 (not validated; colors clamp out-of-range).
        direction: 'outgoing' | 'incoming', as recorded upstream.
        timestamp: ISO-8601 string of when the evaluation was recorded.
    """
    source: str
    target: str
    score: int
    direction: str = "outgoing"
    timestamp: str = ""

    @property
    def pair_key(self) -> str:
        """Unordered pair key: both ids sorted and joined."""
        return "-".join(sorted((self.source, self.target)))

    @property
    def recorded_at(self) -> datetime:
        """Parsed timestamp (timezone-aware); unparsable values sort first."""
        if not self.timestamp:
            return _EPOCH
        try:
            parsed = datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
        except ValueError:
            logger.warning(
                "Unparsable timestamp '%s' on relationship %s->%s; treating as oldest.",
                self.timestamp,
                self.source,
                self.target,
            )
            return _EPOCH
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Relationship":
        try:
            source = data["source"]
            target = data["target"]
            score = data["score"]
        except KeyError as exc:
            raise ValueError(f"Relationship record missing {exc.args[0]!r}: {data!r}") from exc
        if isinstance(score, float) and not score.is_integer():
            raise ValueError(f"Relationship score must be an integer, got {score!r}")
        direction = str(data.get("direction", "outgoing"))
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown relationship direction {direction!r}")
        return cls(
            source=str(source),
            target=str(target),
            score=int(score),
            direction=direction,
            timestamp=str(data.get("timestamp", "")),
        )


@dataclass(frozen=True)
class ScoreBand:
    """One of the five collaboration-quality levels and its visual encoding."""
    level: int
    color: str
    title: str
    description: str = ""


def load_dataset(path: str) -> tuple[list[Member], list[Relationship]]:
    """
    Load a JSON snapshot of the form {"nodes": [...], "edges": [...]}.

    Malformed records are skipped with a warning so that one bad row does not
    hide the rest of the team.

    Args:
        path: Path to the JSON file.

    Returns:
        (members, relationships) in file order.
    """
    with open(path, encoding="utf-8") as fh:
        payload = json.load(fh)

    members: list[Member] = []
    for raw in payload.get("nodes", []):
        try:
            members.append(Member.from_dict(raw))
        except (ValueError, TypeError) as exc:
            logger.warning("Skipping member record: %s", exc)

    relationships: list[Relationship] = []
    for raw in payload.get("edges", []):
        try:
            relationships.append(Relationship.from_dict(raw))
        except (ValueError, TypeError) as exc:
            logger.warning("Skipping relationship record: %s", exc)

    logger.info(
        "Loaded dataset %s: %d members, %d relationships.",
        path,
        len(members),
        len(relationships),
    )
    return members, relationships
