"""
sociogram/tests/conftest.py — Shared pytest fixtures for the sociogram test suite.

The team fixture is small and fully positioned (every member carries an x, y
hint) so that interaction tests can aim the pointer at known screen points.

Fixtures:
    members        — four members across two departments.
    relationships  — one bidirectional pair, three one-way evaluations.
    fake_clock     — controllable monotonic clock for camera animations.
    view           — SociogramView already synced with the team.
    dataset_path   — the team written to a JSON snapshot on disk.
"""

import json

import matplotlib

matplotlib.use("Agg")

import pytest

from sociogram.models import Member, Relationship
from sociogram.view import SociogramView


# ── Team data ─────────────────────────────────────────────────────────────────

def make_members() -> list[Member]:
    return [
        Member("alice", "Alice Martin", "Développeuse", "R&D", x=-3.0, y=0.0),
        Member("bob", "Bob Durand", "Designer", "R&D", x=3.0, y=0.0),
        Member("carol", "Carol Petit", "Commerciale", "Commercial", x=0.0, y=3.0),
        Member("dave", "Dave Leroy", "Manager", "Commercial", x=0.0, y=-3.0),
    ]


def make_relationships() -> list[Relationship]:
    return [
        Relationship("alice", "bob", 2, "outgoing", "2026-01-05T09:00:00Z"),
        Relationship("bob", "alice", 4, "outgoing", "2026-01-06T09:00:00Z"),
        Relationship("bob", "carol", 3, "outgoing", "2026-01-07T09:00:00Z"),
        Relationship("carol", "dave", 1, "outgoing", "2026-01-08T09:00:00Z"),
        Relationship("dave", "bob", 0, "outgoing", "2026-01-09T09:00:00Z"),
    ]


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def members() -> list[Member]:
    return make_members()


@pytest.fixture
def relationships() -> list[Relationship]:
    return make_relationships()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def evaluations() -> list[str]:
    """Collects member ids passed to on_evaluate."""
    return []


@pytest.fixture
def view(members, relationships, fake_clock, evaluations) -> SociogramView:
    v = SociogramView(on_evaluate=evaluations.append, clock=fake_clock)
    v.update(members, relationships)
    yield v
    v.close()


@pytest.fixture
def dataset_path(tmp_path, members, relationships) -> str:
    payload = {
        "nodes": [
            {"id": m.id, "label": m.label, "role": m.role, "department": m.department}
            for m in members
        ],
        "edges": [
            {
                "source": r.source,
                "target": r.target,
                "score": r.score,
                "direction": r.direction,
                "timestamp": r.timestamp,
            }
            for r in relationships
        ],
    }
    path = tmp_path / "team.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)
