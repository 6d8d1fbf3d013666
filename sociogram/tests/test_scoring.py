"""
sociogram/tests/test_scoring.py — Tests for the Score Model.

Tests verify:
- Average incoming score uses only relationships targeting the member.
- No incoming evaluations → 0.0, never NaN.
- Node color rounds the average up to the next band; 0 stays at band 0.
- score_to_color is total: out-of-range and NaN inputs clamp.
- Every size policy is monotone and leaves isolated nodes at base size.
"""

import math

import pytest

from sociogram.models import Relationship
from sociogram.scoring import (
    SCORE_BANDS,
    SIZE_POLICIES,
    average_incoming_score,
    evaluation_count_size,
    flat_size,
    get_size_policy,
    node_color,
    score_band,
    score_to_color,
    score_weighted_size,
)


def rel(source: str, target: str, score: int) -> Relationship:
    return Relationship(source, target, score, "outgoing", "2026-01-01T00:00:00Z")


# ── average_incoming_score ────────────────────────────────────────────────────

def test_average_of_empty_is_zero():
    assert average_incoming_score("anyone", []) == 0.0


def test_average_with_only_outgoing_is_zero():
    avg = average_incoming_score("alice", [rel("alice", "bob", 4)])
    assert avg == 0.0
    assert not math.isnan(avg)


def test_average_uses_incoming_only():
    rels = [rel("bob", "alice", 4), rel("carol", "alice", 1), rel("alice", "bob", 0)]
    assert average_incoming_score("alice", rels) == pytest.approx(2.5)


# ── Colors ────────────────────────────────────────────────────────────────────

def test_band_colors_match_scale():
    assert [b.color for b in SCORE_BANDS] == ["#DF7373", "#FA9500", "#5FA8D3", "#415D43", "#111D13"]
    assert [b.level for b in SCORE_BANDS] == [0, 1, 2, 3, 4]


def test_node_color_rounds_up():
    rels = [rel("bob", "alice", 2), rel("carol", "alice", 1)]  # avg 1.5
    assert node_color("alice", rels) == SCORE_BANDS[2].color


def test_node_color_small_positive_average_goes_to_band_one():
    rels = [rel("bob", "alice", 1), rel("carol", "alice", 0), rel("dave", "alice", 0)]
    assert node_color("alice", rels) == SCORE_BANDS[1].color


def test_node_color_zero_stays_band_zero():
    assert node_color("alice", []) == SCORE_BANDS[0].color
    assert node_color("alice", [rel("bob", "alice", 0)]) == SCORE_BANDS[0].color


@pytest.mark.parametrize("score,level", [(-3, 0), (0, 0), (0.01, 1), (3.2, 4), (4, 4), (17, 4)])
def test_score_band_clamps(score, level):
    assert score_band(score).level == level


def test_score_to_color_handles_non_finite():
    assert score_to_color(float("nan")) == SCORE_BANDS[0].color
    assert score_to_color(float("inf")) == SCORE_BANDS[4].color
    assert score_to_color(float("-inf")) == SCORE_BANDS[0].color


# ── Size policies ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize("policy", list(SIZE_POLICIES.values()))
def test_isolated_node_keeps_base_size(policy):
    assert policy(10.0, "alice", []) == 10.0
    assert policy(10.0, "alice", [rel("alice", "bob", 4)]) == 10.0


@pytest.mark.parametrize("policy", list(SIZE_POLICIES.values()))
def test_policies_are_monotone_in_score(policy):
    low = policy(10.0, "alice", [rel("bob", "alice", 1)])
    high = policy(10.0, "alice", [rel("bob", "alice", 4)])
    assert high >= low >= 10.0


def test_score_weighted_formula():
    assert score_weighted_size(10.0, "alice", [rel("bob", "alice", 4)]) == pytest.approx(30.0)


def test_evaluation_count_grows_with_count():
    one = evaluation_count_size(10.0, "alice", [rel("bob", "alice", 0)])
    two = evaluation_count_size(10.0, "alice", [rel("bob", "alice", 0), rel("carol", "alice", 0)])
    assert two > one > 10.0


def test_flat_ignores_scores():
    assert flat_size(8.0, "alice", [rel("bob", "alice", 4)]) == 8.0


def test_get_size_policy_unknown_raises():
    with pytest.raises(ValueError, match="Unknown size policy"):
        get_size_policy("by_vibes")
