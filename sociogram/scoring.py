"""
sociogram/scoring.py — Score Model: incoming scores → node color and size.

Pure functions, no state. A member's visual encoding is driven only by the
evaluations it *receives* (relationships whose target is the member):

    average_incoming_score  mean incoming score, 0.0 when nothing is incoming
    node_color              band color of ceil(average), clamped to 0..4
    node size policies      swappable callables (base, member, relationships)

Score bands follow the team's evaluation scale:
    0  Inexistante ou non nécessaire   #DF7373
    1  Faible                          #FA9500
    2  Modérée                         #5FA8D3
    3  Bonne                           #415D43
    4  Optimale                        #111D13
"""

import logging
import math
from typing import Callable, Iterable

import numpy as np

from sociogram.models import Relationship, ScoreBand

logger = logging.getLogger(__name__)

SCORE_BANDS: tuple[ScoreBand, ...] = (
    ScoreBand(0, "#DF7373", "Inexistante ou non nécessaire",
              "La collaboration n'existe pas ou n'est pas requise."),
    ScoreBand(1, "#FA9500", "Faible",
              "La collaboration est rare et uniquement ponctuelle."),
    ScoreBand(2, "#5FA8D3", "Modérée",
              "Les efforts sont coordonnés de manière périodique."),
    ScoreBand(3, "#415D43", "Bonne",
              "La collaboration est soutenue, avec une entraide régulière."),
    ScoreBand(4, "#111D13", "Optimale",
              "Les membres travaillent en parfaite collégialité pour atteindre "
              "des objectifs communs."),
)

MIN_SCORE = SCORE_BANDS[0].level
MAX_SCORE = SCORE_BANDS[-1].level

SizePolicy = Callable[[float, str, Iterable[Relationship]], float]


def _incoming_scores(member_id: str, relationships: Iterable[Relationship]) -> list[int]:
    return [r.score for r in relationships if r.target == member_id]


def score_band(score: float) -> ScoreBand:
    """
    Map any numeric score to its band: round up, clamp to [0, 4].

    NaN and non-finite inputs fall back to the nearest end (NaN → band 0).
    """
    if score is None or (isinstance(score, float) and math.isnan(score)):
        return SCORE_BANDS[0]
    if math.isinf(score):
        return SCORE_BANDS[-1] if score > 0 else SCORE_BANDS[0]
    level = int(math.ceil(score))
    level = max(MIN_SCORE, min(MAX_SCORE, level))
    return SCORE_BANDS[level]


def score_to_color(score: float) -> str:
    """Total score → color function; never raises for numeric input."""
    return score_band(score).color


def average_incoming_score(member_id: str, relationships: Iterable[Relationship]) -> float:
    """
    Mean score of all relationships targeting `member_id`.

    Returns 0.0 (not NaN) when the member has received no evaluation.
    """
    scores = _incoming_scores(member_id, relationships)
    if not scores:
        return 0.0
    return float(np.mean(scores))


def node_color(member_id: str, relationships: Iterable[Relationship]) -> str:
    """Band color of ceil(average incoming score)."""
    return score_to_color(average_incoming_score(member_id, relationships))


# ── Node size policies ────────────────────────────────────────────────────────

def flat_size(base_size: float, member_id: str, relationships: Iterable[Relationship]) -> float:
    return float(base_size)


def score_weighted_size(
    base_size: float,
    member_id: str,
    relationships: Iterable[Relationship],
) -> float:
    """base * (1 + avg * 0.5): a fully 'Optimale' member is three times base."""
    avg = average_incoming_score(member_id, relationships)
    return float(base_size) * (1.0 + avg * 0.5)


def evaluation_count_size(
    base_size: float,
    member_id: str,
    relationships: Iterable[Relationship],
) -> float:
    """base * (1 + 0.25 * number of evaluations received)."""
    count = len(_incoming_scores(member_id, relationships))
    return float(base_size) * (1.0 + 0.25 * count)


SIZE_POLICIES: dict[str, SizePolicy] = {
    "flat": flat_size,
    "score_weighted": score_weighted_size,
    "evaluation_count": evaluation_count_size,
}


def get_size_policy(name: str) -> SizePolicy:
    """
    Look up a size policy by name.

    Raises:
        ValueError: If `name` is not one of SIZE_POLICIES.
    """
    try:
        return SIZE_POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown size policy {name!r}; expected one of {sorted(SIZE_POLICIES)}"
        ) from None
