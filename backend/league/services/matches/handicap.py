"""Handicap arithmetic.

A handicap is a percentage in [-50, 50]. Positive reduces side A's score,
negative reduces side B's, zero leaves both alone. Adjusted scores are rounded
half away from zero, computed in integer arithmetic so that e.g. 15 at 30%
gives exactly 10.5 -> 11.
"""
from typing import Tuple

MAX_HANDICAP = 50
HANDICAP_STEP = 5


def is_valid_handicap(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and -MAX_HANDICAP <= value <= MAX_HANDICAP


def reduce_score(score: int, percent: int) -> int:
    """round(score * (1 - percent/100)) for non-negative inputs."""
    return (score * (100 - percent) * 2 + 100) // 200


def adjusted_scores(score_a: int, score_b: int, handicap: int) -> Tuple[int, int]:
    handicap = handicap or 0
    if handicap > 0:
        return reduce_score(score_a, handicap), score_b
    if handicap < 0:
        return score_a, reduce_score(score_b, -handicap)
    return score_a, score_b


def suggested_handicap(level_a: int, level_b: int) -> int:
    """Half the stronger side's relative level advantage, in steps of 5.

    Positive when A is stronger (A's score gets reduced), negative when B is.
    e.g. 1500 vs 780: 720 / 1500 * 50 = 24 -> 25.
    """
    higher = max(level_a, level_b)
    lower = min(level_a, level_b)
    if higher <= 0:
        return 0
    # (diff / higher * 50) / 5 rounded half up == (diff * 10 * 2 + higher) // (2 * higher)
    steps = ((higher - lower) * 20 + higher) // (2 * higher)
    percent = min(steps * HANDICAP_STEP, MAX_HANDICAP)
    return percent if level_a >= level_b else -percent
