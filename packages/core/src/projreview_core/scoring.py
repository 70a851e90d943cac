"""Score arithmetic: combining AI and human scores, and ranking projects."""

from __future__ import annotations

import math
from numbers import Real
from typing import TYPE_CHECKING

from projreview_core.errors import ValidationError

if TYPE_CHECKING:
    from projreview_store.models import ProjectRecord

MIN_HUMAN_SCORE = 1
MAX_HUMAN_SCORE = 100


def _is_finite_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def validate_human_score(value) -> int:
    """Return ``value`` as an int if it is an accepted human score.

    Accepted scores are whole numbers from 1 to 100. Zero is rejected: a
    project scored 0 is indistinguishable from one nobody looked at.
    """
    if not _is_finite_number(value) or value != int(value):
        raise ValidationError(f"Human score must be a whole number, got {value!r}.")
    score = int(value)
    if not MIN_HUMAN_SCORE <= score <= MAX_HUMAN_SCORE:
        raise ValidationError(
            f"Human score must be between {MIN_HUMAN_SCORE} and {MAX_HUMAN_SCORE}, got {score}."
        )
    return score


def combine(ai_score, human_score) -> int:
    """Return the final score: the mean of both scores, rounded half up.

    >>> combine(90, 70)
    80
    >>> combine(81, 50)
    66
    """
    if not _is_finite_number(ai_score):
        raise ValidationError(f"AI score must be a finite number, got {ai_score!r}.")
    human = validate_human_score(human_score)
    # round() would use banker's rounding; 65.5 must become 66.
    return math.floor((ai_score + human) / 2 + 0.5)


def rank_projects(projects: list[ProjectRecord]) -> list[ProjectRecord]:
    """Order projects for a leaderboard: highest final score first, unscored last.

    Ties keep their incoming order.
    """
    return sorted(projects, key=lambda p: (p.final_score is None, -(p.final_score or 0)))
