"""
Memory Updates

Stability, difficulty and level updates for a single grading event.

Two regimes:
- New cards (level 0): fixed first-review outcomes
- Learned cards (level > 0): multiplicative stability growth dampened by
  retrievability, halving on failure

Key principle:
A success performed early (high R) grows stability more than a lucky
success right before forgetting (low R).
"""

from __future__ import annotations

from jp_trainer.srs.constants import (
    D_MAX,
    D_MIN,
    FAIL_GRADE_MAX,
    GROWTH_BASE,
    GROWTH_BONUS,
    LAPSE_DIFFICULTY_STEP,
    LAPSE_STABILITY_FACTOR,
    NEW_FAIL_DIFFICULTY_STEP,
    NEW_FAIL_STABILITY,
    NEW_SUCCESS_DIFFICULTY_STEP,
    NEW_SUCCESS_STABILITY_BASE,
    S_MIN,
    STATE_PRECISION,
    SUCCESS_DIFFICULTY_STEP,
)


def is_failure(grade: int) -> bool:
    """Grades 0-2 are failures for scheduling purposes."""
    return grade <= FAIL_GRADE_MAX


def success_bonus(grade: int) -> float:
    """
    Bonus scaling for successful grades.

    bonus = (grade - 2) / 3, i.e. 1/3 for GOOD up to 1.0 for PERFECT.
    """
    return (grade - FAIL_GRADE_MAX) / 3.0


def clamp_difficulty(difficulty: float) -> float:
    return max(D_MIN, min(D_MAX, difficulty))


def apply_new_card_update(
    difficulty: float,
    grade: int
) -> tuple[int, float, float]:
    """
    First-review update for a card at level 0.

    Failure (grade <= 2):
        level 0, S = 1, D = min(10, D + 1)
    Success (grade >= 3):
        level = grade, S = 2 + grade, D = max(1, D - 0.5)

    Args:
        difficulty: Current difficulty
        grade: Canonical grade 0-5

    Returns:
        (new_level, new_stability, new_difficulty)
    """
    if is_failure(grade):
        return 0, NEW_FAIL_STABILITY, min(D_MAX, difficulty + NEW_FAIL_DIFFICULTY_STEP)

    new_stability = NEW_SUCCESS_STABILITY_BASE + grade
    new_difficulty = max(D_MIN, difficulty - NEW_SUCCESS_DIFFICULTY_STEP)
    return grade, new_stability, new_difficulty


def update_stability_on_failure(stability: float) -> float:
    """
    S_new = max(1, S * 0.5)
    """
    return max(S_MIN, stability * LAPSE_STABILITY_FACTOR)


def update_stability_on_success(
    stability: float,
    retrievability: float,
    grade: int
) -> float:
    """
    Grow stability after a successful review.

    Formula:
        S_new = S * (1.2 + 0.8 * bonus * R)

    A PERFECT review right after the last one (R = 1) doubles stability;
    a GOOD review long overdue (R -> 0) still grows it by 20%.
    """
    bonus = success_bonus(grade)
    return max(S_MIN, stability * (GROWTH_BASE + GROWTH_BONUS * bonus * retrievability))


def update_difficulty(difficulty: float, grade: int) -> float:
    """
    Failure adds 0.4; success removes 0.3 * bonus. Clipped to [1, 10].
    """
    if is_failure(grade):
        return clamp_difficulty(difficulty + LAPSE_DIFFICULTY_STEP)
    return clamp_difficulty(difficulty - SUCCESS_DIFFICULTY_STEP * success_bonus(grade))


def apply_learned_card_update(
    stability: float,
    difficulty: float,
    retrievability: float,
    grade: int
) -> tuple[int, float, float]:
    """
    Update for a card already holding a level above 0.

    Stability and difficulty are rounded to 2 decimals for storage.

    Args:
        stability: Current stability
        difficulty: Current difficulty
        retrievability: Retrievability at review time
        grade: Canonical grade 0-5

    Returns:
        (new_level, new_stability, new_difficulty)
    """
    if is_failure(grade):
        new_stability = update_stability_on_failure(stability)
        new_level = max(0, grade)
    else:
        new_stability = update_stability_on_success(stability, retrievability, grade)
        new_level = grade

    new_difficulty = update_difficulty(difficulty, grade)

    return (
        new_level,
        round(new_stability, STATE_PRECISION),
        round(new_difficulty, STATE_PRECISION),
    )
