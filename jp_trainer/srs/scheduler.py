"""
Scheduler - State Transition Logic

Pure scheduling and state updates (no database calls).

Main workflow:
1. Load card state (caller's responsibility)
2. Sanitize stability / difficulty (fall back to defaults)
3. Calculate retrievability from the time since the last review
4. Apply new-card or learned-card update rules
5. Return the next state

This module handles ONLY the algorithm logic.
Persistence is handled by the database and memory_store modules.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional

from jp_trainer.srs import memory_state, updates
from jp_trainer.srs.constants import (
    DEFAULT_DIFFICULTY,
    DEFAULT_STABILITY,
    GRADE_MAX,
    GRADE_MIN,
    MIN_INTERVAL_DAYS,
    S_MIN,
)


def next_interval_days(stability: float) -> int:
    """Stability -> whole-day interval, at least one day."""
    return max(MIN_INTERVAL_DAYS, int(math.floor(stability + 0.5)))


def _sanitize(value: Optional[float], default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number <= 0:
        return default
    return number


def _clamp_grade(grade: int) -> int:
    return max(GRADE_MIN, min(GRADE_MAX, int(grade)))


def transition(
    state: memory_state.MemoryState,
    grade: int,
    now: Optional[datetime] = None
) -> memory_state.MemoryState:
    """
    Compute the next memory state for one grading event.

    The input state is not modified. Given the same state, grade and now,
    the result is always identical.

    Args:
        state: Current MemoryState (may be freshly initialized)
        grade: Canonical grade 0-5
        now: Review timestamp (defaults to now, UTC)

    Returns:
        Next MemoryState with level, stability, difficulty, due and
        last_reviewed_at updated. Leech fields are carried over unchanged.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    now = memory_state.to_utc(now)
    grade = _clamp_grade(grade)

    stability = max(S_MIN, _sanitize(state.stability, DEFAULT_STABILITY))
    difficulty = updates.clamp_difficulty(_sanitize(state.difficulty, DEFAULT_DIFFICULTY))

    if state.is_new:
        new_level, new_stability, new_difficulty = updates.apply_new_card_update(
            difficulty, grade
        )
        if updates.is_failure(grade):
            interval_days = MIN_INTERVAL_DAYS
        else:
            interval_days = next_interval_days(new_stability)
    else:
        elapsed_days = memory_state.get_elapsed_days(
            memory_state.to_utc(state.last_reviewed_at), now
        )
        retrievability = memory_state.calculate_retrievability(stability, elapsed_days)
        new_level, new_stability, new_difficulty = updates.apply_learned_card_update(
            stability=stability,
            difficulty=difficulty,
            retrievability=retrievability,
            grade=grade,
        )
        interval_days = next_interval_days(new_stability)

    last_learned_at = state.last_learned_at
    if last_learned_at is None and new_level > 0:
        last_learned_at = now

    return replace(
        state,
        level=new_level,
        stability=new_stability,
        difficulty=new_difficulty,
        last_reviewed_at=now,
        due=now + timedelta(days=interval_days),
        last_learned_at=last_learned_at,
        updated_at=now,
    )


def simulate_grades(
    state: memory_state.MemoryState,
    now: Optional[datetime] = None
) -> dict[int, memory_state.MemoryState]:
    """
    Preview the next state for every possible grade (0-5).

    Uses one shared timestamp so the previews are comparable.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return {grade: transition(state, grade, now) for grade in range(GRADE_MIN, GRADE_MAX + 1)}
