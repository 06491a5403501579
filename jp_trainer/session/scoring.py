"""
Per-stage scoring helpers.

Every timed MCQ stage uses the same time-to-score mapping; typed recall
uses exact matching.
"""

from __future__ import annotations

import math
import unicodedata
from datetime import datetime
from typing import Any, Optional

from jp_trainer.session.constants import (
    RECALL_MATCH_SCORE,
    SCORE_MAX,
    SCORE_MIN,
    TIME_SCORE_BUCKETS,
)
from jp_trainer.srs.grades import to_finite_number


def clamp_score(value: Any) -> int:
    """
    Coerce a raw stage score to an integer in [0, 5].

    Missing or non-numeric scores count as 0.
    """
    number = to_finite_number(value)
    if number is None:
        return SCORE_MIN
    return max(SCORE_MIN, min(SCORE_MAX, int(math.floor(number + 0.5))))


def time_to_score(seconds: float, correct: bool = True) -> int:
    """
    Map answer time to a 0-5 score.

    Seconds are floored before bucketing, so 3.9s still scores 5:
        <=3 -> 5, <=6 -> 4, <=9 -> 3, <=12 -> 2, <=15 -> 1, else 0

    An incorrect answer scores 0 regardless of time.
    """
    if not correct:
        return 0
    elapsed = to_finite_number(seconds)
    if elapsed is None:
        return 0
    whole_seconds = max(0, int(math.floor(elapsed)))
    for upper_bound, score in TIME_SCORE_BUCKETS:
        if whole_seconds <= upper_bound:
            return score
    return 0


def mcq_elapsed_seconds(
    started_at: datetime,
    submitted_at: datetime,
    first_correct_at: Optional[datetime] = None,
    correct: bool = True
) -> float:
    """
    Elapsed time used for scoring an MCQ.

    For a correct answer the clock stops at the first time the correct
    option was selected; otherwise at submission.
    """
    stop = first_correct_at if (correct and first_correct_at is not None) else submitted_at
    return max(0.0, (stop - started_at).total_seconds())


def score_mcq(
    started_at: datetime,
    submitted_at: datetime,
    correct: bool,
    first_correct_at: Optional[datetime] = None
) -> int:
    """Score a timed MCQ from its timestamps."""
    elapsed = mcq_elapsed_seconds(started_at, submitted_at, first_correct_at, correct)
    return time_to_score(elapsed, correct)


def _normalize_answer(text: Optional[str], case_sensitive: bool) -> str:
    normalized = unicodedata.normalize("NFKC", (text or "").strip())
    return normalized if case_sensitive else normalized.lower()


def score_recall_answer(answer: Optional[str], truth: Optional[str], case_sensitive: bool = False) -> int:
    """
    Default score for a typed recall answer.

    An exact match (after trimming) scores 3; the learner can then raise or
    lower it by self-grading. Kanji answers compare case-sensitively.
    """
    given = _normalize_answer(answer, case_sensitive)
    expected = _normalize_answer(truth, case_sensitive)
    if given and given == expected:
        return RECALL_MATCH_SCORE
    return 0
