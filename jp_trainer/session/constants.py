"""
Constants for session scoring and stage weights.
"""

from __future__ import annotations

from typing import Final


KANJI_CARD_TYPE: Final[str] = "kanji"
CARD_TYPES: Final[list[str]] = ["vocab", "kanji", "particle", "grammar"]

SCORE_MIN: Final[int] = 0
SCORE_MAX: Final[int] = 5

# A card counts as learned in a session summary at final >= this
LEARNED_FINAL_MIN: Final[int] = 3

# Typed recall: exact match scores this, anything else scores 0
RECALL_MATCH_SCORE: Final[int] = 3

# (upper bound in whole seconds, score); slower than the last bound scores 0
TIME_SCORE_BUCKETS: Final[list[tuple[int, int]]] = [
    (3, 5),
    (6, 4),
    (9, 3),
    (12, 2),
    (15, 1),
]

# Kanji stage weights. They sum to 0.9, so all-5 stages give a raw 4.5.
KANJI_STAGE_WEIGHTS: Final[dict[str, float]] = {
    "write1": 0.15,    # first handwriting pass
    "meaning": 0.20,   # meaning MCQ
    "example": 0.20,   # example-sentence MCQ
    "on_kun": 0.10,    # on/kun reading MCQ
    "recall": 0.20,    # second handwriting pass / recall
    "context": 0.05,   # contextual MCQ
}

KANJI_STAGE_LABELS: Final[dict[str, str]] = {
    "write1": "Handwriting (1st pass)",
    "meaning": "Meaning MCQ",
    "example": "Example sentence MCQ",
    "on_kun": "On/Kun reading MCQ",
    "recall": "Recall (2nd pass)",
    "context": "Context MCQ",
}

REVIEW_MODES: Final[list[str]] = ["level", "omni"]
