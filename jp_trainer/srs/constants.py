"""
SRS Constants and Parameters

All tunable values for the scheduler, grade resolver and leech detector
in one place.
"""

from enum import IntEnum


# ---- Grades ----

class Grade(IntEnum):
    """Canonical review quality (0-5)."""
    FORGET = 0   # Nothing recalled
    HARD = 1     # Wrong, but something was familiar
    DOUBT = 2    # Barely, or wrong after hesitation
    GOOD = 3     # Recalled normally
    EASY = 4     # Recalled fluently
    PERFECT = 5  # Instant, effortless recall


GRADE_MIN = int(Grade.FORGET)
GRADE_MAX = int(Grade.PERFECT)

# Grades at or below this are failures for the scheduler
FAIL_GRADE_MAX = int(Grade.DOUBT)


# ---- Levels ----

LEVEL_MIN = 0
LEVEL_MAX = 5


# ---- Memory State Defaults ----

DEFAULT_LEVEL = 0
DEFAULT_STABILITY = 1.0    # days
DEFAULT_DIFFICULTY = 5.0   # middle of the 1-10 scale

S_MIN = 1.0      # Minimum stability (days)
D_MIN = 1.0      # Minimum difficulty
D_MAX = 10.0     # Maximum difficulty

MIN_INTERVAL_DAYS = 1
STATE_PRECISION = 2  # Decimal places kept for stability/difficulty


# ---- New Card Parameters ----

NEW_FAIL_STABILITY = 1.0
NEW_FAIL_DIFFICULTY_STEP = 1.0     # Difficulty added on a failed first review
NEW_SUCCESS_STABILITY_BASE = 2.0   # stability = base + grade (3 -> 5d, 5 -> 7d)
NEW_SUCCESS_DIFFICULTY_STEP = 0.5  # Difficulty removed on a successful first review


# ---- Learned Card Parameters ----

RETENTION_SPAN = 1.5        # R = exp(-elapsed / (S * RETENTION_SPAN))
LAPSE_STABILITY_FACTOR = 0.5
LAPSE_DIFFICULTY_STEP = 0.4
GROWTH_BASE = 1.2           # Minimum stability multiplier on success
GROWTH_BONUS = 0.8          # Extra multiplier scaled by bonus * R
SUCCESS_DIFFICULTY_STEP = 0.3


# ---- Leech Detection ----

LEECH_FAIL_QUALITY_MAX = int(Grade.HARD)  # quality <= 1 counts as a failure
LEECH_THRESHOLD = 3                       # leech_count >= 3 flags the card
LEECH_PAGE_SIZE = 50                      # Events read per page
LEECH_BOARD_LIMIT = 50
LEECH_BOARD_LEVELS = (0, 1)               # Only weak cards appear on the board
