"""
Memory State - Card State and Retrievability

Defines the per-card memory state, the grade event record, and the derived
quantities used by the scheduler.

Key concepts:
- Level (0-5): coarse mastery tier shown to the learner
- Stability (S): how slowly memory decays (in days)
- Difficulty (D): how hard the card is to learn (1-10 scale)
- Retrievability (R): estimated probability of recall at time t
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from jp_trainer.srs.constants import (
    DEFAULT_DIFFICULTY,
    DEFAULT_LEVEL,
    DEFAULT_STABILITY,
    LEECH_THRESHOLD,
    LEVEL_MAX,
    LEVEL_MIN,
    RETENTION_SPAN,
)


SECONDS_PER_DAY = 86400.0


@dataclass
class MemoryState:
    """
    Memory state for a single card.

    leech_count / is_leech are derived from the event log and are only
    written by the grading service.
    """
    card_id: str
    level: int = DEFAULT_LEVEL
    stability: float = DEFAULT_STABILITY
    difficulty: float = DEFAULT_DIFFICULTY
    last_reviewed_at: Optional[datetime] = None
    due: Optional[datetime] = None
    leech_count: int = 0
    is_leech: bool = False
    last_learned_at: Optional[datetime] = None

    # Metadata
    card_type: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def is_new(self) -> bool:
        """A card counts as new until it holds a level above 0."""
        return self.level is None or self.level <= 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MemoryState":
        """
        Build a state from a loosely typed row (dict, DB record, JSON).

        Missing or malformed numeric fields fall back to defaults instead
        of failing.
        """
        leech_count = max(0, int(_coerce_float(row.get("leech_count"), 0)))
        return cls(
            card_id=str(row["card_id"]),
            level=clamp_level(_coerce_float(row.get("level"), DEFAULT_LEVEL)),
            stability=_coerce_float(row.get("stability"), DEFAULT_STABILITY),
            difficulty=_coerce_float(row.get("difficulty"), DEFAULT_DIFFICULTY),
            last_reviewed_at=to_utc(row.get("last_reviewed_at")),
            due=to_utc(row.get("due")),
            leech_count=leech_count,
            is_leech=leech_count >= LEECH_THRESHOLD,
            last_learned_at=to_utc(row.get("last_learned_at")),
            card_type=row.get("card_type") or row.get("type"),
            updated_at=to_utc(row.get("updated_at")),
        )

    def to_row(self) -> dict[str, Any]:
        """Plain dict with ISO timestamps, suitable for JSON export."""
        row = asdict(self)
        for key in ("last_reviewed_at", "due", "last_learned_at", "updated_at"):
            if row[key] is not None:
                row[key] = row[key].isoformat()
        return row


@dataclass(frozen=True)
class GradeEvent:
    """
    One append-only grading event.

    quality is kept as stored; legacy rows may hold something unparseable,
    which the leech detector treats as a streak terminator.
    """
    card_id: str
    quality: Any
    created_at: datetime
    id: Optional[int] = None
    meta: dict = field(default_factory=dict)


# ---- Helpers ----

def _coerce_float(value: Any, default: float) -> float:
    """Return value as a finite float, or default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def clamp_level(value: float) -> int:
    """Round half-up and clamp to the 0-5 level range."""
    return max(LEVEL_MIN, min(LEVEL_MAX, int(math.floor(value + 0.5))))


def to_utc(value: Any) -> Optional[datetime]:
    """
    Normalize a timestamp to an aware UTC datetime.

    Accepts datetimes and ISO-8601 strings (a trailing 'Z' is allowed).
    Naive datetimes are assumed to already be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if not isinstance(value, datetime):
        raise TypeError(f"Expected datetime or ISO string, got {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def calculate_retrievability(stability: float, elapsed_days: float) -> float:
    """
    Estimate retrievability with a stretched exponential decay.

    Formula: R = exp(-Δt / (S * 1.5))

    Where:
    - Δt = days since the last review
    - S = stability (in days)

    Args:
        stability: Current stability in days
        elapsed_days: Time since last review in days

    Returns:
        Retrievability between 0 and 1
    """
    if elapsed_days <= 0:
        return 1.0
    return math.exp(-elapsed_days / (stability * RETENTION_SPAN))


def get_elapsed_days(last_reviewed_at: Optional[datetime], now: datetime) -> float:
    """
    Days between the last review and now.

    Returns 0 for cards never reviewed and for clocks that moved backwards.
    """
    if last_reviewed_at is None:
        return 0.0
    delta = now - last_reviewed_at
    return max(0.0, delta.total_seconds() / SECONDS_PER_DAY)


def initialize_new_state(card_id: str, card_type: Optional[str] = None) -> MemoryState:
    """
    State for a card that has never been graded (level 0, S=1, D=5, no due).
    """
    return MemoryState(card_id=str(card_id), card_type=card_type)
