"""
Grade Resolver

Turns the different shapes a client can send a grade in into one canonical
integer grade (0-5).

Clients send one of:
- quality: an explicit 0-5 grade (grade picker, automatic MCQ scoring)
- new_level: the level the learner chose, optionally with base_level
- final: a composite session score

Resolution order: quality, then new_level, then final.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jp_trainer.srs.constants import GRADE_MAX, GRADE_MIN, Grade
from jp_trainer.srs.errors import InvalidGradeInput


# ---- Tagged grade input ----

@dataclass(frozen=True)
class ExplicitQuality:
    """A grade the caller already expressed on the 0-5 scale."""
    value: float


@dataclass(frozen=True)
class TargetLevel:
    """A level the learner picked directly."""
    value: float


@dataclass(frozen=True)
class FinalScore:
    """A composite session score, resolved like a target level."""
    value: float


GradeInput = Union[ExplicitQuality, TargetLevel, FinalScore]


def to_finite_number(value: Any) -> Optional[float]:
    """
    Parse ints, floats and numeric strings; anything else becomes None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_grade(value: float) -> int:
    """Round half-up and clamp to [0, 5]."""
    return max(GRADE_MIN, min(GRADE_MAX, round_half_up(value)))


# ---- Inbound payload ----

class GradeRequest(BaseModel):
    """
    Inbound grading payload as sent by the review pages.

    Numeric fields tolerate strings and garbage; anything that is not a
    finite number is stored as None so resolution can fall through.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    card_id: Optional[str] = None
    card_type: Optional[str] = Field(default=None, alias="type")
    quality: Optional[float] = None
    new_level: Optional[float] = None
    base_level: Optional[float] = None
    final: Optional[float] = None

    # Pass-through context, stored with the event but never interpreted
    source: Optional[str] = None
    auto_active: bool = False
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("quality", "new_level", "base_level", "final", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Optional[float]:
        return to_finite_number(value)

    @field_validator("card_id", mode="before")
    @classmethod
    def _coerce_card_id(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("auto_active", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("meta", mode="before")
    @classmethod
    def _coerce_meta(cls, value: Any) -> dict:
        return dict(value) if isinstance(value, dict) else {}

    def to_grade_input(self) -> GradeInput:
        """
        Pick the first usable grading field.

        Raises:
            InvalidGradeInput: if quality, new_level and final are all missing
        """
        if self.quality is not None:
            return ExplicitQuality(self.quality)
        if self.new_level is not None:
            return TargetLevel(self.new_level)
        if self.final is not None:
            return FinalScore(self.final)
        raise InvalidGradeInput(
            "One of quality, new_level or final must be a number",
            fields={"quality": self.quality, "new_level": self.new_level, "final": self.final},
        )

    def event_meta(self) -> dict[str, Any]:
        """Side-channel stored with the grade event."""
        meta = dict(self.meta)
        meta.update({
            "source": self.source,
            "auto_active": self.auto_active,
            "base_level": self.base_level,
            "new_level": self.new_level,
            "final": self.final,
        })
        if self.card_type:
            meta.setdefault("type", self.card_type)
        return meta


# ---- Resolution ----

def implied_quality(target: int, base_level: Optional[int]) -> int:
    """
    Quality implied by moving a card to a target level.

    Without a base level the target alone decides (4+ -> 5, 2+ -> 3, else 1).
    With one, the direction of the move decides (up 5, same 3, down 1).
    """
    if base_level is None:
        if target >= 4:
            return int(Grade.PERFECT)
        if target >= 2:
            return int(Grade.GOOD)
        return int(Grade.HARD)

    if target > base_level:
        return int(Grade.PERFECT)
    if target == base_level:
        return int(Grade.GOOD)
    return int(Grade.HARD)


def resolve_grade(grade_input: GradeInput, base_level: Optional[float] = None) -> int:
    """
    Resolve a tagged grade input into a canonical grade in [0, 5].

    Args:
        grade_input: ExplicitQuality, TargetLevel or FinalScore
        base_level: Previous level shown to the learner, if known

    Returns:
        Integer grade 0-5

    Raises:
        InvalidGradeInput: if the carried value is not a finite number
    """
    value = to_finite_number(getattr(grade_input, "value", None))
    if value is None:
        raise InvalidGradeInput(f"Grade value is not a finite number: {grade_input!r}")

    if isinstance(grade_input, ExplicitQuality):
        return clamp_grade(value)

    if isinstance(grade_input, (TargetLevel, FinalScore)):
        target = clamp_grade(value)
        base = to_finite_number(base_level)
        return implied_quality(target, None if base is None else round_half_up(base))

    raise InvalidGradeInput(f"Unsupported grade input: {grade_input!r}")


def resolve_request(request: GradeRequest) -> int:
    """Resolve a full inbound payload (uses its own base_level)."""
    return resolve_grade(request.to_grade_input(), request.base_level)
