"""
Types for session aggregation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional


KanjiStage = Literal["write1", "meaning", "example", "on_kun", "recall", "context"]
ReviewMode = Literal["level", "omni"]


class StageStatus(str, Enum):
    """Whether a stage score takes part in the weighted final."""
    SCORED = "scored"                  # completed, score counts
    MISSING = "missing"                # expected but skipped, counts as 0
    NOT_APPLICABLE = "not_applicable"  # structurally impossible, excluded


@dataclass(frozen=True)
class StageOutcome:
    """
    Raw result of one exercise stage for one card.
    """
    stage: str
    status: StageStatus = StageStatus.SCORED
    score: int = 0

    @classmethod
    def scored(cls, stage: str, score: int) -> "StageOutcome":
        return cls(stage=stage, status=StageStatus.SCORED, score=score)

    @classmethod
    def missing(cls, stage: str) -> "StageOutcome":
        return cls(stage=stage, status=StageStatus.MISSING, score=0)

    @classmethod
    def not_applicable(cls, stage: str) -> "StageOutcome":
        return cls(stage=stage, status=StageStatus.NOT_APPLICABLE, score=0)


@dataclass(frozen=True)
class StageContribution:
    """One line of a final-grade breakdown."""
    stage: str
    status: StageStatus
    score: int
    weight: float
    weighted: float


@dataclass(frozen=True)
class CardAggregate:
    """
    Final grade of one card for one session, with its breakdown.
    """
    card_id: str
    card_type: Optional[str]
    final: int
    raw: float
    stages: list[StageContribution] = field(default_factory=list)

    def to_row(self) -> dict:
        """Row shape accepted by GradingService.grade_session."""
        row = {"card_id": self.card_id, "final": self.final}
        for contribution in self.stages:
            row[contribution.stage] = contribution.score
        return row


@dataclass(frozen=True)
class SessionSummary:
    """
    Totals for one finished session.
    """
    total: int
    learned: int
    left: int
    dist: list[int]
