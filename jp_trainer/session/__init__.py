"""
Session scoring package exports.
"""

from jp_trainer.session.aggregator import (
    aggregate_card,
    aggregate_kanji,
    aggregate_simple,
    apply_review_policy,
    kanji_breakdown,
    summarize_session,
)
from jp_trainer.session.constants import KANJI_STAGE_WEIGHTS, TIME_SCORE_BUCKETS
from jp_trainer.session.scoring import (
    clamp_score,
    score_mcq,
    score_recall_answer,
    time_to_score,
)
from jp_trainer.session.types import (
    CardAggregate,
    SessionSummary,
    StageContribution,
    StageOutcome,
    StageStatus,
)

__all__ = [
    "aggregate_card",
    "aggregate_kanji",
    "aggregate_simple",
    "apply_review_policy",
    "kanji_breakdown",
    "summarize_session",
    "KANJI_STAGE_WEIGHTS",
    "TIME_SCORE_BUCKETS",
    "clamp_score",
    "score_mcq",
    "score_recall_answer",
    "time_to_score",
    "CardAggregate",
    "SessionSummary",
    "StageContribution",
    "StageOutcome",
    "StageStatus",
]
