"""
Session Aggregator

Combines per-stage exercise scores into one final grade per card.

Two policies:
- Simple cards (vocab, particle, grammar): floor of the warm-up / recall mean
- Kanji: weighted sum over six stages, so a learner who can write a
  character but not read it gets a differentiated score
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional, Union

from jp_trainer.session.constants import (
    KANJI_CARD_TYPE,
    KANJI_STAGE_WEIGHTS,
    LEARNED_FINAL_MIN,
    SCORE_MAX,
    SCORE_MIN,
)
from jp_trainer.session.scoring import clamp_score
from jp_trainer.session.types import (
    CardAggregate,
    ReviewMode,
    SessionSummary,
    StageContribution,
    StageOutcome,
    StageStatus,
)


StageInput = Union[StageOutcome, int, float, None]


def aggregate_simple(warmup: Any, recall: Any) -> int:
    """
    final = floor((warmup + recall) / 2), missing scores count as 0.
    """
    return (clamp_score(warmup) + clamp_score(recall)) // 2


def _to_outcome(stage: str, value: StageInput) -> StageOutcome:
    if isinstance(value, StageOutcome):
        return value
    if value is None:
        return StageOutcome.missing(stage)
    return StageOutcome.scored(stage, clamp_score(value))


def kanji_breakdown(outcomes: Mapping[str, StageInput]) -> list[StageContribution]:
    """
    Per-stage contributions for a kanji card.

    Stages absent from outcomes, or given as None, are expected-but-missing
    and contribute 0. NOT_APPLICABLE stages are left out entirely.
    """
    unknown = set(outcomes) - set(KANJI_STAGE_WEIGHTS)
    if unknown:
        raise ValueError(f"Unknown kanji stages: {sorted(unknown)}")

    contributions = []
    for stage, weight in KANJI_STAGE_WEIGHTS.items():
        outcome = _to_outcome(stage, outcomes.get(stage))
        if outcome.status == StageStatus.NOT_APPLICABLE:
            continue
        score = clamp_score(outcome.score) if outcome.status == StageStatus.SCORED else 0
        contributions.append(StageContribution(
            stage=stage,
            status=outcome.status,
            score=score,
            weight=weight,
            weighted=score * weight,
        ))
    return contributions


def aggregate_kanji(outcomes: Mapping[str, StageInput]) -> int:
    """
    final = round(Σ score_i * weight_i), clamped to [0, 5].

    Weights are not renormalized when a stage is not applicable.

    Example:
        write1=5, meaning=4, example=3, on_kun=5, recall=4, context=2
        -> 0.75 + 0.8 + 0.6 + 0.5 + 0.8 + 0.1 = 3.55 -> 4
    """
    raw = sum(c.weighted for c in kanji_breakdown(outcomes))
    return _round_final(raw)


def _round_final(raw: float) -> int:
    # Epsilon absorbs float error in the weighted sum (3.55 -> 4)
    return max(SCORE_MIN, min(SCORE_MAX, int(math.floor(raw + 0.5 + 1e-9))))


def aggregate_card(
    card_id: str,
    card_type: Optional[str],
    outcomes: Mapping[str, StageInput]
) -> CardAggregate:
    """
    Aggregate one card using the policy of its category.

    Simple cards read the "warmup" and "recall" entries; kanji cards read
    the six kanji stages.
    """
    if card_type == KANJI_CARD_TYPE:
        stages = kanji_breakdown(outcomes)
        raw = sum(c.weighted for c in stages)
        return CardAggregate(
            card_id=str(card_id),
            card_type=card_type,
            final=_round_final(raw),
            raw=round(raw, 4),
            stages=stages,
        )

    stages = []
    for stage in ("warmup", "recall"):
        outcome = _to_outcome(stage, outcomes.get(stage))
        score = clamp_score(outcome.score) if outcome.status == StageStatus.SCORED else 0
        stages.append(StageContribution(
            stage=stage,
            status=outcome.status,
            score=score,
            weight=0.5,
            weighted=score * 0.5,
        ))
    final = aggregate_simple(stages[0].score, stages[1].score)
    return CardAggregate(
        card_id=str(card_id),
        card_type=card_type,
        final=final,
        raw=(stages[0].score + stages[1].score) / 2,
        stages=stages,
    )


def apply_review_policy(
    mcq: Any,
    recall: Any,
    base_level: Any,
    mode: ReviewMode = "level"
) -> int:
    """
    Final grade of a review-page card from its MCQ and recall scores.

    recall=None means the learner never graded recall explicitly (the
    answer was revealed automatically). A missing recall counts as 0 in
    "level" mode and as the base level in "omni" mode, where the final also
    never drops below the base level:

        omni, no recall: max(base, floor((mcq + base) / 2))

    Example:
        mcq=5, recall=None, base=1, omni -> max(1, floor(6 / 2)) = 3
    """
    base = clamp_score(base_level)
    recall_provided = recall is not None
    if recall_provided:
        recall_score = clamp_score(recall)
    else:
        recall_score = base if mode == "omni" else 0

    final = aggregate_simple(mcq, recall_score)
    if mode == "omni" and not recall_provided:
        return max(base, final)
    return final


def summarize_session(finals: Iterable[Union[int, CardAggregate]]) -> SessionSummary:
    """
    Count learned (final >= 3) and left cards, plus the 0-5 distribution.
    """
    dist = [0] * (SCORE_MAX + 1)
    total = 0
    learned = 0
    for item in finals:
        final = item.final if isinstance(item, CardAggregate) else clamp_score(item)
        dist[final] += 1
        total += 1
        if final >= LEARNED_FINAL_MIN:
            learned += 1
    return SessionSummary(total=total, learned=learned, left=total - learned, dist=dist)
