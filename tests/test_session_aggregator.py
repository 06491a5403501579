from datetime import timedelta

import pytest

from jp_trainer.session import (
    StageOutcome,
    StageStatus,
    aggregate_card,
    aggregate_kanji,
    aggregate_simple,
    apply_review_policy,
    kanji_breakdown,
    score_mcq,
    score_recall_answer,
    summarize_session,
    time_to_score,
)
from jp_trainer.session.constants import KANJI_STAGE_WEIGHTS

from conftest import NOW

ALL_STAGES = {"write1": 5, "meaning": 4, "example": 3, "on_kun": 5, "recall": 4, "context": 2}


def test_stage_weights_sum_to_nine_tenths():
    assert sum(KANJI_STAGE_WEIGHTS.values()) == pytest.approx(0.9)


def test_all_stages_perfect_gives_raw_four_and_a_half():
    card = aggregate_card("kanji-1", "kanji", {stage: 5 for stage in KANJI_STAGE_WEIGHTS})

    assert card.raw == pytest.approx(4.5)
    assert card.final == 5


# ---- Simple cards ----

@pytest.mark.parametrize("warmup,recall,final", [(4, 2, 3), (5, 5, 5), (0, 1, 0), (3, None, 1), (None, None, 0)])
def test_aggregate_simple(warmup, recall, final):
    assert aggregate_simple(warmup, recall) == final


def test_aggregate_card_simple_row():
    card = aggregate_card("vocab-1", "vocab", {"warmup": 4, "recall": 2})

    assert card.final == 3
    assert card.raw == 3.0
    assert card.to_row() == {"card_id": "vocab-1", "final": 3, "warmup": 4, "recall": 2}


# ---- Kanji ----

def test_kanji_weighted_final_rounds_half_up():
    assert aggregate_kanji(ALL_STAGES) == 4

    card = aggregate_card("kanji-1", "kanji", ALL_STAGES)
    assert card.raw == pytest.approx(3.55)
    assert card.final == 4


def test_kanji_perfect_and_empty():
    assert aggregate_kanji({stage: 5 for stage in KANJI_STAGE_WEIGHTS}) == 5
    assert aggregate_kanji({}) == 0


def test_missing_stage_counts_as_zero():
    outcomes = dict(ALL_STAGES, example=None)
    breakdown = kanji_breakdown(outcomes)

    example = next(c for c in breakdown if c.stage == "example")
    assert len(breakdown) == 6
    assert example.status == StageStatus.MISSING
    assert example.weighted == 0
    assert aggregate_kanji(outcomes) == 3


def test_not_applicable_stage_is_excluded():
    outcomes = dict(ALL_STAGES, example=StageOutcome.not_applicable("example"))
    breakdown = kanji_breakdown(outcomes)

    assert [c.stage for c in breakdown] == ["write1", "meaning", "on_kun", "recall", "context"]
    # Weights are not renormalized: 3.55 - 0.6 = 2.95
    assert sum(c.weighted for c in breakdown) == pytest.approx(2.95)
    assert aggregate_kanji(outcomes) == 3


def test_stage_scores_are_clamped():
    breakdown = kanji_breakdown({"write1": 9, "meaning": -2})
    scores = {c.stage: c.score for c in breakdown}

    assert scores["write1"] == 5
    assert scores["meaning"] == 0


def test_unknown_stage_rejected():
    with pytest.raises(ValueError):
        kanji_breakdown({"write2": 5})


# ---- Timing ----

@pytest.mark.parametrize("seconds,score", [
    (0, 5),
    (3, 5),
    (3.01, 5),
    (3.99, 5),
    (4, 4),
    (6, 4),
    (9, 3),
    (12, 2),
    (15, 1),
    (15.9, 1),
    (16, 0),
    (120, 0),
])
def test_time_to_score_buckets(seconds, score):
    assert time_to_score(seconds) == score


def test_incorrect_answer_scores_zero():
    assert time_to_score(1, correct=False) == 0


def test_score_mcq_stops_clock_at_first_correct_selection():
    started = NOW
    first_correct = NOW + timedelta(seconds=2)
    submitted = NOW + timedelta(seconds=10)

    assert score_mcq(started, submitted, correct=True, first_correct_at=first_correct) == 5
    assert score_mcq(started, submitted, correct=True) == 2
    assert score_mcq(started, submitted, correct=False, first_correct_at=first_correct) == 0


# ---- Recall ----

def test_recall_exact_match_scores_three():
    assert score_recall_answer("  Taberu ", "taberu") == 3
    assert score_recall_answer("nomu", "taberu") == 0
    assert score_recall_answer("", "") == 0
    # Full-width and half-width forms compare equal
    assert score_recall_answer("ｶﾀｶﾅ", "カタカナ") == 3


def test_recall_case_sensitive():
    assert score_recall_answer("Taberu", "taberu", case_sensitive=True) == 0


# ---- Review policy and summary ----

def test_omni_without_recall_uses_base_as_recall_score():
    # floor((5 + 1) / 2) = 3, not floor(5 / 2) = 2
    assert apply_review_policy(5, None, base_level=1, mode="omni") == 3
    assert apply_review_policy(4, None, base_level=4, mode="omni") == 4


def test_omni_without_recall_never_downgrades():
    # floor((0 + 3) / 2) = 1 is lifted back to the base level
    assert apply_review_policy(0, None, base_level=3, mode="omni") == 3


def test_omni_with_explicit_recall_may_downgrade():
    assert apply_review_policy(1, 1, base_level=3, mode="omni") == 1
    assert apply_review_policy(5, 3, base_level=1, mode="omni") == 4


def test_level_mode_counts_missing_recall_as_zero():
    assert apply_review_policy(5, None, base_level=3, mode="level") == 2
    assert apply_review_policy(4, 2, base_level=3, mode="level") == 3
    assert apply_review_policy(5, None, base_level=None, mode="omni") == 2


def test_summarize_session():
    cards = [aggregate_card("kanji-1", "kanji", ALL_STAGES)]
    summary = summarize_session(cards + [3, 2, 0, 5])

    assert summary.total == 5
    assert summary.learned == 3
    assert summary.left == 2
    assert summary.dist == [1, 0, 1, 1, 1, 1]
