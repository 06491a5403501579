from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from jp_trainer.srs.errors import InvalidGradeInput, MissingCard, StoreUnavailable
from jp_trainer.srs.grades import GradeRequest
from jp_trainer.srs.grading import GradingService, get_leech_page_size
from jp_trainer.srs.memory_store import InMemoryEventLog

from conftest import NOW


def test_first_grade_initializes_and_schedules(service, state_store, event_log):
    result = service.grade({"card_id": "vocab-1", "type": "vocab", "quality": 5})

    assert result.quality == 5
    stored = state_store.read_state("vocab-1")
    assert stored == result.memory_state
    assert (stored.level, stored.stability, stored.difficulty) == (5, 7, 4.5)
    assert stored.due == NOW + timedelta(days=7)
    assert stored.card_type == "vocab"
    assert [e.quality for e in event_log.read_events_desc("vocab-1", 0, 10)] == [5]


def test_second_review_seven_days_later(service, clock):
    service.grade({"card_id": "vocab-1", "quality": 5})
    clock.advance(days=7)

    state = service.grade({"card_id": "vocab-1", "quality": 5}).memory_state

    assert state.stability == pytest.approx(11.275, abs=0.011)
    assert state.difficulty == 4.2
    assert state.due == clock.now + timedelta(days=11)


def test_accepts_grade_request_model(service):
    result = service.grade(GradeRequest(card_id="vocab-1", new_level=3, base_level=2))
    assert result.quality == 5


def test_invalid_grade_touches_nothing(service, state_store, event_log):
    with pytest.raises(InvalidGradeInput):
        service.grade({"card_id": "vocab-1", "quality": "n/a"})

    assert state_store.read_state("vocab-1") is None
    assert event_log.read_events_desc("vocab-1", 0, 10) == []


@pytest.mark.parametrize("card_id", [None, "", "   "])
def test_empty_card_id_is_missing(service, card_id):
    with pytest.raises(MissingCard):
        service.grade({"card_id": card_id, "quality": 3})


def test_unknown_card_rejected_by_registry(state_store, event_log, registry, clock):
    service = GradingService(state_store, event_log, registry, clock=clock, leech_page_size=50)

    with pytest.raises(MissingCard) as exc_info:
        service.grade({"card_id": "nope", "quality": 3})

    assert exc_info.value.card_id == "nope"
    assert service.grade({"card_id": "kanji-1", "quality": 3}).quality == 3


def test_repeated_failures_flag_a_leech(service):
    statuses = [service.grade({"card_id": "vocab-1", "quality": 0}).leech for _ in range(4)]

    assert [s.leech_count for s in statuses] == [0, 1, 2, 3]
    assert [s.is_leech for s in statuses] == [False, False, False, True]


def test_success_clears_leech(service, state_store, event_log):
    event_log.seed("vocab-1", [0, 0, 0, 0, 0])

    result = service.grade({"card_id": "vocab-1", "quality": 4})

    assert result.leech.leech_count == 0
    assert state_store.read_state("vocab-1").is_leech is False


def test_event_meta_records_source(service, event_log):
    service.grade({
        "card_id": "vocab-1",
        "new_level": 4,
        "base_level": 4,
        "source": "auto-flip",
        "auto_active": True,
    })

    event = event_log.read_events_desc("vocab-1", 0, 1)[0]
    assert event.quality == 3
    assert event.meta["source"] == "auto-flip"
    assert event.meta["auto_active"] is True
    assert event.meta["base_level"] == 4


def test_unreadable_history_leaves_state_untouched(state_store, clock):
    event_log = MagicMock(wraps=InMemoryEventLog(clock))
    event_log.read_events_desc.side_effect = StoreUnavailable("timeout")
    service = GradingService(state_store, event_log, clock=clock, leech_page_size=50)

    with pytest.raises(StoreUnavailable) as exc_info:
        service.grade({"card_id": "vocab-1", "quality": 4})

    assert exc_info.value.retryable is True
    assert state_store.read_state("vocab-1") is None


def test_grade_session_uses_final_and_keeps_stage_scores(service, event_log):
    results = service.grade_session("vocab", [
        {"card_id": "vocab-1", "final": 3, "warmup": 4, "recall": 2},
        {"card_id": "vocab-2", "final": 1, "warmup": 1, "recall": 1},
    ])

    assert [r.quality for r in results] == [3, 1]
    assert [r.memory_state.card_type for r in results] == ["vocab", "vocab"]
    meta = event_log.read_events_desc("vocab-1", 0, 1)[0].meta
    assert meta["source"] == "session"
    assert meta["warmup"] == 4
    assert meta["final"] == 3


def test_recompute_state_rewrites_leech_fields(service, state_store, event_log):
    service.grade({"card_id": "vocab-1", "quality": 1})
    # History backfilled after the last write
    event_log.seed("vocab-1", [0, 0, 1])

    refreshed = service.recompute_state("vocab-1")

    assert refreshed.leech_count == 3
    assert refreshed.is_leech is True
    assert state_store.read_state("vocab-1").is_leech is True
    assert service.recompute_state("unknown") is None


def test_preview_does_not_write(service, state_store):
    previews = service.preview("vocab-1")

    assert previews[4].level == 4
    assert state_store.read_state("vocab-1") is None


def test_leech_page_size_from_env(monkeypatch):
    monkeypatch.setenv("LEECH_PAGE_SIZE", "7")
    assert get_leech_page_size() == 7

    monkeypatch.delenv("LEECH_PAGE_SIZE")
    assert get_leech_page_size() == 50

    monkeypatch.setenv("LEECH_PAGE_SIZE", "zero")
    with pytest.raises(ValueError):
        get_leech_page_size()
