import math
from datetime import datetime, timedelta, timezone

import pytest

from jp_trainer.srs.memory_state import (
    MemoryState,
    calculate_retrievability,
    clamp_level,
    get_elapsed_days,
    initialize_new_state,
    to_utc,
)

from conftest import NOW


def test_initialize_new_state_defaults():
    state = initialize_new_state("c1", "kanji")

    assert (state.level, state.stability, state.difficulty) == (0, 1.0, 5.0)
    assert state.due is None
    assert state.is_new
    assert state.card_type == "kanji"


def test_from_row_tolerates_garbage():
    state = MemoryState.from_row({
        "card_id": 42,
        "type": "vocab",
        "level": "3",
        "stability": "not a number",
        "difficulty": None,
        "leech_count": "4",
        "due": "2025-03-01T09:00:00Z",
    })

    assert state.card_id == "42"
    assert state.card_type == "vocab"
    assert state.level == 3
    assert state.stability == 1.0
    assert state.difficulty == 5.0
    assert state.is_leech is True
    assert state.due == NOW


def test_to_row_uses_iso_timestamps():
    row = MemoryState(card_id="c1", due=NOW).to_row()

    assert row["due"] == "2025-03-01T09:00:00+00:00"
    assert row["last_reviewed_at"] is None


@pytest.mark.parametrize("value,level", [(-1, 0), (2.5, 3), (2.49, 2), (7, 5)])
def test_clamp_level(value, level):
    assert clamp_level(value) == level


def test_to_utc_normalizes():
    naive = datetime(2025, 3, 1, 9, 0)
    tokyo = datetime(2025, 3, 1, 18, 0, tzinfo=timezone(timedelta(hours=9)))

    assert to_utc(naive) == NOW
    assert to_utc(tokyo) == NOW
    assert to_utc(tokyo).tzinfo == timezone.utc
    assert to_utc("") is None
    with pytest.raises(TypeError):
        to_utc(12345)


def test_retrievability():
    assert calculate_retrievability(7, 0) == 1.0
    assert calculate_retrievability(7, 7) == pytest.approx(math.exp(-7 / 10.5))
    assert calculate_retrievability(7, 7) == pytest.approx(0.513, abs=0.001)


def test_elapsed_days():
    assert get_elapsed_days(None, NOW) == 0.0
    assert get_elapsed_days(NOW - timedelta(hours=36), NOW) == 1.5
    assert get_elapsed_days(NOW + timedelta(days=1), NOW) == 0.0
