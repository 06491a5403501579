from datetime import timedelta

import pytest

from jp_trainer.progress import build_progress_dashboard, export_progress_rows
from jp_trainer.progress.metrics import compute_due_cards, compute_leech_board, compute_level_distribution
from jp_trainer.progress.queries import load_states_df
from jp_trainer.srs.memory_state import MemoryState
from jp_trainer.srs.memory_store import InMemoryStateStore

from conftest import NOW


@pytest.fixture
def populated_store():
    store = InMemoryStateStore()
    states = [
        MemoryState(card_id="k1", card_type="kanji", level=0, leech_count=5, is_leech=True,
                    due=NOW - timedelta(days=2), last_reviewed_at=NOW - timedelta(days=3)),
        MemoryState(card_id="k2", card_type="kanji", level=1, leech_count=3, is_leech=True,
                    due=NOW - timedelta(days=1), last_reviewed_at=NOW - timedelta(days=20)),
        MemoryState(card_id="k3", card_type="kanji", level=4, leech_count=4, is_leech=True,
                    due=NOW + timedelta(days=5), last_reviewed_at=NOW - timedelta(days=1)),
        MemoryState(card_id="v1", card_type="vocab", level=5,
                    due=NOW + timedelta(days=30), last_reviewed_at=NOW - timedelta(days=1)),
        MemoryState(card_id="v2", card_type="vocab", level=0),
    ]
    for state in states:
        store.upsert_state(state)
    return store


def test_load_states_df_columns(populated_store):
    df = load_states_df(populated_store, "kanji")

    assert list(df["card_id"]) == ["k1", "k2", "k3"]
    assert str(df["due"].dt.tz) == "UTC"


def test_empty_store_gives_empty_dashboard():
    dashboard = build_progress_dashboard(InMemoryStateStore(), now=NOW)

    assert dashboard.total == 0
    assert dashboard.dist == [0, 0, 0, 0, 0, 0]
    assert dashboard.due_count == 0
    assert dashboard.leech_rows.empty


def test_level_distribution(populated_store):
    df = load_states_df(populated_store)
    assert compute_level_distribution(df) == [2, 1, 0, 0, 1, 1]


def test_due_cards_sorted_and_unscheduled_excluded(populated_store):
    due = compute_due_cards(load_states_df(populated_store), NOW)
    assert list(due["card_id"]) == ["k1", "k2"]


def test_leech_board_only_weak_cards(populated_store):
    board = compute_leech_board(load_states_df(populated_store))

    assert list(board["card_id"]) == ["k1", "k2"]
    assert list(board["leech_count"]) == [5, 3]


def test_dashboard_for_card_type(populated_store):
    dashboard = build_progress_dashboard(populated_store, "kanji", now=NOW)

    assert dashboard.card_type == "kanji"
    assert dashboard.total == 3
    assert dashboard.dist == [1, 1, 0, 0, 1, 0]
    assert dashboard.due_count == 2
    assert dashboard.leech_count == 3
    assert list(dashboard.leech_rows["card_id"]) == ["k1", "k2"]


def test_dashboard_since_days(populated_store):
    dashboard = build_progress_dashboard(populated_store, now=NOW, since_days=7)

    assert dashboard.total == 3
    assert sorted(dashboard.due_cards["card_id"]) == ["k1"]


def test_export_with_card_content(populated_store):
    cards = {"k1": {"front": "日", "back": "sun"}}

    df = export_progress_rows(populated_store, lookup_card=cards.get)

    assert list(df["card_id"]) == ["k1", "k2", "k3", "v1", "v2"]
    assert df.loc[0, "front"] == "日"
    assert df.loc[1, "front"] is None
    assert df.loc[1, "back"] is None
    assert df["front"].dtype == object


def test_leech_board_can_include_pending_cards(populated_store):
    populated_store.upsert_state(MemoryState(card_id="k4", card_type="kanji", level=1, leech_count=1))
    populated_store.upsert_state(MemoryState(card_id="k5", card_type="kanji", level=0, leech_count=0))
    df = load_states_df(populated_store, "kanji")

    assert list(compute_leech_board(df)["card_id"]) == ["k1", "k2"]
    assert list(compute_leech_board(df, include_pending=True)["card_id"]) == ["k1", "k2", "k4"]


def test_dashboard_board_lists_pending_cards(populated_store):
    populated_store.upsert_state(MemoryState(card_id="k4", card_type="kanji", level=0, leech_count=2))

    dashboard = build_progress_dashboard(populated_store, "kanji", now=NOW)

    assert list(dashboard.leech_rows["card_id"]) == ["k1", "k2", "k4"]
    assert dashboard.leech_count == 3
