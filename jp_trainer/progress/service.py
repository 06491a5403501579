"""
Service layer to assemble progress dashboards and exports.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

import pandas as pd

from jp_trainer.progress.metrics import (
    compute_due_cards,
    compute_leech_board,
    compute_level_distribution,
    compute_reviewed_since,
)
from jp_trainer.progress.queries import attach_card_content, load_states_df
from jp_trainer.progress.types import ProgressDashboardData
from jp_trainer.srs.ports import StateStore


def build_progress_dashboard(
    store: StateStore,
    card_type: Optional[str] = None,
    now: Optional[datetime] = None,
    since_days: Optional[float] = None
) -> ProgressDashboardData:
    """
    Build level distribution, due list and leech board for a card type.

    since_days limits the dashboard to cards reviewed in that window.
    """
    now = now or datetime.now(timezone.utc)
    states_df = load_states_df(store, card_type)
    if since_days is not None and since_days >= 0:
        states_df = compute_reviewed_since(states_df, now, since_days)

    due_cards = compute_due_cards(states_df, now)
    board = compute_leech_board(states_df, include_pending=True)

    return ProgressDashboardData(
        card_type=card_type,
        total=len(states_df),
        dist=compute_level_distribution(states_df),
        due_count=len(due_cards),
        leech_count=int(states_df["is_leech"].sum()) if not states_df.empty else 0,
        due_cards=due_cards,
        leech_rows=board,
    )


def export_progress_rows(
    store: StateStore,
    card_type: Optional[str] = None,
    lookup_card: Optional[Callable[[str], Optional[dict]]] = None
) -> pd.DataFrame:
    """
    Flat progress table (one row per card) for CSV/JSON export.
    """
    df = load_states_df(store, card_type)
    if lookup_card is not None and not df.empty:
        df = attach_card_content(df, lookup_card)
    return df.sort_values(["card_type", "card_id"], na_position="last").reset_index(drop=True) if not df.empty else df
