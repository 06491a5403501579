"""
Metric computations for progress dashboards.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from jp_trainer.srs.constants import LEECH_BOARD_LEVELS, LEECH_BOARD_LIMIT, LEVEL_MAX, LEVEL_MIN


def compute_level_distribution(states_df: pd.DataFrame) -> list[int]:
    """
    Number of cards at each level 0-5.
    """
    dist = [0] * (LEVEL_MAX + 1)
    if states_df.empty:
        return dist
    counts = states_df["level"].value_counts()
    for level, count in counts.items():
        if LEVEL_MIN <= int(level) <= LEVEL_MAX:
            dist[int(level)] = int(count)
    return dist


def compute_due_cards(states_df: pd.DataFrame, now: datetime) -> pd.DataFrame:
    """
    Cards whose due date has passed, most overdue first.

    Cards without a due date were never scheduled and are not due.
    """
    if states_df.empty:
        return states_df.copy()
    now_ts = pd.Timestamp(now)
    now_ts = now_ts.tz_localize("UTC") if now_ts.tzinfo is None else now_ts.tz_convert("UTC")
    due = states_df[states_df["due"].notna() & (states_df["due"] <= now_ts)]
    return due.sort_values(["due", "card_id"]).reset_index(drop=True)


def compute_reviewed_since(states_df: pd.DataFrame, now: datetime, since_days: float) -> pd.DataFrame:
    """
    Cards reviewed within the last since_days days.
    """
    if states_df.empty:
        return states_df.copy()
    now_ts = pd.Timestamp(now)
    now_ts = now_ts.tz_localize("UTC") if now_ts.tzinfo is None else now_ts.tz_convert("UTC")
    threshold = now_ts - pd.Timedelta(days=since_days)
    recent = states_df[states_df["last_reviewed_at"].notna() & (states_df["last_reviewed_at"] >= threshold)]
    return recent.reset_index(drop=True)


def compute_leech_board(
    states_df: pd.DataFrame,
    limit: int = LEECH_BOARD_LIMIT,
    include_pending: bool = False
) -> pd.DataFrame:
    """
    Flagged leeches still at level 0 or 1, highest leech_count first.

    include_pending also lists weak cards with a failure streak that has
    not reached the leech threshold yet (leech_count > 0).
    """
    if states_df.empty:
        return states_df.copy()
    flagged = states_df["is_leech"]
    if include_pending:
        flagged = flagged | (states_df["leech_count"] > 0)
    board = states_df[flagged & states_df["level"].isin(list(LEECH_BOARD_LEVELS))]
    board = board.sort_values(["leech_count", "card_id"], ascending=[False, True])
    return board.head(limit).reset_index(drop=True)
