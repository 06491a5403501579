"""
Data-loading helpers for progress dashboards.
"""

from __future__ import annotations

from typing import Callable, Optional

import pandas as pd

from jp_trainer.progress.types import STATE_COLUMNS
from jp_trainer.srs.ports import StateStore


def load_states_df(store: StateStore, card_type: Optional[str] = None) -> pd.DataFrame:
    """
    Load memory states into a dataframe with UTC timestamp columns.
    """
    states = store.list_states(card_type)
    if not states:
        return pd.DataFrame(columns=STATE_COLUMNS)

    df = pd.DataFrame([{col: getattr(s, col) for col in STATE_COLUMNS} for s in states])
    df["last_reviewed_at"] = pd.to_datetime(df["last_reviewed_at"], utc=True, errors="coerce")
    df["due"] = pd.to_datetime(df["due"], utc=True, errors="coerce")
    df["level"] = df["level"].fillna(0).astype("int64")
    df["leech_count"] = df["leech_count"].fillna(0).astype("int64")
    df["is_leech"] = df["is_leech"].fillna(False).astype(bool)
    return df


def attach_card_content(
    states_df: pd.DataFrame,
    lookup_card: Callable[[str], Optional[dict]]
) -> pd.DataFrame:
    """
    Add front/back columns from the card registry; unknown cards keep None.
    """
    df = states_df.copy()
    cards = {card_id: lookup_card(card_id) or {} for card_id in df["card_id"]}
    for column in ("front", "back"):
        # object dtype keeps None (a string dtype would turn it into NaN)
        df[column] = pd.Series(
            [cards[card_id].get(column) for card_id in df["card_id"]],
            index=df.index,
            dtype="object",
        )
    return df
