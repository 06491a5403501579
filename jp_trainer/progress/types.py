"""
Types for progress dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd


STATE_COLUMNS = [
    "card_id",
    "card_type",
    "level",
    "stability",
    "difficulty",
    "last_reviewed_at",
    "due",
    "leech_count",
    "is_leech",
]


@dataclass(frozen=True)
class ProgressDashboardData:
    """
    Precomputed progress metrics for one card type (or all cards).
    """
    card_type: Optional[str]
    total: int
    dist: list[int]
    due_count: int
    leech_count: int
    due_cards: pd.DataFrame
    leech_rows: pd.DataFrame
