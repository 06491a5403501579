"""
Leech Detection

A leech is a card the learner keeps failing. The count is recomputed from
the grade history on every grading event instead of being kept as a
running counter, so corrected or backfilled history is always honored.

Rules:
- Walk events from the most recent backwards
- quality <= 1 extends the failure streak
- quality > 1 ends the scan
- an unparseable quality ends the scan (conservative)
- leech_count = max(0, streak - 1); is_leech = leech_count >= 3
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from jp_trainer.srs.constants import (
    LEECH_BOARD_LEVELS,
    LEECH_BOARD_LIMIT,
    LEECH_FAIL_QUALITY_MAX,
    LEECH_PAGE_SIZE,
    LEECH_THRESHOLD,
)
from jp_trainer.srs.errors import InconsistentHistory
from jp_trainer.srs.grades import to_finite_number
from jp_trainer.srs.memory_state import MemoryState
from jp_trainer.srs.ports import EventLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeechStatus:
    """Result of a leech scan for one card."""
    fail_streak: int
    leech_count: int
    is_leech: bool


def leech_status_from_streak(fail_streak: int) -> LeechStatus:
    """
    The first failure in a streak is normal noise; each further
    consecutive failure counts once.
    """
    leech_count = max(0, fail_streak - 1)
    return LeechStatus(
        fail_streak=fail_streak,
        leech_count=leech_count,
        is_leech=leech_count >= LEECH_THRESHOLD,
    )


def _scan(qualities: Iterable[Any], card_id: Optional[str] = None) -> tuple[int, bool]:
    """
    Count leading failures.

    Returns:
        (fail_streak, stopped) where stopped is True when a non-failure or an
        unparseable quality ended the scan.
    """
    fail_streak = 0
    for raw_quality in qualities:
        quality = to_finite_number(raw_quality)
        if quality is None:
            logger.warning(
                "Unparseable quality %r in history of card %s; stopping leech scan at streak %d",
                raw_quality, card_id, fail_streak,
            )
            warnings.warn(
                f"Unparseable quality {raw_quality!r} for card {card_id}",
                InconsistentHistory,
                stacklevel=3,
            )
            return fail_streak, True
        if quality > LEECH_FAIL_QUALITY_MAX:
            return fail_streak, True
        fail_streak += 1
    return fail_streak, False


def count_fail_streak(qualities: Iterable[Any]) -> int:
    """
    Number of consecutive failures at the head of a most-recent-first
    sequence of qualities.

    Example:
        [0, 1, 0, 3, 5] -> 3
    """
    fail_streak, _ = _scan(qualities)
    return fail_streak


def compute_leech(
    card_id: str,
    event_log: EventLog,
    page_size: int = LEECH_PAGE_SIZE
) -> LeechStatus:
    """
    Recompute the leech status of a card from its grade history.

    Reads the event log page by page, newest first, and stops as soon as the
    streak is broken, so long histories of mostly-successful cards cost one
    page.

    Args:
        card_id: Card to scan
        event_log: Source of grade events
        page_size: Events fetched per read

    Returns:
        LeechStatus with fail_streak, leech_count and is_leech

    Raises:
        Whatever the event log raises; a failed read must not produce a
        leech state.
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")

    fail_streak = 0
    offset = 0
    while True:
        page = event_log.read_events_desc(card_id, offset, page_size)
        page_streak, stopped = _scan((event.quality for event in page), card_id)
        fail_streak += page_streak
        if stopped or len(page) < page_size:
            break
        offset += page_size

    return leech_status_from_streak(fail_streak)


def leech_board(
    states: Iterable[MemoryState],
    limit: int = LEECH_BOARD_LIMIT,
    include_pending: bool = False
) -> list[MemoryState]:
    """
    Flagged leeches that are still weak (level 0 or 1), worst first.

    With include_pending, weak cards that have started failing
    (leech_count > 0) are listed before they cross the threshold.
    """
    rows = [
        s for s in states
        if s.level in LEECH_BOARD_LEVELS
        and (s.is_leech or (include_pending and s.leech_count > 0))
    ]
    rows.sort(key=lambda s: (-s.leech_count, s.card_id))
    return rows[:limit]
