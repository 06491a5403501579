"""
Grading - Main API for Applying Reviews

Ties the grade resolver, event log, leech detector, scheduler and state
store together into one grading operation per card.

Main workflow:
1. Validate the card id (and check the card registry, if one is given)
2. Resolve the inbound payload to a canonical grade (no I/O before this)
3. Read the current memory state (or initialize a new card)
4. Append the grade event - the durable record of the review
5. Rescan the event log for the leech streak
6. Compute the next state and upsert it

If step 6 fails the appended event is still authoritative: recompute_state()
rebuilds the derived state from history. The service never retries.

Same-card grading must be serialized by the caller; different cards are
independent.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from dotenv import load_dotenv

from jp_trainer.srs import leech, scheduler
from jp_trainer.srs.constants import LEECH_PAGE_SIZE
from jp_trainer.srs.errors import MissingCard
from jp_trainer.srs.grades import GradeRequest, resolve_grade
from jp_trainer.srs.memory_state import GradeEvent, MemoryState, initialize_new_state
from jp_trainer.srs.ports import CardRegistry, EventLog, StateStore

load_dotenv()

logger = logging.getLogger(__name__)


def get_leech_page_size() -> int:
    """Leech scan page size, overridable with LEECH_PAGE_SIZE."""
    raw = os.getenv("LEECH_PAGE_SIZE")
    if not raw:
        return LEECH_PAGE_SIZE
    if not raw.strip().isdigit() or int(raw) <= 0:
        raise ValueError(f"LEECH_PAGE_SIZE must be a positive integer, got {raw!r}")
    return int(raw)


@dataclass(frozen=True)
class GradeResult:
    """Outcome of one grading call."""
    quality: int
    memory_state: MemoryState
    event: GradeEvent
    leech: leech.LeechStatus


class GradingService:
    """
    Applies grading events to cards.

    Collaborators are injected so the service can run against Postgres,
    in-memory fakes, or anything else implementing the ports.
    """

    def __init__(
        self,
        state_store: StateStore,
        event_log: EventLog,
        card_registry: Optional[CardRegistry] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        leech_page_size: Optional[int] = None
    ):
        self.state_store = state_store
        self.event_log = event_log
        self.card_registry = card_registry
        self.clock = clock
        self.leech_page_size = leech_page_size or get_leech_page_size()

    def _check_card(self, card_id: Optional[str]) -> str:
        if not card_id:
            raise MissingCard(card_id)
        if self.card_registry is not None and not self.card_registry.card_exists(card_id):
            raise MissingCard(card_id)
        return card_id

    def grade(self, request: Union[GradeRequest, Mapping[str, Any]]) -> GradeResult:
        """
        Grade one card.

        Args:
            request: GradeRequest or a raw payload dict with card_id and one
                of quality / new_level (+ base_level) / final

        Returns:
            GradeResult with the canonical quality and the updated state

        Raises:
            MissingCard: card_id empty or unknown
            InvalidGradeInput: no usable grade in the payload
            StoreUnavailable: a store read or write failed
        """
        if not isinstance(request, GradeRequest):
            request = GradeRequest.model_validate(dict(request))

        card_id = self._check_card(request.card_id)
        quality = resolve_grade(request.to_grade_input(), request.base_level)

        previous = self.state_store.read_state(card_id)
        if previous is None:
            previous = initialize_new_state(card_id, request.card_type)

        event = self.event_log.append_event(card_id, quality, request.event_meta())
        status = leech.compute_leech(card_id, self.event_log, self.leech_page_size)

        next_state = scheduler.transition(previous, quality, self.clock())
        next_state = replace(
            next_state,
            leech_count=status.leech_count,
            is_leech=status.is_leech,
            card_type=next_state.card_type or request.card_type,
        )
        self.state_store.upsert_state(next_state)

        logger.info(
            "Graded card %s: quality=%d level %d->%d due=%s leech_count=%d",
            card_id, quality, previous.level, next_state.level,
            next_state.due.isoformat() if next_state.due else None, status.leech_count,
        )
        return GradeResult(
            quality=quality,
            memory_state=next_state,
            event=event,
            leech=status,
        )

    def grade_session(
        self,
        card_type: Optional[str],
        rows: Iterable[Mapping[str, Any]]
    ) -> list[GradeResult]:
        """
        Grade every card of a finished session by its final score.

        Each row needs card_id and final; warmup/recall and any other keys
        travel in the event meta. Rows are graded one by one; the first
        failure propagates and earlier rows stay committed.
        """
        results = []
        for row in rows:
            extra = {k: v for k, v in row.items() if k not in ("card_id", "final", "quality")}
            payload = {
                "card_id": row.get("card_id"),
                "type": card_type,
                "final": row.get("final"),
                "quality": row.get("quality"),
                "source": row.get("source") or "session",
                "meta": extra,
            }
            results.append(self.grade(payload))
        return results

    def recompute_state(self, card_id: str) -> Optional[MemoryState]:
        """
        Refresh derived leech fields of a stored state from the event log.

        Used after a lost state write or a history backfill. Returns the
        refreshed state, or None when the card has no stored state.
        """
        state = self.state_store.read_state(card_id)
        if state is None:
            return None
        status = leech.compute_leech(card_id, self.event_log, self.leech_page_size)
        refreshed = replace(state, leech_count=status.leech_count, is_leech=status.is_leech)
        if refreshed != state:
            self.state_store.upsert_state(refreshed)
            logger.info("Recomputed leech state for card %s: %s", card_id, status)
        return refreshed

    def preview(self, card_id: str, now: Optional[datetime] = None) -> dict[int, MemoryState]:
        """Next state for every grade 0-5, without writing anything."""
        state = self.state_store.read_state(card_id) or initialize_new_state(card_id)
        return scheduler.simulate_grades(state, now or self.clock())
