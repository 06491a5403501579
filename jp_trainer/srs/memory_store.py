"""In-memory state store, event log and card registry (tests, scripts, previews)."""

from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from jp_trainer.srs.memory_state import GradeEvent, MemoryState
from jp_trainer.srs.ports import CardRegistry, EventLog, StateStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryStateStore(StateStore):
    """Dict of card_id -> MemoryState."""

    def __init__(self) -> None:
        self._states: dict[str, MemoryState] = {}

    def read_state(self, card_id: str) -> Optional[MemoryState]:
        state = self._states.get(str(card_id))
        return replace(state) if state is not None else None

    def upsert_state(self, state: MemoryState) -> None:
        self._states[state.card_id] = replace(state)

    def list_states(self, card_type: Optional[str] = None) -> list[MemoryState]:
        return [
            replace(s) for s in self._states.values()
            if card_type is None or s.card_type == card_type
        ]


class InMemoryEventLog(EventLog):
    """
    Append-only list of events per card.

    Events keep their append order; created_at comes from the injected
    clock and is never used for ordering.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._events: dict[str, list[GradeEvent]] = {}
        self._ids = itertools.count(1)
        self._clock = clock

    def append_event(
        self,
        card_id: str,
        quality: Any,
        meta: Optional[dict[str, Any]] = None
    ) -> GradeEvent:
        event = GradeEvent(
            id=next(self._ids),
            card_id=str(card_id),
            quality=quality,
            created_at=self._clock(),
            meta=dict(meta or {}),
        )
        self._events.setdefault(event.card_id, []).append(event)
        return event

    def read_events_desc(self, card_id: str, offset: int, limit: int) -> list[GradeEvent]:
        history = self._events.get(str(card_id), [])
        newest_first = history[::-1]
        return newest_first[offset:offset + limit]

    def seed(self, card_id: str, qualities_oldest_first: Iterable[Any]) -> None:
        """Append a history in chronological order (oldest first)."""
        for quality in qualities_oldest_first:
            self.append_event(card_id, quality, {"source": "seed"})


class InMemoryCardRegistry(CardRegistry):
    """Set of known card ids."""

    def __init__(self, card_ids: Iterable[str] = ()) -> None:
        self._card_ids = {str(c) for c in card_ids}

    def add(self, card_id: str) -> None:
        self._card_ids.add(str(card_id))

    def card_exists(self, card_id: str) -> bool:
        return str(card_id) in self._card_ids
