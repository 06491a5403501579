"""
Ports (interfaces) for card state and grade history.

These define the contract that storage adapters must implement.
The grading service depends on these abstractions, not on a database.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from jp_trainer.srs.memory_state import GradeEvent, MemoryState


class StateStore(ABC):
    """
    Port for the one-record-per-card memory state.

    Implementations:
        - SqlStateStore: SQLAlchemy table memory_levels.
        - InMemoryStateStore: dict-backed, for tests and scripts.
    """

    @abstractmethod
    def read_state(self, card_id: str) -> Optional[MemoryState]:
        """
        Fetch the current state of a card.

        Returns:
            MemoryState, or None if the card was never graded.
        """
        pass

    @abstractmethod
    def upsert_state(self, state: MemoryState) -> None:
        """
        Insert or replace the state for state.card_id.

        Must be idempotent: writing the same state twice is harmless.
        """
        pass

    @abstractmethod
    def list_states(self, card_type: Optional[str] = None) -> list[MemoryState]:
        """
        All stored states, optionally filtered by card type.
        """
        pass


class EventLog(ABC):
    """
    Port for the append-only grade history.

    Reads must come back in a total order consistent with append order.
    """

    @abstractmethod
    def append_event(
        self,
        card_id: str,
        quality: int,
        meta: Optional[dict[str, Any]] = None
    ) -> GradeEvent:
        """
        Append one grade event.

        Returns:
            The stored event, with id and created_at assigned by the log.
        """
        pass

    @abstractmethod
    def read_events_desc(self, card_id: str, offset: int, limit: int) -> list[GradeEvent]:
        """
        Page through a card's events, most recent first.

        Args:
            card_id: Card to read
            offset: Number of newer events to skip
            limit: Maximum events to return

        Returns:
            Up to limit events; fewer means the history is exhausted.
        """
        pass


class CardRegistry(ABC):
    """
    Port for the external card catalogue.

    Implementations:
        - SqlCardRegistry: cards table next to memory_levels.
        - MongoCardRegistry: MongoDB cards collection.
        - InMemoryCardRegistry: a plain set of ids.
    """

    @abstractmethod
    def card_exists(self, card_id: str) -> bool:
        """True if card_id refers to a known, non-deleted card."""
        pass
