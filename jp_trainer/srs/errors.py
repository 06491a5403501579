"""
Error taxonomy for grading and scheduling.

Pure computation errors are raised synchronously; I/O errors from the
stores are wrapped in StoreUnavailable so callers can decide to retry.
"""

from __future__ import annotations

from typing import Any, Optional


class SrsError(Exception):
    """Base class for all SRS errors."""
    retryable = False


class InvalidGradeInput(SrsError, ValueError):
    """None of quality / new_level / final resolves to a finite number."""

    def __init__(self, message: str, fields: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.fields = fields or {}


class MissingCard(SrsError, LookupError):
    """card_id is empty or unknown to the card registry."""

    def __init__(self, card_id: Any):
        super().__init__(f"Unknown card: {card_id!r}")
        self.card_id = card_id


class StoreUnavailable(SrsError):
    """The state store or event log could not be read or written."""
    retryable = True


class InconsistentHistory(UserWarning):
    """A grade event with an unparseable quality stopped a leech scan."""
