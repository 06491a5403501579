"""
SRS - Spaced Repetition Scheduling and Leech Detection

Main API for the Japanese trainer's memory model.

This package implements:
- A small closed-form memory model: level, stability, difficulty, due
- Retrievability R = exp(-Δt / (1.5 * S)) dampening stability growth
- Resolution of heterogeneous client grades into one 0-5 quality
- Leech detection by rescanning the grade history

Quick start:
    from jp_trainer import srs

    store = srs.InMemoryStateStore()
    log = srs.InMemoryEventLog()
    service = srs.GradingService(store, log)

    result = service.grade({"card_id": "kanji-42", "quality": 4})
    result.memory_state.due  # now + 6 days

    # Pure transition (no I/O)
    next_state = srs.transition(srs.initialize_new_state("c1"), srs.Grade.GOOD)
"""

# Core scheduler API (algorithm logic)
from jp_trainer.srs.scheduler import next_interval_days, simulate_grades, transition

# Grade resolution
from jp_trainer.srs.grades import (
    ExplicitQuality,
    FinalScore,
    GradeInput,
    GradeRequest,
    TargetLevel,
    resolve_grade,
    resolve_request,
)

# Leech detection
from jp_trainer.srs.leech import LeechStatus, compute_leech, count_fail_streak, leech_board

# Grading service and ports
from jp_trainer.srs.grading import GradeResult, GradingService
from jp_trainer.srs.ports import CardRegistry, EventLog, StateStore
from jp_trainer.srs.memory_store import (
    InMemoryCardRegistry,
    InMemoryEventLog,
    InMemoryStateStore,
)

# Errors
from jp_trainer.srs.errors import (
    InconsistentHistory,
    InvalidGradeInput,
    MissingCard,
    SrsError,
    StoreUnavailable,
)

# Constants and parameters
from jp_trainer.srs.constants import (
    Grade,
    DEFAULT_DIFFICULTY,
    DEFAULT_STABILITY,
    D_MIN,
    D_MAX,
    S_MIN,
    RETENTION_SPAN,
    LEECH_THRESHOLD,
)

# Memory state
from jp_trainer.srs.memory_state import (
    GradeEvent,
    MemoryState,
    calculate_retrievability,
    get_elapsed_days,
    initialize_new_state,
)


__all__ = [
    # Core algorithm
    "transition",
    "simulate_grades",
    "next_interval_days",

    # Grades
    "GradeRequest",
    "GradeInput",
    "ExplicitQuality",
    "TargetLevel",
    "FinalScore",
    "resolve_grade",
    "resolve_request",

    # Leeches
    "LeechStatus",
    "compute_leech",
    "count_fail_streak",
    "leech_board",

    # Service and ports
    "GradingService",
    "GradeResult",
    "StateStore",
    "EventLog",
    "CardRegistry",
    "InMemoryStateStore",
    "InMemoryEventLog",
    "InMemoryCardRegistry",

    # Errors
    "SrsError",
    "InvalidGradeInput",
    "MissingCard",
    "StoreUnavailable",
    "InconsistentHistory",

    # Enums
    "Grade",

    # Memory state
    "MemoryState",
    "GradeEvent",
    "calculate_retrievability",
    "get_elapsed_days",
    "initialize_new_state",

    # Parameters
    "DEFAULT_DIFFICULTY",
    "DEFAULT_STABILITY",
    "D_MIN",
    "D_MAX",
    "S_MIN",
    "RETENTION_SPAN",
    "LEECH_THRESHOLD",
]
