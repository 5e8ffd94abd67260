"""Application DTOs (no ORM dependency)."""

from app.application.dtos.aggregate import AggregateProgress, AggregateResult
from app.application.dtos.transition import (
    SubjectStatusSnapshot,
    TransitionCommand,
    TransitionRecordResult,
    TransitionResult,
    TransitionToAppend,
)

__all__ = [
    "AggregateProgress",
    "AggregateResult",
    "SubjectStatusSnapshot",
    "TransitionCommand",
    "TransitionRecordResult",
    "TransitionResult",
    "TransitionToAppend",
]
