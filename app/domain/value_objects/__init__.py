"""Domain value objects and shared value types."""

from app.domain.value_objects.core import SubjectRef, TriggerRef
from app.domain.value_objects.transition_table import (
    TRANSITION_TABLES,
    TransitionTable,
)

__all__ = [
    "SubjectRef",
    "TriggerRef",
    "TransitionTable",
    "TRANSITION_TABLES",
]
