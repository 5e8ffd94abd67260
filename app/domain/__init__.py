"""Domain layer: value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import ReasonCategory, RejectionReason, SubjectKind
from app.domain.exceptions import (
    CurrentSessionNotFoundException,
    PersistenceException,
    ResourceNotFoundException,
    SchoolStatusException,
    StaleStatusException,
    StatusConflictException,
    SubjectLockedException,
    TransitionRejectedException,
    ValidationException,
)
from app.domain.value_objects import SubjectRef, TransitionTable, TriggerRef

__all__ = [
    "CurrentSessionNotFoundException",
    "PersistenceException",
    "ReasonCategory",
    "RejectionReason",
    "ResourceNotFoundException",
    "SchoolStatusException",
    "StaleStatusException",
    "StatusConflictException",
    "SubjectKind",
    "SubjectLockedException",
    "SubjectRef",
    "TransitionRejectedException",
    "TransitionTable",
    "TriggerRef",
    "ValidationException",
]
