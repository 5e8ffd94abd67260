"""Domain value objects for the school status ledger.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass

from app.domain.enums import SubjectKind

# Action types are snake_case identifiers (e.g. disciplinary_incident).
_ACTION_TYPE_RE = re.compile(r"^[a-z][a-z0-9_]{0,63}$")


@dataclass(frozen=True)
class SubjectRef:
    """Reference to a status-tracked entity (type + id)."""

    subject_type: SubjectKind
    subject_id: str

    def __post_init__(self) -> None:
        if not isinstance(self.subject_type, SubjectKind):
            object.__setattr__(self, "subject_type", SubjectKind(self.subject_type))
        if not self.subject_id:
            raise ValueError("subject_id must be a non-empty string")

    def __str__(self) -> str:
        return f"{self.subject_type.value}:{self.subject_id}"


@dataclass(frozen=True)
class TriggerRef:
    """Polymorphic reference to the action that caused a transition.

    Not a foreign key: deleting the action never deletes the history that
    points at it, so the ledger can still be queried for reversal.
    """

    action_type: str
    action_id: str

    def __post_init__(self) -> None:
        if not self.action_type or not _ACTION_TYPE_RE.match(self.action_type):
            raise ValueError(
                "action_type must be snake_case (e.g. 'disciplinary_incident')"
            )
        if not self.action_id:
            raise ValueError("action_id must be a non-empty string")

    def __str__(self) -> str:
        return f"{self.action_type}:{self.action_id}"
