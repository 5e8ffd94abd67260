"""DTOs for status transitions and the history ledger (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import date, datetime

from app.domain.enums import ReasonCategory, SubjectKind
from app.domain.value_objects.core import SubjectRef, TriggerRef


@dataclass(frozen=True)
class SubjectStatusSnapshot:
    """Live status fields of a subject row (read under lock by the engine)."""

    subject_type: SubjectKind
    subject_id: str
    status: str
    status_version: int
    status_effective_at: datetime | None = None
    status_end_date: date | None = None
    status_auto_restore: bool = False

    @property
    def ref(self) -> SubjectRef:
        return SubjectRef(self.subject_type, self.subject_id)

    def is_expired(self, as_of: date) -> bool:
        """Return True if the status carries an end date before as_of and may auto-restore."""
        return (
            self.status_auto_restore
            and self.status_end_date is not None
            and self.status_end_date < as_of
        )


@dataclass(frozen=True)
class TransitionCommand:
    """Input to PropagationEngine.request_transition."""

    subject_type: SubjectKind
    subject_id: str
    desired_status: str
    reason: ReasonCategory
    trigger: TriggerRef | None = None
    effective_date: date | None = None
    end_date: date | None = None
    auto_restore: bool = False
    actor_id: str | None = None
    note: str | None = None
    expected_status: str | None = None
    privileged: bool = False
    reverses_transition_id: int | None = None


@dataclass(frozen=True)
class TransitionToAppend:
    """A ledger record ready to insert (id and created_at assigned by the store)."""

    subject_type: SubjectKind
    subject_id: str
    previous_status: str
    new_status: str
    effective_date: date
    reason: ReasonCategory
    end_date: date | None = None
    auto_restore: bool = False
    trigger_action_type: str | None = None
    trigger_action_id: str | None = None
    actor_id: str | None = None
    note: str | None = None
    reverses_transition_id: int | None = None


@dataclass(frozen=True)
class TransitionRecordResult:
    """Immutable ledger record read-model."""

    id: int
    subject_type: SubjectKind
    subject_id: str
    previous_status: str
    new_status: str
    effective_date: date
    end_date: date | None
    auto_restore: bool
    reason: ReasonCategory
    trigger_action_type: str | None
    trigger_action_id: str | None
    actor_id: str | None
    note: str | None
    reverses_transition_id: int | None
    created_at: datetime

    @property
    def trigger(self) -> TriggerRef | None:
        if self.trigger_action_type and self.trigger_action_id:
            return TriggerRef(self.trigger_action_type, self.trigger_action_id)
        return None

    @property
    def is_compensation(self) -> bool:
        return self.reverses_transition_id is not None


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of one engine operation on one subject."""

    success: bool
    subject_type: SubjectKind
    subject_id: str
    previous_status: str | None
    new_status: str | None
    transition_id: int | None = None
    changed: bool = False
    error: str | None = None
