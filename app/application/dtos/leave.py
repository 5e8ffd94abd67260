"""DTOs for leave requests and balances."""

from dataclasses import dataclass, field
from datetime import date, datetime

from app.application.dtos.transition import TransitionResult


@dataclass(frozen=True)
class LeaveRequestCreate:
    """Input for persisting a new leave request."""

    teacher_id: str
    leave_type_id: str
    start_date: date
    end_date: date
    working_days: int
    academic_year: str
    reason: str | None = None


@dataclass(frozen=True)
class LeaveRequestResult:
    """Leave request read-model."""

    id: str
    teacher_id: str
    leave_type_id: str
    start_date: date
    end_date: date
    working_days: int
    academic_year: str
    reason: str | None
    status: str
    rejection_reason: str | None
    decided_by: str | None
    decided_at: datetime | None


@dataclass(frozen=True)
class LeaveBalanceResult:
    """Leave balance for a teacher, leave type and academic year."""

    id: str
    teacher_id: str
    leave_type_id: str
    academic_year: str
    total_days: int
    used_days: int

    @property
    def remaining_days(self) -> int:
        return self.total_days - self.used_days


@dataclass(frozen=True)
class LeaveDecisionResult:
    """Leave request after a decision, with the transitions it caused."""

    request: LeaveRequestResult
    transitions: tuple[TransitionResult, ...] = field(default_factory=tuple)
