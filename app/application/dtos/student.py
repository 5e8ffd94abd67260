"""DTOs for students, class history and promotions (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import date, datetime

from app.application.dtos.transition import TransitionResult


@dataclass(frozen=True)
class StudentResult:
    """Student read-model."""

    id: str
    admission_number: str
    first_name: str
    last_name: str
    current_class: str | None
    stream: str | None
    status: str
    status_end_date: date | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class PendingRestorationResult:
    """Student whose time-bounded status is due to auto-restore soon."""

    student_id: str
    admission_number: str
    full_name: str
    status: str
    status_end_date: date
    days_remaining: int


@dataclass(frozen=True)
class StudentClassHistoryCreate:
    """Input for recording a promotion outcome."""

    student_id: str
    academic_session_id: str
    from_class: str | None
    from_stream: str | None
    to_class: str | None
    to_stream: str | None
    promotion_status: str
    promoted_by: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class StudentClassHistoryResult:
    """Class history row read-model."""

    id: str
    student_id: str
    academic_session_id: str
    from_class: str | None
    from_stream: str | None
    to_class: str | None
    to_stream: str | None
    promotion_status: str
    promoted_by: str | None
    notes: str | None
    created_at: datetime


@dataclass(frozen=True)
class PromotionResult:
    """Outcome of promoting one student."""

    student_id: str
    history: StudentClassHistoryResult
    transition: TransitionResult | None = None


@dataclass(frozen=True)
class BulkPromotionResult:
    """Outcome of promoting a class."""

    promoted: tuple[PromotionResult, ...]
    skipped_student_ids: tuple[str, ...]
