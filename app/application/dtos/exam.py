"""DTOs for exam schedules, grade points and results."""

from dataclasses import dataclass
from datetime import date

from app.application.dtos.aggregate import AggregateResult


@dataclass(frozen=True)
class ExamScheduleResult:
    """Exam schedule read-model."""

    id: str
    examination_id: str
    subject_name: str
    class_name: str
    stream: str | None
    exam_date: date | None
    total_marks: float
    passing_marks: float
    status: str


@dataclass(frozen=True)
class GradePointResult:
    """One band of the grading scale."""

    grade: str
    lower_mark: float
    upper_mark: float
    points: float
    remarks: str | None = None


@dataclass(frozen=True)
class ExamResultEntry:
    """One submitted mark."""

    student_id: str
    marks_obtained: float | None = None
    is_absent: bool = False
    remarks: str | None = None


@dataclass(frozen=True)
class ExamResultWrite:
    """Graded result ready to upsert."""

    schedule_id: str
    student_id: str
    marks_obtained: float | None
    grade: str | None
    points: float | None
    is_absent: bool
    remarks: str | None = None
    recorded_by: str | None = None


@dataclass(frozen=True)
class ExamResultResult:
    """Exam result read-model."""

    id: str
    schedule_id: str
    student_id: str
    marks_obtained: float | None
    grade: str | None
    points: float | None
    is_absent: bool
    remarks: str | None


@dataclass(frozen=True)
class ResultSubmissionResult:
    """Outcome of saving a batch of results for one schedule."""

    schedule_id: str
    saved: tuple[ExamResultResult, ...]
    schedule: AggregateResult
    examination: AggregateResult | None
    status: str
