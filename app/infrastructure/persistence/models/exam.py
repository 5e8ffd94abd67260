"""Examination, schedule, result and grading scale ORM models."""

from datetime import date

from sqlalchemy import Boolean, Date, Float, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import ExamStatus, SubjectKind
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import SchoolModel, StatusTrackedModel


class Examination(StatusTrackedModel, Base):
    """Examination (e.g. 'Term 1 End of Term'). Status derived from its schedules."""

    __tablename__ = "examination"
    __status_default__ = ExamStatus.SCHEDULED.value
    __subject_kind__ = SubjectKind.EXAMINATION

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    academic_session_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("academic_session.id"), index=True
    )


class ExamSchedule(StatusTrackedModel, Base):
    """One paper for one class/stream. Status derived from submitted results."""

    __tablename__ = "exam_schedule"
    __status_default__ = ExamStatus.SCHEDULED.value
    __subject_kind__ = SubjectKind.EXAM_SCHEDULE

    examination_id: Mapped[str] = mapped_column(
        String, ForeignKey("examination.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subject_name: Mapped[str] = mapped_column(String(100), nullable=False)
    class_name: Mapped[str] = mapped_column(String(50), nullable=False)
    stream: Mapped[str | None] = mapped_column(String(50))
    exam_date: Mapped[date | None] = mapped_column(Date)
    total_marks: Mapped[float] = mapped_column(Float, nullable=False, default=100)
    passing_marks: Mapped[float] = mapped_column(Float, nullable=False, default=40)


class ExamResult(SchoolModel, Base):
    """A student's result for one schedule. Unique per (schedule, student)."""

    __tablename__ = "exam_result"

    schedule_id: Mapped[str] = mapped_column(
        String, ForeignKey("exam_schedule.id", ondelete="CASCADE"), nullable=False
    )
    student_id: Mapped[str] = mapped_column(
        String, ForeignKey("student.id", ondelete="CASCADE"), nullable=False, index=True
    )
    marks_obtained: Mapped[float | None] = mapped_column(Float)
    grade: Mapped[str | None] = mapped_column(String(5))
    points: Mapped[float | None] = mapped_column(Float)
    is_absent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    remarks: Mapped[str | None] = mapped_column(Text)
    recorded_by: Mapped[str | None] = mapped_column(String)

    __table_args__ = (
        UniqueConstraint("schedule_id", "student_id", name="uq_exam_result_schedule_student"),
        Index("ix_exam_result_schedule", "schedule_id"),
    )


class GradePoint(SchoolModel, Base):
    """One band of the grading scale (lower_mark..upper_mark inclusive)."""

    __tablename__ = "grade_point"

    grade: Mapped[str] = mapped_column(String(5), nullable=False, unique=True)
    lower_mark: Mapped[float] = mapped_column(Float, nullable=False)
    upper_mark: Mapped[float] = mapped_column(Float, nullable=False)
    points: Mapped[float] = mapped_column(Float, nullable=False)
    remarks: Mapped[str | None] = mapped_column(String(100))
