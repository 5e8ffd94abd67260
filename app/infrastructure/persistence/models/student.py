"""Student and class history ORM models."""

from datetime import date

from sqlalchemy import Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import StudentStatus, SubjectKind
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import SchoolModel, StatusTrackedModel


class Student(StatusTrackedModel, Base):
    """Student. Table: student. Status is engine-owned (see StatusTrackedMixin)."""

    __tablename__ = "student"
    __status_default__ = StudentStatus.ACTIVE.value
    __subject_kind__ = SubjectKind.STUDENT

    admission_number: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    current_class: Mapped[str | None] = mapped_column(String(50))
    stream: Mapped[str | None] = mapped_column(String(50))

    __table_args__ = (Index("ix_student_class_stream", "current_class", "stream"),)


class StudentClassHistory(SchoolModel, Base):
    """One promotion outcome per student and session. Table: student_class_history."""

    __tablename__ = "student_class_history"

    student_id: Mapped[str] = mapped_column(
        String, ForeignKey("student.id", ondelete="CASCADE"), nullable=False, index=True
    )
    academic_session_id: Mapped[str] = mapped_column(
        String, ForeignKey("academic_session.id"), nullable=False, index=True
    )
    from_class: Mapped[str | None] = mapped_column(String(50))
    from_stream: Mapped[str | None] = mapped_column(String(50))
    to_class: Mapped[str | None] = mapped_column(String(50))
    to_stream: Mapped[str | None] = mapped_column(String(50))
    promotion_status: Mapped[str] = mapped_column(String(20), nullable=False)
    promoted_by: Mapped[str | None] = mapped_column(String)
    notes: Mapped[str | None] = mapped_column(Text)
