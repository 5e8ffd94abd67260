"""Teacher and leave ORM models."""

from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import LeaveStatus, SubjectKind, TeacherStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import SchoolModel, StatusTrackedModel


class Teacher(StatusTrackedModel, Base):
    """Teacher. Table: teacher. Status: active / on_leave."""

    __tablename__ = "teacher"
    __status_default__ = TeacherStatus.ACTIVE.value
    __subject_kind__ = SubjectKind.TEACHER

    staff_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))


class LeaveType(SchoolModel, Base):
    """Kind of leave (annual, sick, ...). Table: leave_type."""

    __tablename__ = "leave_type"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    default_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class LeaveBalance(SchoolModel, Base):
    """Days allowed and used per teacher, leave type and academic year."""

    __tablename__ = "leave_balance"

    teacher_id: Mapped[str] = mapped_column(
        String, ForeignKey("teacher.id", ondelete="CASCADE"), nullable=False, index=True
    )
    leave_type_id: Mapped[str] = mapped_column(
        String, ForeignKey("leave_type.id"), nullable=False
    )
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    total_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    used_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "teacher_id", "leave_type_id", "academic_year", name="uq_leave_balance_year"
        ),
        CheckConstraint("used_days >= 0", name="ck_leave_balance_used_non_negative"),
    )


class LeaveRequest(StatusTrackedModel, Base):
    """Leave request. Table: leave_request. Status: pending -> approved/rejected/cancelled."""

    __tablename__ = "leave_request"
    __status_default__ = LeaveStatus.PENDING.value
    __subject_kind__ = SubjectKind.LEAVE_REQUEST

    teacher_id: Mapped[str] = mapped_column(
        String, ForeignKey("teacher.id", ondelete="CASCADE"), nullable=False, index=True
    )
    leave_type_id: Mapped[str] = mapped_column(
        String, ForeignKey("leave_type.id"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    working_days: Mapped[int] = mapped_column(Integer, nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text)
    rejection_reason: Mapped[str | None] = mapped_column(Text)
    decided_by: Mapped[str | None] = mapped_column(String)
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_leave_request_dates"),
    )
