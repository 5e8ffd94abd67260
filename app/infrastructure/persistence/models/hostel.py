"""Dormitory room and bed allocation ORM models."""

from datetime import date

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import AllocationStatus, RoomStatus, SubjectKind
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import SchoolModel, StatusTrackedModel


class DormitoryRoom(StatusTrackedModel, Base):
    """Room with a fixed capacity. Status derived from active allocations."""

    __tablename__ = "dormitory_room"
    __status_default__ = RoomStatus.AVAILABLE.value
    __subject_kind__ = SubjectKind.DORMITORY_ROOM

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    dormitory: Mapped[str] = mapped_column(String(100), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (CheckConstraint("capacity > 0", name="ck_dormitory_room_capacity"),)


class RoomAllocation(SchoolModel, Base):
    """A student's bed in a room. Active until vacated."""

    __tablename__ = "room_allocation"

    room_id: Mapped[str] = mapped_column(
        String, ForeignKey("dormitory_room.id", ondelete="CASCADE"), nullable=False
    )
    student_id: Mapped[str] = mapped_column(
        String, ForeignKey("student.id", ondelete="CASCADE"), nullable=False, index=True
    )
    allocated_on: Mapped[date] = mapped_column(Date, nullable=False)
    vacated_on: Mapped[date | None] = mapped_column(Date)
    allocated_by: Mapped[str | None] = mapped_column(String)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AllocationStatus.ACTIVE.value
    )

    __table_args__ = (Index("ix_room_allocation_room_status", "room_id", "status"),)
