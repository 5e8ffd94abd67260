"""Disciplinary incident and action ORM models."""

from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.domain.enums import IncidentStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import SchoolModel


class DisciplinaryIncident(SchoolModel, Base):
    """Incident. When affects_status is set, the student's status follows status_change."""

    __tablename__ = "disciplinary_incident"

    student_id: Mapped[str] = mapped_column(
        String, ForeignKey("student.id", ondelete="CASCADE"), nullable=False, index=True
    )
    incident_date: Mapped[date] = mapped_column(Date, nullable=False)
    incident_type: Mapped[str] = mapped_column(String(100), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=IncidentStatus.PENDING.value
    )
    reported_by: Mapped[str | None] = mapped_column(String)
    location: Mapped[str | None] = mapped_column(String(200))
    witnesses: Mapped[str | None] = mapped_column(Text)
    action_taken: Mapped[str | None] = mapped_column(Text)
    follow_up_date: Mapped[date | None] = mapped_column(Date)
    resolution_notes: Mapped[str | None] = mapped_column(Text)
    affects_status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status_change: Mapped[str | None] = mapped_column(String(32))
    effective_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    auto_restore: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    actions: Mapped[list["DisciplinaryAction"]] = relationship(
        back_populates="incident",
        cascade="all, delete-orphan",
        order_by="DisciplinaryAction.action_date",
    )


class DisciplinaryAction(SchoolModel, Base):
    """Action taken on an incident (including the automatic 'resolution' entry)."""

    __tablename__ = "disciplinary_action"

    incident_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("disciplinary_incident.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action_date: Mapped[date] = mapped_column(Date, nullable=False)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    performed_by: Mapped[str | None] = mapped_column(String)
    notes: Mapped[str | None] = mapped_column(Text)

    incident: Mapped[DisciplinaryIncident] = relationship(back_populates="actions")
