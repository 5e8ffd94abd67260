"""DTOs for disciplinary incidents and actions."""

from dataclasses import dataclass, field
from datetime import date, datetime

from app.application.dtos.transition import TransitionResult


@dataclass(frozen=True)
class IncidentCreate:
    """Input for recording a disciplinary incident."""

    student_id: str
    incident_date: date
    incident_type: str
    severity: str
    description: str
    status: str
    reported_by: str | None = None
    location: str | None = None
    witnesses: str | None = None
    action_taken: str | None = None
    follow_up_date: date | None = None
    affects_status: bool = False
    status_change: str | None = None
    effective_date: date | None = None
    end_date: date | None = None
    auto_restore: bool = False


@dataclass(frozen=True)
class IncidentResult:
    """Disciplinary incident read-model."""

    id: str
    student_id: str
    incident_date: date
    incident_type: str
    severity: str
    description: str
    status: str
    reported_by: str | None
    location: str | None
    witnesses: str | None
    action_taken: str | None
    follow_up_date: date | None
    affects_status: bool
    status_change: str | None
    effective_date: date | None
    end_date: date | None
    auto_restore: bool
    resolution_notes: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class DisciplinaryActionCreate:
    """Input for logging an action taken on an incident."""

    incident_id: str
    action_date: date
    action_type: str
    performed_by: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class DisciplinaryActionResult:
    """Disciplinary action read-model."""

    id: str
    incident_id: str
    action_date: date
    action_type: str
    performed_by: str | None
    notes: str | None


@dataclass(frozen=True)
class IncidentOutcome:
    """Incident after a write, with the status transitions it caused."""

    incident: IncidentResult | None
    transitions: tuple[TransitionResult, ...] = field(default_factory=tuple)
