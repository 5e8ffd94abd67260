"""Disciplinary incident API schemas."""

from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.enums import IncidentStatus
from app.schemas.transition import TransitionResultResponse


class IncidentCreateRequest(BaseModel):
    """Request body for POST /disciplinary/incidents.

    The student is identified by student_id or admission_number.
    """

    student_id: str | None = Field(default=None, max_length=255)
    admission_number: str | None = Field(default=None, max_length=50)
    incident_date: date
    incident_type: str = Field(..., min_length=1, max_length=100)
    severity: str = Field(..., min_length=1, max_length=20)
    description: str = Field(..., min_length=1)
    status: IncidentStatus = IncidentStatus.PENDING
    location: str | None = Field(default=None, max_length=200)
    witnesses: str | None = None
    action_taken: str | None = None
    follow_up_date: date | None = None
    affects_status: bool = False
    status_change: str | None = Field(default=None, max_length=32)
    effective_date: date | None = None
    end_date: date | None = None
    auto_restore: bool = False

    @model_validator(mode="after")
    def _student_reference(self) -> Self:
        if not (self.student_id or self.admission_number):
            raise ValueError("student_id or admission_number is required")
        return self


class IncidentUpdateRequest(BaseModel):
    """Request body for PUT /disciplinary/incidents/{id} (only sent fields change)."""

    incident_date: date | None = None
    incident_type: str | None = Field(default=None, min_length=1, max_length=100)
    severity: str | None = Field(default=None, min_length=1, max_length=20)
    description: str | None = Field(default=None, min_length=1)
    status: IncidentStatus | None = None
    location: str | None = Field(default=None, max_length=200)
    witnesses: str | None = None
    action_taken: str | None = None
    follow_up_date: date | None = None
    resolution_notes: str | None = None
    affects_status: bool | None = None
    status_change: str | None = Field(default=None, max_length=32)
    effective_date: date | None = None
    end_date: date | None = None
    auto_restore: bool | None = None


class IncidentResponse(BaseModel):
    """Disciplinary incident."""

    model_config = ConfigDict(from_attributes=True)

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


class IncidentOutcomeResponse(BaseModel):
    """Incident after a write, with the status transitions it caused."""

    model_config = ConfigDict(from_attributes=True)

    incident: IncidentResponse | None
    transitions: list[TransitionResultResponse] = Field(default_factory=list)


class DisciplinaryActionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    incident_id: str
    action_date: date
    action_type: str
    performed_by: str | None
    notes: str | None


class PendingRestorationResponse(BaseModel):
    """Student whose suspension or probation ends within the window."""

    model_config = ConfigDict(from_attributes=True)

    student_id: str
    admission_number: str
    full_name: str
    status: str
    status_end_date: date
    days_remaining: int
