"""Leave request API schemas."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.transition import TransitionResultResponse


class LeaveRequestCreateRequest(BaseModel):
    """Request body for POST /leave."""

    teacher_id: str = Field(..., min_length=1, max_length=255)
    leave_type_id: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date
    reason: str | None = Field(default=None, max_length=2000)


class LeaveDecisionRequest(BaseModel):
    """Request body for PATCH /leave/{id}/status."""

    status: Literal["approved", "rejected"]
    rejection_reason: str | None = Field(default=None, max_length=2000)


class LeaveRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class LeaveDecisionResponse(BaseModel):
    """Leave request after a decision, with the transitions it caused."""

    model_config = ConfigDict(from_attributes=True)

    request: LeaveRequestResponse
    transitions: list[TransitionResultResponse] = Field(default_factory=list)


class LeaveBalanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    teacher_id: str
    leave_type_id: str
    academic_year: str
    total_days: int
    used_days: int
    remaining_days: int


class LeaveStartRequest(BaseModel):
    """Request body for POST /leave/start-due. today defaults to the current date."""

    today: date | None = None


class LeaveStartResponse(BaseModel):
    """Teachers put on leave (or not) by a start-due run."""

    started: int
    failed: int
    results: list[TransitionResultResponse]
