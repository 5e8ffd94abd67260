"""Status transition, subject status and aggregate API schemas."""

from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.enums import ReasonCategory, SubjectKind

ACTION_TYPE_PATTERN = r"^[a-z][a-z0-9_]{0,63}$"


class TriggerFields(BaseModel):
    """Optional reference to the business action that caused a transition."""

    trigger_action_type: str | None = Field(default=None, pattern=ACTION_TYPE_PATTERN)
    trigger_action_id: str | None = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def _trigger_pair(self) -> Self:
        if (self.trigger_action_type is None) != (self.trigger_action_id is None):
            raise ValueError("trigger_action_type and trigger_action_id must be given together")
        return self


class TransitionRequest(TriggerFields):
    """Request body for POST /transitions."""

    subject_type: SubjectKind
    subject_id: str = Field(..., min_length=1, max_length=255)
    desired_status: str = Field(..., min_length=1, max_length=32)
    reason: ReasonCategory
    effective_date: date | None = None
    end_date: date | None = None
    auto_restore: bool = False
    note: str | None = Field(default=None, max_length=2000)
    expected_status: str | None = Field(
        default=None,
        max_length=32,
        description="Reject with 409 if the subject no longer holds this status",
    )


class ReverseRequest(BaseModel):
    """Request body for POST /transitions/reverse."""

    action_type: str = Field(..., pattern=ACTION_TYPE_PATTERN)
    action_id: str = Field(..., min_length=1, max_length=255)
    note: str | None = Field(default=None, max_length=2000)


class SweepRequest(BaseModel):
    """Request body for POST /transitions/sweep. now defaults to the current time."""

    now: datetime | None = None


class NoteRequest(BaseModel):
    """Optional free-text note (restore, reopen, complete)."""

    note: str | None = Field(default=None, max_length=2000)


class TransitionResultResponse(BaseModel):
    """Outcome of one engine operation on one subject."""

    model_config = ConfigDict(from_attributes=True)

    success: bool
    subject_type: SubjectKind
    subject_id: str
    previous_status: str | None
    new_status: str | None
    transition_id: int | None = None
    changed: bool = False
    error: str | None = None


class TransitionRecordResponse(BaseModel):
    """One ledger record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    subject_type: SubjectKind
    subject_id: str
    previous_status: str
    new_status: str
    effective_date: date
    end_date: date | None
    auto_restore: bool
    reason: ReasonCategory
    trigger_action_type: str | None
    trigger_action_id: str | None
    actor_id: str | None
    note: str | None
    reverses_transition_id: int | None
    created_at: datetime


class SweepResponse(BaseModel):
    """Summary and per-subject results of an expiry sweep."""

    candidates: int
    restored: int
    failed: int
    results: list[TransitionResultResponse]


class SubjectStatusResponse(BaseModel):
    """Current status of a subject."""

    model_config = ConfigDict(from_attributes=True)

    subject_type: SubjectKind
    subject_id: str
    status: str
    status_version: int
    status_effective_at: datetime | None = None
    status_end_date: date | None = None
    status_auto_restore: bool = False


class AggregateResponse(BaseModel):
    """Result of recomputing a parent's derived status."""

    model_config = ConfigDict(from_attributes=True)

    parent_type: SubjectKind
    parent_id: str
    status: str
    derived_status: str
    done: int
    expected: int
    changed: bool
    transition_id: int | None = None
