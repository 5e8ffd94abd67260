"""Hostel bed allocation API schemas."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.transition import AggregateResponse, TransitionResultResponse


class AllocationCreateRequest(BaseModel):
    """Request body for POST /hostel/allocations."""

    room_id: str = Field(..., min_length=1, max_length=255)
    student_id: str = Field(..., min_length=1, max_length=255)
    allocated_on: date | None = None


class VacateRequest(BaseModel):
    vacated_on: date | None = None


class AllocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    room_id: str
    student_id: str
    allocated_on: date
    vacated_on: date | None
    status: str


class AllocationOutcomeResponse(BaseModel):
    """Allocation after a write, with the room's derived status."""

    model_config = ConfigDict(from_attributes=True)

    allocation: AllocationResponse
    room: AggregateResponse | None = None
    reopen: TransitionResultResponse | None = None
