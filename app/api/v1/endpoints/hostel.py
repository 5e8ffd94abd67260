"""Hostel API: bed allocation with derived room status."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import get_actor_id, get_room_allocation_service
from app.application.use_cases import RoomAllocationService
from app.core.limiter import limit_writes
from app.schemas.hostel import (
    AllocationCreateRequest,
    AllocationOutcomeResponse,
    VacateRequest,
)

router = APIRouter()

Service = Annotated[RoomAllocationService, Depends(get_room_allocation_service)]
ActorId = Annotated[str | None, Depends(get_actor_id)]


@router.post("/allocations", response_model=AllocationOutcomeResponse, status_code=201)
@limit_writes
async def allocate_bed(
    request: Request,
    body: AllocationCreateRequest,
    service: Service,
    actor_id: ActorId,
):
    """Allocate a bed; the room becomes full when it reaches capacity."""
    outcome = await service.allocate(
        body.room_id, body.student_id, allocated_on=body.allocated_on, actor_id=actor_id
    )
    return AllocationOutcomeResponse.model_validate(outcome)


@router.post("/allocations/{allocation_id}/vacate", response_model=AllocationOutcomeResponse)
@limit_writes
async def vacate_bed(
    request: Request,
    allocation_id: str,
    service: Service,
    actor_id: ActorId,
    body: VacateRequest | None = None,
):
    """Vacate a bed; a full room is reopened to available."""
    outcome = await service.vacate(
        allocation_id, vacated_on=body.vacated_on if body else None, actor_id=actor_id
    )
    return AllocationOutcomeResponse.model_validate(outcome)
