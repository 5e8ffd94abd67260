"""Disciplinary API: thin routes delegating to DisciplinaryService."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import get_actor_id, get_disciplinary_service
from app.application.dtos.disciplinary import IncidentCreate
from app.application.use_cases import DisciplinaryService
from app.core.limiter import limit_writes
from app.domain.exceptions import ResourceNotFoundException
from app.schemas.disciplinary import (
    DisciplinaryActionResponse,
    IncidentCreateRequest,
    IncidentOutcomeResponse,
    IncidentResponse,
    IncidentUpdateRequest,
    PendingRestorationResponse,
)
from app.schemas.transition import NoteRequest, TransitionResultResponse

router = APIRouter()

Service = Annotated[DisciplinaryService, Depends(get_disciplinary_service)]
ActorId = Annotated[str | None, Depends(get_actor_id)]


@router.post("/incidents", response_model=IncidentOutcomeResponse, status_code=201)
@limit_writes
async def create_incident(
    request: Request,
    body: IncidentCreateRequest,
    service: Service,
    actor_id: ActorId,
):
    """Record an incident; when affects_status is set the student's status changes too."""
    student = await service.resolve_student(body.student_id, body.admission_number)
    outcome = await service.create_incident(
        IncidentCreate(
            student_id=student.id,
            incident_date=body.incident_date,
            incident_type=body.incident_type,
            severity=body.severity,
            description=body.description,
            status=body.status.value,
            location=body.location,
            witnesses=body.witnesses,
            action_taken=body.action_taken,
            follow_up_date=body.follow_up_date,
            affects_status=body.affects_status,
            status_change=body.status_change,
            effective_date=body.effective_date,
            end_date=body.end_date,
            auto_restore=body.auto_restore,
        ),
        actor_id=actor_id,
    )
    return IncidentOutcomeResponse.model_validate(outcome)


@router.get("/incidents/{incident_id}", response_model=IncidentResponse)
async def get_incident(incident_id: str, service: Service):
    incident = await service.get_incident(incident_id)
    if incident is None:
        raise ResourceNotFoundException("disciplinary_incident", incident_id)
    return IncidentResponse.model_validate(incident)


@router.get(
    "/incidents/{incident_id}/actions",
    response_model=list[DisciplinaryActionResponse],
)
async def list_incident_actions(incident_id: str, service: Service):
    """Actions logged on the incident, oldest first."""
    actions = await service.list_actions(incident_id)
    return [DisciplinaryActionResponse.model_validate(a) for a in actions]


@router.put("/incidents/{incident_id}", response_model=IncidentOutcomeResponse)
@limit_writes
async def update_incident(
    request: Request,
    incident_id: str,
    body: IncidentUpdateRequest,
    service: Service,
    actor_id: ActorId,
):
    """Amend an incident; a changed status effect is reversed and re-applied."""
    changes = body.model_dump(exclude_unset=True)
    if "status" in changes and changes["status"] is not None:
        changes["status"] = changes["status"].value
    outcome = await service.update_incident(incident_id, changes, actor_id=actor_id)
    return IncidentOutcomeResponse.model_validate(outcome)


@router.delete("/incidents/{incident_id}", response_model=IncidentOutcomeResponse)
@limit_writes
async def delete_incident(
    request: Request,
    incident_id: str,
    service: Service,
    actor_id: ActorId,
):
    """Delete an incident after reversing the status change it caused."""
    outcome = await service.delete_incident(incident_id, actor_id=actor_id)
    return IncidentOutcomeResponse.model_validate(outcome)


@router.get("/pending-restorations", response_model=list[PendingRestorationResponse])
async def list_pending_restorations(
    service: Service,
    days: Annotated[int | None, Query(ge=0, le=365)] = None,
    as_of: date | None = None,
):
    """Students whose suspension or probation auto-restores within the next `days` days."""
    pending = await service.list_pending_restorations(as_of=as_of, window_days=days)
    return [PendingRestorationResponse.model_validate(p) for p in pending]


@router.get("/status-counts", response_model=dict[str, int])
async def active_status_counts(service: Service):
    """Number of students currently suspended, on probation, or expelled."""
    return await service.active_status_counts()


@router.post(
    "/students/{student_id}/restore",
    response_model=TransitionResultResponse,
)
@limit_writes
async def restore_student_status(
    request: Request,
    student_id: str,
    service: Service,
    actor_id: ActorId,
    body: NoteRequest | None = None,
):
    """Manually end a student's disciplinary status early."""
    result = await service.restore_student_status(
        student_id, actor_id=actor_id, note=body.note if body else None
    )
    return TransitionResultResponse.model_validate(result)
