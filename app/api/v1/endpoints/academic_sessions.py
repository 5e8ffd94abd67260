"""Academic session API."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import get_academic_session_service, get_actor_id
from app.application.dtos.academic_session import AcademicSessionCreate
from app.application.use_cases import AcademicSessionService
from app.core.limiter import limit_writes
from app.schemas.academic_session import (
    AcademicSessionCreateRequest,
    AcademicSessionResponse,
)
from app.schemas.transition import NoteRequest, TransitionResultResponse

router = APIRouter()

Service = Annotated[AcademicSessionService, Depends(get_academic_session_service)]


@router.post("", response_model=AcademicSessionResponse, status_code=201)
@limit_writes
async def create_academic_session(
    request: Request,
    body: AcademicSessionCreateRequest,
    service: Service,
):
    created = await service.create_session(
        AcademicSessionCreate(
            year=body.year,
            term=body.term,
            start_date=body.start_date,
            end_date=body.end_date,
        )
    )
    return AcademicSessionResponse.model_validate(created)


@router.get("/current", response_model=AcademicSessionResponse)
async def get_current_session(service: Service):
    """The session flagged current; 404 CURRENT_SESSION_NOT_FOUND when none is."""
    return AcademicSessionResponse.model_validate(await service.get_current())


@router.get("/{session_id}", response_model=AcademicSessionResponse)
async def get_academic_session(session_id: str, service: Service):
    return AcademicSessionResponse.model_validate(await service.get_session(session_id))


@router.post("/{session_id}/set-current", response_model=AcademicSessionResponse)
@limit_writes
async def set_current_session(request: Request, session_id: str, service: Service):
    """Make the session current (clears the flag on every other session)."""
    return AcademicSessionResponse.model_validate(await service.set_current(session_id))


@router.post("/{session_id}/complete", response_model=TransitionResultResponse)
@limit_writes
async def complete_session(
    request: Request,
    session_id: str,
    service: Service,
    actor_id: Annotated[str | None, Depends(get_actor_id)],
    body: NoteRequest | None = None,
):
    """Close the session. Completed is terminal."""
    result = await service.complete_session(
        session_id, actor_id=actor_id, note=body.note if body else None
    )
    return TransitionResultResponse.model_validate(result)
