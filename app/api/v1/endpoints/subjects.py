"""Subject status API: current status, history and manual restoration for any subject kind."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import get_actor_id, get_propagation_engine, get_read_engine
from app.application.services.propagation_engine import PropagationEngine
from app.core.limiter import limit_writes
from app.domain.enums import SubjectKind
from app.schemas.transition import (
    NoteRequest,
    SubjectStatusResponse,
    TransitionRecordResponse,
    TransitionResultResponse,
)

router = APIRouter()


@router.get("/{subject_type}/{subject_id}/status", response_model=SubjectStatusResponse)
async def get_subject_status(
    subject_type: SubjectKind,
    subject_id: str,
    engine: Annotated[PropagationEngine, Depends(get_read_engine)],
):
    """Current status, end date and version of a subject."""
    snapshot = await engine.current_status(subject_type, subject_id)
    return SubjectStatusResponse.model_validate(snapshot)


@router.get(
    "/{subject_type}/{subject_id}/history",
    response_model=list[TransitionRecordResponse],
)
async def get_subject_history(
    subject_type: SubjectKind,
    subject_id: str,
    engine: Annotated[PropagationEngine, Depends(get_read_engine)],
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
):
    """The subject's ledger, newest first."""
    records = await engine.history(subject_type, subject_id, skip=skip, limit=limit)
    return [TransitionRecordResponse.model_validate(r) for r in records]


@router.post(
    "/{subject_type}/{subject_id}/restore",
    response_model=TransitionResultResponse,
)
@limit_writes
async def restore_subject_status(
    request: Request,
    subject_type: SubjectKind,
    subject_id: str,
    engine: Annotated[PropagationEngine, Depends(get_propagation_engine)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
    body: NoteRequest | None = None,
):
    """Move the subject back to the status it held before its current one."""
    result = await engine.restore_status(
        subject_type, subject_id, actor_id=actor_id, note=body.note if body else None
    )
    return TransitionResultResponse.model_validate(result)
