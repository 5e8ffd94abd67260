"""Aggregate API: recompute or reopen a parent whose status derives from its dependents."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import get_actor_id, get_propagation_engine
from app.application.services.propagation_engine import PropagationEngine
from app.core.limiter import limit_writes
from app.domain.enums import SubjectKind
from app.schemas.transition import (
    AggregateResponse,
    NoteRequest,
    TransitionResultResponse,
)

router = APIRouter()


@router.post("/{parent_type}/{parent_id}/recompute", response_model=AggregateResponse)
@limit_writes
async def recompute_aggregate(
    request: Request,
    parent_type: SubjectKind,
    parent_id: str,
    engine: Annotated[PropagationEngine, Depends(get_propagation_engine)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
):
    """Derive the parent's status from persisted dependents; applied only if it advances."""
    result = await engine.recompute_aggregate(parent_type, parent_id, actor_id=actor_id)
    return AggregateResponse.model_validate(result)


@router.post("/{parent_type}/{parent_id}/reopen", response_model=TransitionResultResponse)
@limit_writes
async def reopen_aggregate(
    request: Request,
    parent_type: SubjectKind,
    parent_id: str,
    engine: Annotated[PropagationEngine, Depends(get_propagation_engine)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
    body: NoteRequest | None = None,
):
    """Move a completed parent back to in progress (privileged)."""
    result = await engine.reopen_aggregate(
        parent_type, parent_id, actor_id=actor_id, note=body.note if body else None
    )
    return TransitionResultResponse.model_validate(result)
