"""Transition API: thin routes delegating to PropagationEngine."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request

from app.api.v1.dependencies import get_actor_id, get_propagation_engine, get_read_engine
from app.application.dtos.transition import TransitionCommand
from app.application.services.propagation_engine import PropagationEngine
from app.core.limiter import limit_batch, limit_writes
from app.domain.value_objects.core import TriggerRef
from app.schemas.transition import (
    ACTION_TYPE_PATTERN,
    ReverseRequest,
    SweepRequest,
    SweepResponse,
    TransitionRecordResponse,
    TransitionRequest,
    TransitionResultResponse,
)

router = APIRouter()


@router.post("", response_model=TransitionResultResponse)
@limit_writes
async def request_transition(
    request: Request,
    body: TransitionRequest,
    engine: Annotated[PropagationEngine, Depends(get_propagation_engine)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
):
    """Validate and apply one status transition (no-op if already in the desired status)."""
    trigger = (
        TriggerRef(body.trigger_action_type, body.trigger_action_id)
        if body.trigger_action_type and body.trigger_action_id
        else None
    )
    result = await engine.request_transition(
        TransitionCommand(
            subject_type=body.subject_type,
            subject_id=body.subject_id,
            desired_status=body.desired_status,
            reason=body.reason,
            trigger=trigger,
            effective_date=body.effective_date,
            end_date=body.end_date,
            auto_restore=body.auto_restore,
            actor_id=actor_id,
            note=body.note,
            expected_status=body.expected_status,
        )
    )
    return TransitionResultResponse.model_validate(result)


@router.post("/reverse", response_model=list[TransitionResultResponse])
@limit_writes
async def reverse_transitions(
    request: Request,
    body: ReverseRequest,
    engine: Annotated[PropagationEngine, Depends(get_propagation_engine)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
):
    """Append compensating transitions for everything the action caused."""
    results = await engine.reverse_transitions_for(
        TriggerRef(body.action_type, body.action_id), actor_id=actor_id, note=body.note
    )
    return [TransitionResultResponse.model_validate(r) for r in results]


@router.post("/sweep", response_model=SweepResponse)
@limit_batch
async def sweep_expired(
    request: Request,
    engine: Annotated[PropagationEngine, Depends(get_propagation_engine)],
    body: SweepRequest | None = None,
):
    """Restore every subject whose auto-restoring status has ended. Call from cron or scripts."""
    results = await engine.sweep_expired(body.now if body else None)
    return SweepResponse(
        candidates=len(results),
        restored=sum(1 for r in results if r.changed),
        failed=sum(1 for r in results if not r.success),
        results=[TransitionResultResponse.model_validate(r) for r in results],
    )


@router.get(
    "/by-action/{action_type}/{action_id}",
    response_model=list[TransitionRecordResponse],
)
async def transitions_for_action(
    action_type: Annotated[str, Path(pattern=ACTION_TYPE_PATTERN)],
    action_id: str,
    engine: Annotated[PropagationEngine, Depends(get_read_engine)],
):
    """Ledger records caused by a business action, oldest first (compensations included)."""
    records = await engine.transitions_for_action(TriggerRef(action_type, action_id))
    return [TransitionRecordResponse.model_validate(r) for r in records]
