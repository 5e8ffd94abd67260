"""Leave API: thin routes delegating to LeaveService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import get_actor_id, get_leave_service
from app.application.use_cases import LeaveService
from app.core.limiter import limit_batch, limit_writes
from app.schemas.leave import (
    LeaveBalanceResponse,
    LeaveDecisionRequest,
    LeaveDecisionResponse,
    LeaveRequestCreateRequest,
    LeaveRequestResponse,
    LeaveStartRequest,
    LeaveStartResponse,
)
from app.schemas.transition import TransitionResultResponse

router = APIRouter()

Service = Annotated[LeaveService, Depends(get_leave_service)]
ActorId = Annotated[str | None, Depends(get_actor_id)]


@router.post("", response_model=LeaveRequestResponse, status_code=201)
@limit_writes
async def create_leave_request(
    request: Request,
    body: LeaveRequestCreateRequest,
    service: Service,
):
    """Create a pending request (working days counted Monday to Friday)."""
    created = await service.create_request(
        teacher_id=body.teacher_id,
        leave_type_id=body.leave_type_id,
        start_date=body.start_date,
        end_date=body.end_date,
        reason=body.reason,
    )
    return LeaveRequestResponse.model_validate(created)


@router.patch("/{request_id}/status", response_model=LeaveDecisionResponse)
@limit_writes
async def decide_leave_request(
    request: Request,
    request_id: str,
    body: LeaveDecisionRequest,
    service: Service,
    actor_id: ActorId,
):
    """Approve or reject; approval puts the teacher on leave until the end date."""
    outcome = await service.decide(
        request_id, body.status, rejection_reason=body.rejection_reason, actor_id=actor_id
    )
    return LeaveDecisionResponse.model_validate(outcome)


@router.post("/{request_id}/cancel", response_model=LeaveDecisionResponse)
@limit_writes
async def cancel_leave_request(
    request: Request,
    request_id: str,
    service: Service,
    actor_id: ActorId,
):
    """Cancel a pending request, or approved leave that has not ended (untaken days refunded)."""
    outcome = await service.cancel_request(request_id, actor_id=actor_id)
    return LeaveDecisionResponse.model_validate(outcome)


@router.post("/start-due", response_model=LeaveStartResponse)
@limit_batch
async def start_due_leave(
    request: Request,
    service: Service,
    body: LeaveStartRequest | None = None,
):
    """Put active teachers on leave when approved leave covers today. Run after the sweep."""
    results = await service.start_due_leave(body.today if body else None)
    return LeaveStartResponse(
        started=sum(1 for r in results if r.changed),
        failed=sum(1 for r in results if not r.success),
        results=[TransitionResultResponse.model_validate(r) for r in results],
    )


@router.get("/balances/{teacher_id}", response_model=list[LeaveBalanceResponse])
async def list_leave_balances(
    teacher_id: str,
    service: Service,
    academic_year: Annotated[str | None, Query(pattern=r"^\d{4}-\d{4}$")] = None,
):
    """Balances for the teacher (default: current academic year)."""
    balances = await service.list_balances(teacher_id, academic_year)
    return [LeaveBalanceResponse.model_validate(b) for b in balances]


@router.get("/ending-today", response_model=list[LeaveRequestResponse])
async def list_leave_ending_today(service: Service):
    """Approved leave whose last day is today."""
    requests = await service.list_ending_today()
    return [LeaveRequestResponse.model_validate(r) for r in requests]
