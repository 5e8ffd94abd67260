"""Promotion API: single and bulk end-of-year outcomes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import get_actor_id, get_promotion_service
from app.application.use_cases import PromotionService
from app.core.limiter import limit_batch, limit_writes
from app.schemas.promotion import (
    BulkPromoteRequest,
    BulkPromotionResponse,
    PromoteRequest,
    PromotionResponse,
)

router = APIRouter()


@router.post("/promote", response_model=PromotionResponse)
@limit_writes
async def promote_student(
    request: Request,
    body: PromoteRequest,
    service: Annotated[PromotionService, Depends(get_promotion_service)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
):
    """Promote, repeat, transfer or graduate one active student."""
    outcome = await service.promote(
        body.student_id,
        body.promotion_status.value,
        to_class=body.to_class,
        to_stream=body.to_stream,
        actor_id=actor_id,
        notes=body.notes,
    )
    return PromotionResponse.model_validate(outcome)


@router.post("/bulk", response_model=BulkPromotionResponse)
@limit_batch
async def bulk_promote(
    request: Request,
    body: BulkPromoteRequest,
    service: Annotated[PromotionService, Depends(get_promotion_service)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
):
    """Apply one outcome to a class; students who are not active are skipped."""
    outcome = await service.bulk_promote(
        body.from_class,
        body.promotion_status.value,
        from_stream=body.from_stream,
        to_class=body.to_class,
        to_stream=body.to_stream,
        student_ids=body.student_ids,
        actor_id=actor_id,
        notes=body.notes,
    )
    return BulkPromotionResponse.model_validate(outcome)
