"""Exam API: result submission with derived schedule/examination completion."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import get_actor_id, get_exam_result_service
from app.application.dtos.exam import ExamResultEntry
from app.application.use_cases import ExamResultService
from app.core.limiter import limit_writes
from app.schemas.exam import ExamResultsRequest, ResultSubmissionResponse

router = APIRouter()


@router.post("/schedules/{schedule_id}/results", response_model=ResultSubmissionResponse)
@limit_writes
async def save_exam_results(
    request: Request,
    schedule_id: str,
    body: ExamResultsRequest,
    service: Annotated[ExamResultService, Depends(get_exam_result_service)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
):
    """Grade and save results; the schedule completes once every active student has one."""
    outcome = await service.save_results(
        schedule_id,
        [
            ExamResultEntry(
                student_id=entry.student_id,
                marks_obtained=entry.marks_obtained,
                is_absent=entry.is_absent,
                remarks=entry.remarks,
            )
            for entry in body.results
        ],
        actor_id=actor_id,
    )
    return ResultSubmissionResponse.model_validate(outcome)
