"""Pydantic request/response schemas for the API."""

from app.schemas.academic_session import (
    AcademicSessionCreateRequest,
    AcademicSessionResponse,
)
from app.schemas.disciplinary import (
    IncidentCreateRequest,
    IncidentOutcomeResponse,
    IncidentResponse,
    IncidentUpdateRequest,
    PendingRestorationResponse,
)
from app.schemas.exam import ExamResultsRequest, ResultSubmissionResponse
from app.schemas.health import HealthResponse
from app.schemas.hostel import AllocationCreateRequest, AllocationOutcomeResponse
from app.schemas.leave import (
    LeaveDecisionRequest,
    LeaveDecisionResponse,
    LeaveRequestCreateRequest,
    LeaveRequestResponse,
)
from app.schemas.promotion import (
    BulkPromoteRequest,
    BulkPromotionResponse,
    PromoteRequest,
    PromotionResponse,
)
from app.schemas.transition import (
    AggregateResponse,
    ReverseRequest,
    SubjectStatusResponse,
    SweepResponse,
    TransitionRecordResponse,
    TransitionRequest,
    TransitionResultResponse,
)

__all__ = [
    "AcademicSessionCreateRequest",
    "AcademicSessionResponse",
    "AggregateResponse",
    "AllocationCreateRequest",
    "AllocationOutcomeResponse",
    "BulkPromoteRequest",
    "BulkPromotionResponse",
    "ExamResultsRequest",
    "HealthResponse",
    "IncidentCreateRequest",
    "IncidentOutcomeResponse",
    "IncidentResponse",
    "IncidentUpdateRequest",
    "LeaveDecisionRequest",
    "LeaveDecisionResponse",
    "LeaveRequestCreateRequest",
    "LeaveRequestResponse",
    "PendingRestorationResponse",
    "PromoteRequest",
    "PromotionResponse",
    "ReverseRequest",
    "SubjectStatusResponse",
    "SweepResponse",
    "TransitionRecordResponse",
    "TransitionRequest",
    "TransitionResultResponse",
]
