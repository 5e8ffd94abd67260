"""Promotion API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import PromotionOutcome
from app.schemas.transition import TransitionResultResponse


class PromoteRequest(BaseModel):
    """Request body for POST /promotions/promote."""

    student_id: str = Field(..., min_length=1, max_length=255)
    promotion_status: PromotionOutcome
    to_class: str | None = Field(default=None, max_length=50)
    to_stream: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=2000)


class BulkPromoteRequest(BaseModel):
    """Request body for POST /promotions/bulk. student_ids narrows the class."""

    from_class: str = Field(..., min_length=1, max_length=50)
    from_stream: str | None = Field(default=None, max_length=50)
    promotion_status: PromotionOutcome
    to_class: str | None = Field(default=None, max_length=50)
    to_stream: str | None = Field(default=None, max_length=50)
    student_ids: list[str] | None = None
    notes: str | None = Field(default=None, max_length=2000)


class ClassHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    academic_session_id: str
    from_class: str | None
    from_stream: str | None
    to_class: str | None
    to_stream: str | None
    promotion_status: str
    promoted_by: str | None
    notes: str | None
    created_at: datetime


class PromotionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: str
    history: ClassHistoryResponse
    transition: TransitionResultResponse | None = None


class BulkPromotionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    promoted: list[PromotionResponse]
    skipped_student_ids: list[str]
