"""Exam result submission API schemas."""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.schemas.transition import AggregateResponse


class ExamResultEntryRequest(BaseModel):
    """One mark. Absent students need no marks."""

    student_id: str = Field(..., min_length=1, max_length=255)
    marks_obtained: float | None = Field(default=None, ge=0)
    is_absent: bool = False
    remarks: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def _marks_unless_absent(self) -> Self:
        if not self.is_absent and self.marks_obtained is None:
            raise ValueError("marks_obtained is required unless is_absent is true")
        return self


class ExamResultsRequest(BaseModel):
    """Request body for POST /exams/schedules/{id}/results."""

    results: list[ExamResultEntryRequest] = Field(..., min_length=1)


class ExamResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    schedule_id: str
    student_id: str
    marks_obtained: float | None
    grade: str | None
    points: float | None
    is_absent: bool
    remarks: str | None


class ResultSubmissionResponse(BaseModel):
    """Saved results plus the schedule's and examination's derived status."""

    model_config = ConfigDict(from_attributes=True)

    schedule_id: str
    status: str
    saved: list[ExamResultResponse]
    schedule: AggregateResponse
    examination: AggregateResponse | None = None
