"""Academic session API schemas."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class AcademicSessionCreateRequest(BaseModel):
    """Request body for POST /academic-sessions."""

    year: int = Field(..., ge=2000, le=2100)
    term: str = Field(..., min_length=1, max_length=20)
    start_date: date | None = None
    end_date: date | None = None


class AcademicSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    year: int
    term: str
    start_date: date | None
    end_date: date | None
    is_current: bool
    status: str
    academic_year: str
