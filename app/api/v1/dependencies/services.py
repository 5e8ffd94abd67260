"""Use-case service dependencies. Each shares the request's write session and engine."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.api.v1.dependencies.db import WriteSession, get_propagation_engine
from app.application.services.propagation_engine import PropagationEngine
from app.application.use_cases import (
    AcademicSessionService,
    DisciplinaryService,
    ExamResultService,
    LeaveService,
    PromotionService,
    RoomAllocationService,
)
from app.core.config import get_settings
from app.infrastructure.persistence.repositories import (
    AcademicSessionRepository,
    DisciplinaryRepository,
    ExamRepository,
    HostelRepository,
    LeaveRepository,
    StudentRepository,
)

Engine = Annotated[PropagationEngine, Depends(get_propagation_engine)]


async def get_disciplinary_service(db: WriteSession, engine: Engine) -> DisciplinaryService:
    return DisciplinaryService(
        DisciplinaryRepository(db),
        StudentRepository(db),
        engine,
        pending_window_days=get_settings().pending_restoration_window_days,
    )


async def get_exam_result_service(db: WriteSession, engine: Engine) -> ExamResultService:
    return ExamResultService(ExamRepository(db), StudentRepository(db), engine)


async def get_leave_service(db: WriteSession, engine: Engine) -> LeaveService:
    return LeaveService(LeaveRepository(db), AcademicSessionRepository(db), engine)


async def get_promotion_service(db: WriteSession, engine: Engine) -> PromotionService:
    return PromotionService(StudentRepository(db), AcademicSessionRepository(db), engine)


async def get_academic_session_service(
    db: WriteSession, engine: Engine
) -> AcademicSessionService:
    return AcademicSessionService(AcademicSessionRepository(db), engine)


async def get_room_allocation_service(
    db: WriteSession, engine: Engine
) -> RoomAllocationService:
    return RoomAllocationService(HostelRepository(db), StudentRepository(db), engine)
