"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the propagation engine and
the use-case services. Routes depend only on these, not on infra directly.
Tests replace them through app.dependency_overrides.
"""

from app.api.v1.dependencies.actor import get_actor_id
from app.api.v1.dependencies.db import (
    ReadSession,
    WriteSession,
    get_propagation_engine,
    get_read_engine,
)
from app.api.v1.dependencies.services import (
    get_academic_session_service,
    get_disciplinary_service,
    get_exam_result_service,
    get_leave_service,
    get_promotion_service,
    get_room_allocation_service,
)

__all__ = [
    "ReadSession",
    "WriteSession",
    "get_academic_session_service",
    "get_actor_id",
    "get_disciplinary_service",
    "get_exam_result_service",
    "get_leave_service",
    "get_promotion_service",
    "get_propagation_engine",
    "get_read_engine",
    "get_room_allocation_service",
]
