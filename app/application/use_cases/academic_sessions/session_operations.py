"""Academic session operations: create, current session, close."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.application.dtos.academic_session import (
    AcademicSessionCreate,
    AcademicSessionResult,
)
from app.application.dtos.transition import TransitionCommand, TransitionResult
from app.domain.enums import ReasonCategory, RejectionReason, SessionStatus, SubjectKind
from app.domain.exceptions import (
    CurrentSessionNotFoundException,
    ResourceNotFoundException,
    StatusConflictException,
    ValidationException,
)
from app.domain.value_objects.core import TriggerRef

if TYPE_CHECKING:
    from app.application.interfaces.repositories import IAcademicSessionRepository
    from app.application.services.propagation_engine import PropagationEngine

SESSION_CLOSE_ACTION_TYPE = "academic_session_close"


class AcademicSessionService:
    """Create and query sessions; closing one is a status transition."""

    def __init__(
        self,
        session_repo: IAcademicSessionRepository,
        engine: PropagationEngine,
    ) -> None:
        self.session_repo = session_repo
        self.engine = engine

    async def create_session(self, data: AcademicSessionCreate) -> AcademicSessionResult:
        if not data.term.strip():
            raise ValidationException("term is required", field="term")
        if data.start_date and data.end_date and data.end_date < data.start_date:
            raise ValidationException("end_date must not be before start_date", field="end_date")
        return await self.session_repo.create(data)

    async def get_session(self, session_id: str) -> AcademicSessionResult:
        session = await self.session_repo.get_by_id(session_id)
        if session is None:
            raise ResourceNotFoundException("academic_session", session_id)
        return session

    async def get_current(self) -> AcademicSessionResult:
        """Return the current session; CurrentSessionNotFoundException if none."""
        session = await self.session_repo.get_current()
        if session is None:
            raise CurrentSessionNotFoundException()
        return session

    async def set_current(self, session_id: str) -> AcademicSessionResult:
        """Make session_id the only current session. Completed sessions cannot be current."""
        session = await self.get_session(session_id)
        if session.status == SessionStatus.COMPLETED.value:
            raise StatusConflictException(
                "A completed session cannot be made current",
                subject_type=SubjectKind.ACADEMIC_SESSION.value,
                subject_id=session_id,
                reason=RejectionReason.TERMINAL_STATE.value,
                current_status=session.status,
            )
        return await self.session_repo.set_current(session_id)

    async def complete_session(
        self,
        session_id: str,
        actor_id: str | None = None,
        note: str | None = None,
    ) -> TransitionResult:
        """Close a session. The current session must be switched away from first."""
        session = await self.get_session(session_id)
        if session.is_current:
            raise ValidationException(
                "The current session cannot be completed; set another session current first",
                field="session_id",
            )
        return await self.engine.request_transition(
            TransitionCommand(
                subject_type=SubjectKind.ACADEMIC_SESSION,
                subject_id=session_id,
                desired_status=SessionStatus.COMPLETED.value,
                reason=ReasonCategory.ADMINISTRATIVE,
                trigger=TriggerRef(SESSION_CLOSE_ACTION_TYPE, session_id),
                actor_id=actor_id,
                note=note or f"Session {session.year} {session.term} closed",
            )
        )
