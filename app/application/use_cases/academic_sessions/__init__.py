"""Academic session use cases."""

from app.application.use_cases.academic_sessions.session_operations import (
    AcademicSessionService,
)

__all__ = ["AcademicSessionService"]
