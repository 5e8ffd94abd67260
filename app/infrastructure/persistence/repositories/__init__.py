"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.academic_session_repo import (
    AcademicSessionRepository,
)
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.disciplinary_repo import (
    DisciplinaryRepository,
)
from app.infrastructure.persistence.repositories.exam_repo import ExamRepository
from app.infrastructure.persistence.repositories.hostel_repo import HostelRepository
from app.infrastructure.persistence.repositories.leave_repo import LeaveRepository
from app.infrastructure.persistence.repositories.status_transition_repo import (
    StatusTransitionRepository,
)
from app.infrastructure.persistence.repositories.student_repo import StudentRepository
from app.infrastructure.persistence.repositories.subject_status_repo import (
    SubjectStatusRepository,
)
from app.infrastructure.persistence.repositories.unit_of_work import SqlAlchemyUnitOfWork

__all__ = [
    "AcademicSessionRepository",
    "BaseRepository",
    "DisciplinaryRepository",
    "ExamRepository",
    "HostelRepository",
    "LeaveRepository",
    "SqlAlchemyUnitOfWork",
    "StatusTransitionRepository",
    "StudentRepository",
    "SubjectStatusRepository",
]
