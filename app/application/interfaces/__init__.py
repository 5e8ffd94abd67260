"""Application interfaces (ports): repository protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IAcademicSessionRepository,
    IDisciplinaryRepository,
    IExamProgressReader,
    IExamRepository,
    IHostelRepository,
    ILeaveRepository,
    IRoomOccupancyReader,
    IStudentRepository,
    ISubjectStatusStore,
    ITransitionLedger,
    IUnitOfWork,
)

__all__ = [
    "IAcademicSessionRepository",
    "IDisciplinaryRepository",
    "IExamProgressReader",
    "IExamRepository",
    "IHostelRepository",
    "ILeaveRepository",
    "IRoomOccupancyReader",
    "IStudentRepository",
    "ISubjectStatusStore",
    "ITransitionLedger",
    "IUnitOfWork",
]
