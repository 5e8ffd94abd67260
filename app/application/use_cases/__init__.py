"""Application use cases: one entry point per workflow."""

from app.application.use_cases.academic_sessions import AcademicSessionService
from app.application.use_cases.disciplinary import DisciplinaryService
from app.application.use_cases.exams import ExamResultService
from app.application.use_cases.hostel import RoomAllocationService
from app.application.use_cases.leave import LeaveService
from app.application.use_cases.promotions import PromotionService

__all__ = [
    "AcademicSessionService",
    "DisciplinaryService",
    "ExamResultService",
    "LeaveService",
    "PromotionService",
    "RoomAllocationService",
]
