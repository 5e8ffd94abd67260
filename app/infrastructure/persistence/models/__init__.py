"""Persistence models: ORM entities and mixins."""

from app.domain.enums import SubjectKind
from app.infrastructure.persistence.models.academic_session import AcademicSession
from app.infrastructure.persistence.models.disciplinary import (
    DisciplinaryAction,
    DisciplinaryIncident,
)
from app.infrastructure.persistence.models.exam import (
    Examination,
    ExamResult,
    ExamSchedule,
    GradePoint,
)
from app.infrastructure.persistence.models.hostel import DormitoryRoom, RoomAllocation
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    SchoolModel,
    StatusTrackedMixin,
    StatusTrackedModel,
    TimestampMixin,
)
from app.infrastructure.persistence.models.staff import (
    LeaveBalance,
    LeaveRequest,
    LeaveType,
    Teacher,
)
from app.infrastructure.persistence.models.status_transition import StatusTransition
from app.infrastructure.persistence.models.student import Student, StudentClassHistory

# Table backing each subject kind (all carry StatusTrackedMixin columns).
SUBJECT_MODELS: dict[SubjectKind, type[StatusTrackedModel]] = {
    SubjectKind.STUDENT: Student,
    SubjectKind.TEACHER: Teacher,
    SubjectKind.EXAMINATION: Examination,
    SubjectKind.EXAM_SCHEDULE: ExamSchedule,
    SubjectKind.LEAVE_REQUEST: LeaveRequest,
    SubjectKind.ACADEMIC_SESSION: AcademicSession,
    SubjectKind.DORMITORY_ROOM: DormitoryRoom,
}

__all__ = [
    "SUBJECT_MODELS",
    "AcademicSession",
    "DisciplinaryAction",
    "DisciplinaryIncident",
    "DormitoryRoom",
    "ExamResult",
    "ExamSchedule",
    "Examination",
    "GradePoint",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveType",
    "RoomAllocation",
    "StatusTransition",
    "Student",
    "StudentClassHistory",
    "Teacher",
    "CuidMixin",
    "SchoolModel",
    "StatusTrackedMixin",
    "StatusTrackedModel",
    "TimestampMixin",
]
