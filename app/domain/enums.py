"""Domain enumerations for the school status ledger.

Enums represent fixed sets of domain values: the kinds of subject that
carry a status, the status values each kind may hold, and the reason
categories recorded on every transition.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class SubjectKind(_ValuesMixin, str, Enum):
    """Entity types whose status is owned by the propagation engine."""

    STUDENT = "student"
    TEACHER = "teacher"
    EXAMINATION = "examination"
    EXAM_SCHEDULE = "exam_schedule"
    LEAVE_REQUEST = "leave_request"
    ACADEMIC_SESSION = "academic_session"
    DORMITORY_ROOM = "dormitory_room"


class StudentStatus(_ValuesMixin, str, Enum):
    """Student enrolment status."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    ON_PROBATION = "on_probation"
    EXPELLED = "expelled"
    GRADUATED = "graduated"
    TRANSFERRED = "transferred"


class TeacherStatus(_ValuesMixin, str, Enum):
    """Teacher availability status."""

    ACTIVE = "active"
    ON_LEAVE = "on_leave"


class ExamStatus(_ValuesMixin, str, Enum):
    """Status shared by examinations and exam schedules."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LeaveStatus(_ValuesMixin, str, Enum):
    """Leave request decision status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class SessionStatus(_ValuesMixin, str, Enum):
    """Academic session lifecycle status."""

    ACTIVE = "active"
    COMPLETED = "completed"


class RoomStatus(_ValuesMixin, str, Enum):
    """Dormitory room occupancy status."""

    AVAILABLE = "available"
    FULL = "full"


class ReasonCategory(_ValuesMixin, str, Enum):
    """Why a transition was applied. Stored on every ledger record."""

    DISCIPLINARY = "disciplinary"
    MANUAL_RESTORATION = "manual_restoration"
    AUTOMATIC_EXPIRY = "automatic_expiry"
    ACADEMIC_PROMOTION = "academic_promotion"
    COMPLETION_DERIVED = "completion_derived"
    ACTION_REVERSAL = "action_reversal"
    LEAVE = "leave"
    ADMINISTRATIVE = "administrative"


class RejectionReason(_ValuesMixin, str, Enum):
    """Reason attached to a rejected transition request."""

    TERMINAL_STATE = "terminal state"
    INVALID_TRANSITION = "invalid transition"
    MISSING_PREREQUISITE = "missing prerequisite data"
    STALE_STATUS = "stale status"


class IncidentStatus(_ValuesMixin, str, Enum):
    """Disciplinary incident case status (not ledger-tracked)."""

    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"


class PromotionOutcome(_ValuesMixin, str, Enum):
    """Result recorded in a student's class history at the end of a session."""

    PROMOTED = "promoted"
    REPEATED = "repeated"
    TRANSFERRED = "transferred"
    GRADUATED = "graduated"


class AllocationStatus(_ValuesMixin, str, Enum):
    """Dormitory bed allocation status."""

    ACTIVE = "active"
    VACATED = "vacated"
