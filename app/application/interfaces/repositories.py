"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Collection
from contextlib import AbstractAsyncContextManager
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Protocol

from app.domain.enums import SubjectKind

if TYPE_CHECKING:
    from app.application.dtos.academic_session import (
        AcademicSessionCreate,
        AcademicSessionResult,
    )
    from app.application.dtos.aggregate import AggregateProgress
    from app.application.dtos.disciplinary import (
        DisciplinaryActionCreate,
        DisciplinaryActionResult,
        IncidentCreate,
        IncidentResult,
    )
    from app.application.dtos.exam import (
        ExamResultResult,
        ExamResultWrite,
        ExamScheduleResult,
        GradePointResult,
    )
    from app.application.dtos.hostel import (
        AllocationCreate,
        AllocationResult,
        RoomResult,
    )
    from app.application.dtos.leave import (
        LeaveBalanceResult,
        LeaveRequestCreate,
        LeaveRequestResult,
    )
    from app.application.dtos.student import (
        PendingRestorationResult,
        StudentClassHistoryCreate,
        StudentClassHistoryResult,
        StudentResult,
    )
    from app.application.dtos.transition import (
        SubjectStatusSnapshot,
        TransitionRecordResult,
        TransitionToAppend,
    )
    from app.domain.value_objects.core import TriggerRef


# Status write gateway (entity store)
class ISubjectStatusStore(Protocol):
    """Protocol for the single writer of subject status columns."""

    async def get(
        self, subject_type: SubjectKind, subject_id: str
    ) -> SubjectStatusSnapshot | None:
        """Return the live status fields of a subject without locking."""

    async def lock(
        self, subject_type: SubjectKind, subject_id: str
    ) -> SubjectStatusSnapshot:
        """Lock the subject row for the rest of the transaction and return its status.

        Raises ResourceNotFoundException if missing, SubjectLockedException on lock timeout.
        """

    async def apply_status(
        self,
        snapshot: SubjectStatusSnapshot,
        new_status: str,
        *,
        effective_at: datetime,
        end_date: date | None,
        auto_restore: bool,
    ) -> SubjectStatusSnapshot:
        """Write the new status if the row still matches snapshot (status and version).

        Raises StaleStatusException when the row changed since snapshot was read.
        """

    async def find_expired(
        self,
        as_of: date,
        limit: int = 500,
        exclude: Collection[tuple[SubjectKind, str]] = (),
    ) -> list[SubjectStatusSnapshot]:
        """Return subjects whose auto-restoring status ended before as_of, minus exclude."""


# History ledger
class ITransitionLedger(Protocol):
    """Protocol for the append-only transition history."""

    async def append(self, transition: TransitionToAppend) -> TransitionRecordResult:
        """Insert a record. Raises StaleStatusException if previous_status != live status."""

    async def most_recent_for(
        self, subject_type: SubjectKind, subject_id: str
    ) -> TransitionRecordResult | None:
        """Return the latest record by (effective_date DESC, id DESC)."""

    async def find_by_trigger_action(
        self, trigger: TriggerRef
    ) -> list[TransitionRecordResult]:
        """Return records caused by the action, oldest first (compensations included)."""

    async def list_for_subject(
        self,
        subject_type: SubjectKind,
        subject_id: str,
        skip: int = 0,
        limit: int = 100,
        newest_first: bool = False,
    ) -> list[TransitionRecordResult]:
        """Return the subject's records ordered by (effective_date, id)."""


class IUnitOfWork(Protocol):
    """Protocol for transaction boundaries inside a request or batch job."""

    def savepoint(self) -> AbstractAsyncContextManager[Any]:
        """Nested transaction: rolled back alone when the block raises."""


# Aggregate counters
class IExamProgressReader(Protocol):
    """Counts used by the exam schedule and examination completion policies."""

    async def schedule_progress(self, schedule_id: str) -> AggregateProgress:
        """Results of active students vs. active students in the scheduled class."""

    async def examination_progress(self, examination_id: str) -> AggregateProgress:
        """Completed schedules vs. non-cancelled schedules."""

    async def examination_for_schedule(self, schedule_id: str) -> str | None:
        """Return the examination id owning the schedule."""


class IRoomOccupancyReader(Protocol):
    """Counts used by the dormitory room capacity policy."""

    async def room_occupancy(self, room_id: str) -> AggregateProgress:
        """Active allocations vs. room capacity."""


# School records
class IStudentRepository(Protocol):
    """Protocol for student reads and placement writes (never status)."""

    async def get_by_id(self, student_id: str) -> StudentResult | None:
        """Return student by ID."""

    async def get_by_admission_number(self, admission_number: str) -> StudentResult | None:
        """Return student by admission number."""

    async def list_in_class(
        self,
        class_name: str,
        stream: str | None = None,
        student_ids: list[str] | None = None,
        status: str | None = None,
    ) -> list[StudentResult]:
        """Return students placed in the class (optionally filtered)."""

    async def update_placement(
        self, student_id: str, class_name: str | None, stream: str | None
    ) -> StudentResult:
        """Move the student to another class/stream."""

    async def list_pending_restorations(
        self, statuses: list[str], as_of: date, until: date
    ) -> list[PendingRestorationResult]:
        """Students in one of statuses with auto-restore ending between as_of and until."""

    async def count_by_status(self, statuses: list[str]) -> dict[str, int]:
        """Return student counts per status (missing statuses count 0)."""

    async def add_class_history(
        self, data: StudentClassHistoryCreate
    ) -> StudentClassHistoryResult:
        """Append a class history row."""


class IDisciplinaryRepository(Protocol):
    """Protocol for disciplinary incidents and actions."""

    async def create_incident(self, data: IncidentCreate) -> IncidentResult:
        """Persist a new incident."""

    async def get_incident(self, incident_id: str) -> IncidentResult | None:
        """Return incident by ID."""

    async def update_incident(
        self, incident_id: str, changes: dict[str, Any]
    ) -> IncidentResult:
        """Apply field changes to an incident."""

    async def delete_incident(self, incident_id: str) -> bool:
        """Delete the incident and its actions. Return False if missing."""

    async def add_action(self, data: DisciplinaryActionCreate) -> DisciplinaryActionResult:
        """Log an action taken on an incident."""

    async def list_actions(self, incident_id: str) -> list[DisciplinaryActionResult]:
        """Return actions for an incident, oldest first."""


class IExamRepository(IExamProgressReader, Protocol):
    """Protocol for exam schedules, grading scale and results."""

    async def get_schedule(self, schedule_id: str) -> ExamScheduleResult | None:
        """Return schedule by ID."""

    async def list_grade_points(self) -> list[GradePointResult]:
        """Return the grading scale ordered by lower_mark descending."""

    async def upsert_result(self, data: ExamResultWrite) -> ExamResultResult:
        """Insert or update the result for (schedule, student)."""


class ILeaveRepository(Protocol):
    """Protocol for leave requests and balances."""

    async def create_request(self, data: LeaveRequestCreate) -> LeaveRequestResult:
        """Persist a pending leave request."""

    async def get_request(self, request_id: str) -> LeaveRequestResult | None:
        """Return leave request by ID."""

    async def record_decision(
        self,
        request_id: str,
        decided_by: str | None,
        rejection_reason: str | None,
    ) -> LeaveRequestResult:
        """Store who decided and why (status itself changes through the engine)."""

    async def get_balance(
        self, teacher_id: str, leave_type_id: str, academic_year: str
    ) -> LeaveBalanceResult | None:
        """Return the balance row, if any."""

    async def list_balances(
        self, teacher_id: str, academic_year: str
    ) -> list[LeaveBalanceResult]:
        """Return all balances of a teacher for the year."""

    async def add_used_days(self, balance_id: str, days: int) -> LeaveBalanceResult:
        """Increment used days on a balance."""

    async def list_approved_ending_on(self, day: date) -> list[LeaveRequestResult]:
        """Return approved requests whose end date is day."""

    async def list_approved_covering(self, day: date) -> list[LeaveRequestResult]:
        """Return approved requests with start_date <= day <= end_date."""

    async def find_overlapping(
        self,
        teacher_id: str,
        start_date: date,
        end_date: date,
        statuses: Collection[str],
        exclude_id: str | None = None,
    ) -> list[LeaveRequestResult]:
        """Return the teacher's requests in statuses whose dates overlap the range."""

    async def teacher_exists(self, teacher_id: str) -> bool:
        """Return True if the teacher exists."""


class IAcademicSessionRepository(Protocol):
    """Protocol for academic sessions."""

    async def create(self, data: AcademicSessionCreate) -> AcademicSessionResult:
        """Persist a new session."""

    async def get_by_id(self, session_id: str) -> AcademicSessionResult | None:
        """Return session by ID."""

    async def get_current(self) -> AcademicSessionResult | None:
        """Return the session flagged current, if any."""

    async def set_current(self, session_id: str) -> AcademicSessionResult:
        """Flag session_id as current and clear the flag on every other session."""


class IHostelRepository(IRoomOccupancyReader, Protocol):
    """Protocol for dormitory rooms and bed allocations."""

    async def get_room(self, room_id: str) -> RoomResult | None:
        """Return room by ID."""

    async def get_allocation(self, allocation_id: str) -> AllocationResult | None:
        """Return allocation by ID."""

    async def get_active_allocation_for_student(
        self, student_id: str
    ) -> AllocationResult | None:
        """Return the student's active allocation, if any."""

    async def create_allocation(self, data: AllocationCreate) -> AllocationResult:
        """Persist an active allocation."""

    async def vacate_allocation(
        self, allocation_id: str, vacated_on: date
    ) -> AllocationResult:
        """Mark the allocation vacated."""
