"""Teacher leave: requests, decisions, balances and the teacher's on-leave status.

A teacher is put on leave when approved leave is running: at approval time if
the leave has already started, otherwise by start_due_leave on its first day.
A teacher never holds two approved requests with overlapping dates.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import TYPE_CHECKING

from app.application.dtos.leave import (
    LeaveBalanceResult,
    LeaveDecisionResult,
    LeaveRequestCreate,
    LeaveRequestResult,
)
from app.application.dtos.transition import TransitionCommand, TransitionResult
from app.domain.enums import LeaveStatus, ReasonCategory, SubjectKind, TeacherStatus
from app.domain.exceptions import (
    CurrentSessionNotFoundException,
    ResourceNotFoundException,
    SchoolStatusException,
    ValidationException,
)
from app.domain.value_objects.core import TriggerRef
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        IAcademicSessionRepository,
        ILeaveRepository,
    )
    from app.application.services.propagation_engine import PropagationEngine

logger = logging.getLogger(__name__)

LEAVE_ACTION_TYPE = "leave_request"

_DECISION_STATUSES = (LeaveStatus.APPROVED.value, LeaveStatus.REJECTED.value)
# Requests that hold the teacher's dates.
_OPEN_STATUSES = (LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value)


def count_working_days(start: date, end: date) -> int:
    """Number of Monday-Friday days from start to end inclusive."""
    if end < start:
        return 0
    days = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            days += 1
        current += timedelta(days=1)
    return days


def _overlap_error(clashes: list[LeaveRequestResult]) -> ValidationException:
    clash = clashes[0]
    return ValidationException(
        f"Leave overlaps {clash.status} request {clash.id} "
        f"({clash.start_date.isoformat()} to {clash.end_date.isoformat()})",
        field="start_date",
        overlapping_request_id=clash.id,
    )


class LeaveService:
    """Leave workflow. Request status and teacher status both move through the engine."""

    def __init__(
        self,
        leave_repo: ILeaveRepository,
        session_repo: IAcademicSessionRepository,
        engine: PropagationEngine,
    ) -> None:
        self.leave_repo = leave_repo
        self.session_repo = session_repo
        self.engine = engine

    async def _current_academic_year(self) -> str:
        session = await self.session_repo.get_current()
        if session is None:
            raise CurrentSessionNotFoundException()
        return session.academic_year

    async def create_request(
        self,
        teacher_id: str,
        leave_type_id: str,
        start_date: date,
        end_date: date,
        reason: str | None = None,
    ) -> LeaveRequestResult:
        """Create a pending request after checking dates, overlaps and the remaining balance."""
        if not await self.leave_repo.teacher_exists(teacher_id):
            raise ResourceNotFoundException("teacher", teacher_id)
        if end_date < start_date:
            raise ValidationException("end_date must not be before start_date", field="end_date")
        working_days = count_working_days(start_date, end_date)
        if working_days == 0:
            raise ValidationException(
                "Leave period contains no working days", field="start_date"
            )
        clashes = await self.leave_repo.find_overlapping(
            teacher_id, start_date, end_date, _OPEN_STATUSES
        )
        if clashes:
            raise _overlap_error(clashes)

        academic_year = await self._current_academic_year()
        balance = await self.leave_repo.get_balance(teacher_id, leave_type_id, academic_year)
        if balance is None:
            raise ValidationException(
                f"No leave balance for this leave type in {academic_year}",
                field="leave_type_id",
            )
        if working_days > balance.remaining_days:
            raise ValidationException(
                f"Insufficient leave balance. Requested: {working_days} days, "
                f"Available: {balance.remaining_days} days",
                field="end_date",
                requested_days=working_days,
                available_days=balance.remaining_days,
            )
        return await self.leave_repo.create_request(
            LeaveRequestCreate(
                teacher_id=teacher_id,
                leave_type_id=leave_type_id,
                start_date=start_date,
                end_date=end_date,
                working_days=working_days,
                academic_year=academic_year,
                reason=reason,
            )
        )

    async def decide(
        self,
        request_id: str,
        status: str,
        rejection_reason: str | None = None,
        actor_id: str | None = None,
        today: date | None = None,
    ) -> LeaveDecisionResult:
        """Approve or reject a pending request.

        Approval consumes balance days. If the leave is already running and the
        teacher is active, the teacher goes on leave now (auto-restoring after
        the end date); leave that starts later is picked up by start_due_leave.
        """
        if status not in _DECISION_STATUSES:
            raise ValidationException(
                f"status must be one of {', '.join(_DECISION_STATUSES)}", field="status"
            )
        if status == LeaveStatus.REJECTED.value and not (rejection_reason or "").strip():
            raise ValidationException(
                "Rejection reason is required when rejecting leave",
                field="rejection_reason",
            )
        request = await self.leave_repo.get_request(request_id)
        if request is None:
            raise ResourceNotFoundException("leave_request", request_id)
        if status == LeaveStatus.APPROVED.value:
            clashes = await self.leave_repo.find_overlapping(
                request.teacher_id,
                request.start_date,
                request.end_date,
                (LeaveStatus.APPROVED.value,),
                exclude_id=request_id,
            )
            if clashes:
                raise _overlap_error(clashes)

        trigger = TriggerRef(LEAVE_ACTION_TYPE, request_id)
        transitions: list[TransitionResult] = [
            await self.engine.request_transition(
                TransitionCommand(
                    subject_type=SubjectKind.LEAVE_REQUEST,
                    subject_id=request_id,
                    desired_status=status,
                    reason=ReasonCategory.LEAVE,
                    trigger=trigger,
                    actor_id=actor_id,
                    note=rejection_reason if status == LeaveStatus.REJECTED.value else None,
                    expected_status=LeaveStatus.PENDING.value,
                )
            )
        ]

        if status == LeaveStatus.APPROVED.value:
            balance = await self.leave_repo.get_balance(
                request.teacher_id, request.leave_type_id, request.academic_year
            )
            if balance is None:
                raise ValidationException(
                    f"No leave balance for this leave type in {request.academic_year}",
                    field="leave_type_id",
                )
            if request.working_days > balance.remaining_days:
                raise ValidationException(
                    f"Insufficient leave balance. Requested: {request.working_days} days, "
                    f"Available: {balance.remaining_days} days",
                    field="leave_type_id",
                )
            await self.leave_repo.add_used_days(balance.id, request.working_days)
            day = today or utc_now().date()
            if request.start_date <= day <= request.end_date:
                teacher = await self.engine.current_status(
                    SubjectKind.TEACHER, request.teacher_id, lock=True
                )
                if teacher.status == TeacherStatus.ACTIVE.value:
                    transitions.append(await self._put_on_leave(request, actor_id))

        decided = await self.leave_repo.record_decision(
            request_id,
            decided_by=actor_id,
            rejection_reason=rejection_reason if status == LeaveStatus.REJECTED.value else None,
        )
        return LeaveDecisionResult(request=decided, transitions=tuple(transitions))

    async def cancel_request(
        self,
        request_id: str,
        actor_id: str | None = None,
        today: date | None = None,
    ) -> LeaveDecisionResult:
        """Cancel a pending or approved request.

        Cancelling approved leave takes the teacher off leave (compensating the
        approval's transition) and refunds the working days not yet taken.
        Leave whose end date has passed cannot be cancelled; rejected and
        cancelled requests are final.
        """
        request = await self.leave_repo.get_request(request_id)
        if request is None:
            raise ResourceNotFoundException("leave_request", request_id)
        trigger = TriggerRef(LEAVE_ACTION_TYPE, request_id)
        if request.status != LeaveStatus.APPROVED.value:
            result = await self.engine.request_transition(
                TransitionCommand(
                    subject_type=SubjectKind.LEAVE_REQUEST,
                    subject_id=request_id,
                    desired_status=LeaveStatus.CANCELLED.value,
                    reason=ReasonCategory.LEAVE,
                    trigger=trigger,
                    actor_id=actor_id,
                    expected_status=LeaveStatus.PENDING.value,
                )
            )
            refreshed = await self.leave_repo.get_request(request_id)
            return LeaveDecisionResult(request=refreshed or request, transitions=(result,))

        day = today or utc_now().date()
        if request.end_date < day:
            raise ValidationException(
                f"Leave ended on {request.end_date.isoformat()} and cannot be cancelled",
                field="status",
            )
        transitions = await self.engine.reverse_transitions_for(
            trigger,
            actor_id=actor_id,
            note="leave cancelled",
            subject_type=SubjectKind.TEACHER,
        )
        transitions.append(
            await self.engine.request_transition(
                TransitionCommand(
                    subject_type=SubjectKind.LEAVE_REQUEST,
                    subject_id=request_id,
                    desired_status=LeaveStatus.CANCELLED.value,
                    reason=ReasonCategory.LEAVE,
                    trigger=trigger,
                    actor_id=actor_id,
                    note="approved leave cancelled",
                    expected_status=LeaveStatus.APPROVED.value,
                    privileged=True,
                )
            )
        )
        refund = count_working_days(max(request.start_date, day), request.end_date)
        balance = await self.leave_repo.get_balance(
            request.teacher_id, request.leave_type_id, request.academic_year
        )
        if balance is not None and refund:
            await self.leave_repo.add_used_days(balance.id, -refund)
        logger.info(
            "Approved leave %s cancelled; %d working day(s) refunded to %s",
            request_id,
            refund if balance is not None else 0,
            request.teacher_id,
        )
        refreshed = await self.leave_repo.get_request(request_id)
        return LeaveDecisionResult(request=refreshed or request, transitions=tuple(transitions))

    async def start_due_leave(self, today: date | None = None) -> list[TransitionResult]:
        """Put active teachers on leave when approved leave covers today.

        Run after the expiry sweep so a teacher returning from one leave can
        start the next. Each teacher runs in its own savepoint; teachers
        already on leave are left alone and not reported.
        """
        day = today or utc_now().date()
        results: list[TransitionResult] = []
        for request in await self.leave_repo.list_approved_covering(day):
            result = await self._start_due(request)
            if result.changed or not result.success:
                results.append(result)
        logger.info(
            "Leave start as of %s: %d started, %d failed",
            day.isoformat(),
            sum(1 for r in results if r.changed),
            sum(1 for r in results if not r.success),
        )
        return results

    async def _start_due(self, request: LeaveRequestResult) -> TransitionResult:
        try:
            async with self.engine.savepoint():
                teacher = await self.engine.current_status(
                    SubjectKind.TEACHER, request.teacher_id, lock=True
                )
                if teacher.status != TeacherStatus.ACTIVE.value:
                    return TransitionResult(
                        success=True,
                        subject_type=SubjectKind.TEACHER,
                        subject_id=request.teacher_id,
                        previous_status=teacher.status,
                        new_status=teacher.status,
                    )
                return await self._put_on_leave(request, None)
        except SchoolStatusException as exc:
            logger.warning(
                "Could not start leave %s for teacher %s: %s",
                request.id,
                request.teacher_id,
                exc.message,
            )
            return TransitionResult(
                success=False,
                subject_type=SubjectKind.TEACHER,
                subject_id=request.teacher_id,
                previous_status=None,
                new_status=None,
                error=exc.message,
            )

    async def _put_on_leave(
        self, request: LeaveRequestResult, actor_id: str | None
    ) -> TransitionResult:
        return await self.engine.request_transition(
            TransitionCommand(
                subject_type=SubjectKind.TEACHER,
                subject_id=request.teacher_id,
                desired_status=TeacherStatus.ON_LEAVE.value,
                reason=ReasonCategory.LEAVE,
                trigger=TriggerRef(LEAVE_ACTION_TYPE, request.id),
                effective_date=request.start_date,
                end_date=request.end_date,
                auto_restore=True,
                actor_id=actor_id,
                note=f"Approved leave {request.start_date.isoformat()} to "
                f"{request.end_date.isoformat()}",
                expected_status=TeacherStatus.ACTIVE.value,
            )
        )

    async def list_balances(
        self, teacher_id: str, academic_year: str | None = None
    ) -> list[LeaveBalanceResult]:
        """Balances for the teacher in the given (default: current) academic year."""
        if not await self.leave_repo.teacher_exists(teacher_id):
            raise ResourceNotFoundException("teacher", teacher_id)
        year = academic_year or await self._current_academic_year()
        return await self.leave_repo.list_balances(teacher_id, year)

    async def list_ending_today(self, today: date | None = None) -> list[LeaveRequestResult]:
        """Approved leave whose last day is today (teachers return tomorrow)."""
        return await self.leave_repo.list_approved_ending_on(today or utc_now().date())
