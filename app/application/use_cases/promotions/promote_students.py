"""End-of-year promotion: class history, placement, and graduation/transfer status."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.application.dtos.student import (
    BulkPromotionResult,
    PromotionResult,
    StudentClassHistoryCreate,
    StudentResult,
)
from app.application.dtos.transition import TransitionCommand, TransitionResult
from app.domain.enums import (
    PromotionOutcome,
    ReasonCategory,
    RejectionReason,
    StudentStatus,
    SubjectKind,
)
from app.domain.exceptions import (
    CurrentSessionNotFoundException,
    ResourceNotFoundException,
    StatusConflictException,
    ValidationException,
)
from app.domain.value_objects.core import TriggerRef

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        IAcademicSessionRepository,
        IStudentRepository,
    )
    from app.application.services.propagation_engine import PropagationEngine

logger = logging.getLogger(__name__)

PROMOTION_ACTION_TYPE = "promotion"

# Outcomes that end the student's enrolment.
_STATUS_OUTCOMES = {
    PromotionOutcome.GRADUATED.value: StudentStatus.GRADUATED.value,
    PromotionOutcome.TRANSFERRED.value: StudentStatus.TRANSFERRED.value,
}


class PromotionService:
    """Promote, repeat, graduate or transfer active students."""

    def __init__(
        self,
        student_repo: IStudentRepository,
        session_repo: IAcademicSessionRepository,
        engine: PropagationEngine,
    ) -> None:
        self.student_repo = student_repo
        self.session_repo = session_repo
        self.engine = engine

    async def promote(
        self,
        student_id: str,
        outcome: str,
        to_class: str | None = None,
        to_stream: str | None = None,
        actor_id: str | None = None,
        notes: str | None = None,
    ) -> PromotionResult:
        """Record the outcome for one student in the current session."""
        outcome = self._validate_outcome(outcome, to_class)
        student = await self.student_repo.get_by_id(student_id)
        if student is None:
            raise ResourceNotFoundException("student", student_id)
        session = await self.session_repo.get_current()
        if session is None:
            raise CurrentSessionNotFoundException()
        return await self._promote_one(
            student, session.id, outcome, to_class, to_stream, actor_id, notes
        )

    async def bulk_promote(
        self,
        from_class: str,
        outcome: str,
        from_stream: str | None = None,
        to_class: str | None = None,
        to_stream: str | None = None,
        student_ids: list[str] | None = None,
        actor_id: str | None = None,
        notes: str | None = None,
    ) -> BulkPromotionResult:
        """Apply one outcome to a class. Students who are not active are skipped."""
        outcome = self._validate_outcome(outcome, to_class)
        session = await self.session_repo.get_current()
        if session is None:
            raise CurrentSessionNotFoundException()
        students = await self.student_repo.list_in_class(
            from_class, from_stream, student_ids=student_ids
        )
        found = {s.id for s in students}
        skipped = [sid for sid in (student_ids or []) if sid not in found]
        promoted: list[PromotionResult] = []
        for student in students:
            if student.status != StudentStatus.ACTIVE.value:
                skipped.append(student.id)
                continue
            promoted.append(
                await self._promote_one(
                    student, session.id, outcome, to_class, to_stream, actor_id, notes
                )
            )
        logger.info(
            "Bulk promotion of %s%s: %d %s, %d skipped",
            from_class,
            f" {from_stream}" if from_stream else "",
            len(promoted),
            outcome,
            len(skipped),
        )
        return BulkPromotionResult(promoted=tuple(promoted), skipped_student_ids=tuple(skipped))

    @staticmethod
    def _validate_outcome(outcome: str, to_class: str | None) -> str:
        try:
            value = PromotionOutcome(outcome).value
        except ValueError as e:
            raise ValidationException(
                f"promotion_status must be one of {', '.join(PromotionOutcome.values())}",
                field="promotion_status",
            ) from e
        if value == PromotionOutcome.PROMOTED.value and not to_class:
            raise ValidationException("to_class is required for promotion", field="to_class")
        return value

    async def _promote_one(
        self,
        student: StudentResult,
        session_id: str,
        outcome: str,
        to_class: str | None,
        to_stream: str | None,
        actor_id: str | None,
        notes: str | None,
    ) -> PromotionResult:
        if student.status != StudentStatus.ACTIVE.value:
            raise StatusConflictException(
                f"Only active students can be promoted (student is {student.status})",
                subject_type=SubjectKind.STUDENT.value,
                subject_id=student.id,
                reason=RejectionReason.INVALID_TRANSITION.value,
                current_status=student.status,
            )
        if outcome == PromotionOutcome.REPEATED.value:
            to_class, to_stream = student.current_class, student.stream
        elif outcome in _STATUS_OUTCOMES:
            to_class, to_stream = None, None

        history = await self.student_repo.add_class_history(
            StudentClassHistoryCreate(
                student_id=student.id,
                academic_session_id=session_id,
                from_class=student.current_class,
                from_stream=student.stream,
                to_class=to_class,
                to_stream=to_stream,
                promotion_status=outcome,
                promoted_by=actor_id,
                notes=notes,
            )
        )

        transition: TransitionResult | None = None
        if outcome in _STATUS_OUTCOMES:
            transition = await self.engine.request_transition(
                TransitionCommand(
                    subject_type=SubjectKind.STUDENT,
                    subject_id=student.id,
                    desired_status=_STATUS_OUTCOMES[outcome],
                    reason=ReasonCategory.ACADEMIC_PROMOTION,
                    trigger=TriggerRef(PROMOTION_ACTION_TYPE, history.id),
                    actor_id=actor_id,
                    note=notes or f"{outcome} from {student.current_class or 'unplaced'}",
                    expected_status=StudentStatus.ACTIVE.value,
                )
            )
        else:
            await self.student_repo.update_placement(student.id, to_class, to_stream)
        return PromotionResult(student_id=student.id, history=history, transition=transition)
