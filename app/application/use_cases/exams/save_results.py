"""Exam result submission: grade marks, save them, and derive schedule/examination status."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.application.dtos.exam import (
    ExamResultEntry,
    ExamResultWrite,
    GradePointResult,
    ResultSubmissionResult,
)
from app.domain.enums import ExamStatus, RejectionReason, StudentStatus, SubjectKind
from app.domain.exceptions import (
    ResourceNotFoundException,
    StatusConflictException,
    ValidationException,
)
from app.domain.value_objects.core import TriggerRef

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        IExamRepository,
        IStudentRepository,
    )
    from app.application.services.propagation_engine import PropagationEngine

RESULT_SUBMISSION_ACTION_TYPE = "exam_result_submission"

_CLOSED_SCHEDULE_STATUSES = frozenset(
    {ExamStatus.COMPLETED.value, ExamStatus.CANCELLED.value}
)


def resolve_grade(
    marks: float, grade_points: list[GradePointResult]
) -> GradePointResult | None:
    """Return the band containing marks (bands checked from the highest lower_mark down)."""
    for band in sorted(grade_points, key=lambda g: g.lower_mark, reverse=True):
        if band.lower_mark <= marks <= band.upper_mark:
            return band
    return None


class ExamResultService:
    """Save results for a schedule and let the engine derive completion."""

    def __init__(
        self,
        exam_repo: IExamRepository,
        student_repo: IStudentRepository,
        engine: PropagationEngine,
    ) -> None:
        self.exam_repo = exam_repo
        self.student_repo = student_repo
        self.engine = engine

    async def save_results(
        self,
        schedule_id: str,
        entries: list[ExamResultEntry],
        actor_id: str | None = None,
    ) -> ResultSubmissionResult:
        """Grade and upsert results, then recompute the schedule and its examination.

        Raises ResourceNotFoundException if the schedule is missing,
        StatusConflictException if it is completed or cancelled, and
        ValidationException for bad marks, unknown students or a missing grading scale.
        """
        schedule = await self.exam_repo.get_schedule(schedule_id)
        if schedule is None:
            raise ResourceNotFoundException("exam_schedule", schedule_id)
        if not entries:
            raise ValidationException("At least one result is required", field="results")

        # Hold the schedule lock so completion is derived from a consistent count.
        snapshot = await self.engine.current_status(
            SubjectKind.EXAM_SCHEDULE, schedule_id, lock=True
        )
        if snapshot.status in _CLOSED_SCHEDULE_STATUSES:
            raise StatusConflictException(
                f"Cannot modify results for a {snapshot.status} exam",
                subject_type=SubjectKind.EXAM_SCHEDULE.value,
                subject_id=schedule_id,
                reason=RejectionReason.TERMINAL_STATE.value,
                current_status=snapshot.status,
            )

        grade_points = await self.exam_repo.list_grade_points()
        if not grade_points:
            raise ValidationException(
                "Grading system not configured properly", field="grade_points"
            )

        student_ids = list(dict.fromkeys(e.student_id for e in entries))
        enrolled = await self.student_repo.list_in_class(
            schedule.class_name,
            schedule.stream,
            student_ids=student_ids,
            status=StudentStatus.ACTIVE.value,
        )
        enrolled_ids = {s.id for s in enrolled}
        invalid = [sid for sid in student_ids if sid not in enrolled_ids]
        if invalid:
            raise ValidationException(
                "Some students are not active in this class/stream",
                field="student_id",
                invalid_students=invalid,
            )

        writes = [self._grade(schedule_id, schedule.total_marks, entry, grade_points, actor_id)
                  for entry in entries]
        saved = tuple([await self.exam_repo.upsert_result(w) for w in writes])

        trigger = TriggerRef(RESULT_SUBMISSION_ACTION_TYPE, schedule_id)
        schedule_agg = await self.engine.recompute_aggregate(
            SubjectKind.EXAM_SCHEDULE, schedule_id, trigger=trigger, actor_id=actor_id
        )
        # request_transition already recomputes the examination when the schedule
        # changed; recompute here as well so unchanged schedules still report it.
        examination_agg = await self.engine.recompute_aggregate(
            SubjectKind.EXAMINATION,
            schedule.examination_id,
            trigger=trigger,
            actor_id=actor_id,
        )
        status = (
            "completed"
            if schedule_agg.status == ExamStatus.COMPLETED.value
            else "in_progress"
        )
        return ResultSubmissionResult(
            schedule_id=schedule_id,
            saved=saved,
            schedule=schedule_agg,
            examination=examination_agg,
            status=status,
        )

    @staticmethod
    def _grade(
        schedule_id: str,
        total_marks: float,
        entry: ExamResultEntry,
        grade_points: list[GradePointResult],
        actor_id: str | None,
    ) -> ExamResultWrite:
        if entry.is_absent:
            return ExamResultWrite(
                schedule_id=schedule_id,
                student_id=entry.student_id,
                marks_obtained=None,
                grade=None,
                points=None,
                is_absent=True,
                remarks=entry.remarks,
                recorded_by=actor_id,
            )
        if entry.marks_obtained is None:
            raise ValidationException(
                f"Marks are required for student {entry.student_id} unless absent",
                field="marks_obtained",
            )
        if entry.marks_obtained < 0 or entry.marks_obtained > total_marks:
            raise ValidationException(
                f"Marks for student {entry.student_id} must be between 0 and {total_marks:g}",
                field="marks_obtained",
            )
        band = resolve_grade(entry.marks_obtained, grade_points)
        return ExamResultWrite(
            schedule_id=schedule_id,
            student_id=entry.student_id,
            marks_obtained=entry.marks_obtained,
            grade=band.grade if band else None,
            points=band.points if band else None,
            is_absent=False,
            remarks=entry.remarks,
            recorded_by=actor_id,
        )
