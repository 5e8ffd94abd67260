"""Exam schedule, grading scale and result repository; also the exam progress counters."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.aggregate import AggregateProgress
from app.application.dtos.exam import (
    ExamResultResult,
    ExamResultWrite,
    ExamScheduleResult,
    GradePointResult,
)
from app.domain.enums import ExamStatus, StudentStatus
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.exam import (
    ExamResult,
    ExamSchedule,
    GradePoint,
)
from app.infrastructure.persistence.models.student import Student
from app.infrastructure.persistence.repositories.base import BaseRepository


def _schedule_to_result(s: ExamSchedule) -> ExamScheduleResult:
    return ExamScheduleResult(
        id=s.id,
        examination_id=s.examination_id,
        subject_name=s.subject_name,
        class_name=s.class_name,
        stream=s.stream,
        exam_date=s.exam_date,
        total_marks=s.total_marks,
        passing_marks=s.passing_marks,
        status=s.status,
    )


def _result_to_result(r: ExamResult) -> ExamResultResult:
    return ExamResultResult(
        id=r.id,
        schedule_id=r.schedule_id,
        student_id=r.student_id,
        marks_obtained=r.marks_obtained,
        grade=r.grade,
        points=r.points,
        is_absent=r.is_absent,
        remarks=r.remarks,
    )


class ExamRepository(BaseRepository[ExamSchedule]):
    """IExamRepository (and IExamProgressReader for the completion policies)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ExamSchedule)

    async def get_schedule(self, schedule_id: str) -> ExamScheduleResult | None:
        orm = await super().get_by_id(schedule_id)
        return _schedule_to_result(orm) if orm else None

    async def list_grade_points(self) -> list[GradePointResult]:
        result = await self.db.execute(
            select(GradePoint).order_by(GradePoint.lower_mark.desc())
        )
        return [
            GradePointResult(
                grade=g.grade,
                lower_mark=g.lower_mark,
                upper_mark=g.upper_mark,
                points=g.points,
                remarks=g.remarks,
            )
            for g in result.scalars().all()
        ]

    async def upsert_result(self, data: ExamResultWrite) -> ExamResultResult:
        result = await self.db.execute(
            select(ExamResult).where(
                ExamResult.schedule_id == data.schedule_id,
                ExamResult.student_id == data.student_id,
            )
        )
        values = {
            "marks_obtained": data.marks_obtained,
            "grade": data.grade,
            "points": data.points,
            "is_absent": data.is_absent,
            "remarks": data.remarks,
            "recorded_by": data.recorded_by,
        }
        existing = result.scalar_one_or_none()
        if existing is not None:
            for key, value in values.items():
                setattr(existing, key, value)
            await self.db.flush()
            return _result_to_result(existing)
        created = ExamResult(schedule_id=data.schedule_id, student_id=data.student_id, **values)
        self.db.add(created)
        await self.db.flush()
        return _result_to_result(created)

    async def schedule_progress(self, schedule_id: str) -> AggregateProgress:
        """Results of active students vs. active students placed in the scheduled class."""
        schedule = await super().get_by_id(schedule_id)
        if schedule is None:
            raise ResourceNotFoundException("exam_schedule", schedule_id)
        in_class = [
            Student.current_class == schedule.class_name,
            Student.status == StudentStatus.ACTIVE.value,
        ]
        if schedule.stream is not None:
            in_class.append(Student.stream == schedule.stream)
        expected = (
            await self.db.execute(select(func.count(Student.id)).where(*in_class))
        ).scalar_one()
        done = (
            await self.db.execute(
                select(func.count(ExamResult.id))
                .join(Student, Student.id == ExamResult.student_id)
                .where(ExamResult.schedule_id == schedule_id, *in_class)
            )
        ).scalar_one()
        return AggregateProgress(done=done, expected=expected)

    async def examination_progress(self, examination_id: str) -> AggregateProgress:
        """Completed schedules vs. schedules that are not cancelled."""
        result = await self.db.execute(
            select(ExamSchedule.status, func.count(ExamSchedule.id))
            .where(ExamSchedule.examination_id == examination_id)
            .group_by(ExamSchedule.status)
        )
        counts = dict(result.all())
        expected = sum(
            n for status, n in counts.items() if status != ExamStatus.CANCELLED.value
        )
        return AggregateProgress(
            done=counts.get(ExamStatus.COMPLETED.value, 0), expected=expected
        )

    async def examination_for_schedule(self, schedule_id: str) -> str | None:
        result = await self.db.execute(
            select(ExamSchedule.examination_id).where(ExamSchedule.id == schedule_id)
        )
        return result.scalar_one_or_none()
