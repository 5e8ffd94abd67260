"""Student repository. Returns application DTOs; never writes status."""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.student import (
    PendingRestorationResult,
    StudentClassHistoryCreate,
    StudentClassHistoryResult,
    StudentResult,
)
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.student import Student, StudentClassHistory
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc, utc_now


def _student_to_result(s: Student) -> StudentResult:
    """Map ORM Student to application StudentResult."""
    return StudentResult(
        id=s.id,
        admission_number=s.admission_number,
        first_name=s.first_name,
        last_name=s.last_name,
        current_class=s.current_class,
        stream=s.stream,
        status=s.status,
        status_end_date=s.status_end_date,
    )


def _history_to_result(h: StudentClassHistory) -> StudentClassHistoryResult:
    return StudentClassHistoryResult(
        id=h.id,
        student_id=h.student_id,
        academic_session_id=h.academic_session_id,
        from_class=h.from_class,
        from_stream=h.from_stream,
        to_class=h.to_class,
        to_stream=h.to_stream,
        promotion_status=h.promotion_status,
        promoted_by=h.promoted_by,
        notes=h.notes,
        created_at=ensure_utc(h.created_at) or utc_now(),
    )


class StudentRepository(BaseRepository[Student]):
    """IStudentRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Student)

    async def get_by_id(self, student_id: str) -> StudentResult | None:
        orm = await super().get_by_id(student_id)
        return _student_to_result(orm) if orm else None

    async def get_by_admission_number(self, admission_number: str) -> StudentResult | None:
        result = await self.db.execute(
            select(Student).where(Student.admission_number == admission_number)
        )
        orm = result.scalar_one_or_none()
        return _student_to_result(orm) if orm else None

    async def list_in_class(
        self,
        class_name: str,
        stream: str | None = None,
        student_ids: list[str] | None = None,
        status: str | None = None,
    ) -> list[StudentResult]:
        stmt = select(Student).where(Student.current_class == class_name)
        if stream is not None:
            stmt = stmt.where(Student.stream == stream)
        if student_ids is not None:
            stmt = stmt.where(Student.id.in_(student_ids))
        if status is not None:
            stmt = stmt.where(Student.status == status)
        result = await self.db.execute(
            stmt.order_by(Student.last_name, Student.first_name, Student.id)
        )
        return [_student_to_result(s) for s in result.scalars().all()]

    async def update_placement(
        self, student_id: str, class_name: str | None, stream: str | None
    ) -> StudentResult:
        orm = await super().get_by_id(student_id)
        if orm is None:
            raise ResourceNotFoundException("student", student_id)
        orm = await self.apply_changes(orm, {"current_class": class_name, "stream": stream})
        return _student_to_result(orm)

    async def list_pending_restorations(
        self, statuses: list[str], as_of: date, until: date
    ) -> list[PendingRestorationResult]:
        result = await self.db.execute(
            select(Student)
            .where(
                Student.status.in_(statuses),
                Student.status_auto_restore.is_(True),
                Student.status_end_date.is_not(None),
                Student.status_end_date >= as_of,
                Student.status_end_date <= until,
            )
            .order_by(Student.status_end_date, Student.last_name)
        )
        return [
            PendingRestorationResult(
                student_id=s.id,
                admission_number=s.admission_number,
                full_name=f"{s.first_name} {s.last_name}".strip(),
                status=s.status,
                status_end_date=s.status_end_date,
                days_remaining=(s.status_end_date - as_of).days,
            )
            for s in result.scalars().all()
        ]

    async def count_by_status(self, statuses: list[str]) -> dict[str, int]:
        result = await self.db.execute(
            select(Student.status, func.count(Student.id))
            .where(Student.status.in_(statuses))
            .group_by(Student.status)
        )
        counts = {status: 0 for status in statuses}
        counts.update({status: count for status, count in result.all()})
        return counts

    async def add_class_history(
        self, data: StudentClassHistoryCreate
    ) -> StudentClassHistoryResult:
        history = StudentClassHistory(
            student_id=data.student_id,
            academic_session_id=data.academic_session_id,
            from_class=data.from_class,
            from_stream=data.from_stream,
            to_class=data.to_class,
            to_stream=data.to_stream,
            promotion_status=data.promotion_status,
            promoted_by=data.promoted_by,
            notes=data.notes,
        )
        self.db.add(history)
        await self.db.flush()
        await self.db.refresh(history)
        return _history_to_result(history)
