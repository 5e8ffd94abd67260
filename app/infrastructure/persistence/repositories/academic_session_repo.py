"""Academic session repository. Returns application DTOs."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.academic_session import (
    AcademicSessionCreate,
    AcademicSessionResult,
)
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.academic_session import AcademicSession
from app.infrastructure.persistence.repositories.base import BaseRepository


def _session_to_result(s: AcademicSession) -> AcademicSessionResult:
    return AcademicSessionResult(
        id=s.id,
        year=s.year,
        term=s.term,
        start_date=s.start_date,
        end_date=s.end_date,
        is_current=s.is_current,
        status=s.status,
    )


class AcademicSessionRepository(BaseRepository[AcademicSession]):
    """IAcademicSessionRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, AcademicSession)

    async def create(self, data: AcademicSessionCreate) -> AcademicSessionResult:  # type: ignore[override]
        created = await super().create(
            AcademicSession(
                year=data.year,
                term=data.term.strip(),
                start_date=data.start_date,
                end_date=data.end_date,
                is_current=False,
            )
        )
        return _session_to_result(created)

    async def get_by_id(self, session_id: str) -> AcademicSessionResult | None:  # type: ignore[override]
        orm = await super().get_by_id(session_id)
        return _session_to_result(orm) if orm else None

    async def get_current(self) -> AcademicSessionResult | None:
        result = await self.db.execute(
            select(AcademicSession).where(AcademicSession.is_current.is_(True))
        )
        orm = result.scalar_one_or_none()
        return _session_to_result(orm) if orm else None

    async def set_current(self, session_id: str) -> AcademicSessionResult:
        # Clear first so the partial unique index on is_current never sees two rows.
        await self.db.execute(
            update(AcademicSession)
            .where(AcademicSession.is_current.is_(True), AcademicSession.id != session_id)
            .values(is_current=False)
            .execution_options(synchronize_session="evaluate")
        )
        await self.db.execute(
            update(AcademicSession)
            .where(AcademicSession.id == session_id)
            .values(is_current=True)
            .execution_options(synchronize_session="evaluate")
        )
        current = await self.get_by_id(session_id)
        if current is None:
            raise ResourceNotFoundException("academic_session", session_id)
        return current
