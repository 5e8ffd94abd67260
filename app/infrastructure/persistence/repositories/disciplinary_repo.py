"""Disciplinary incident and action repository. Returns application DTOs."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.disciplinary import (
    DisciplinaryActionCreate,
    DisciplinaryActionResult,
    IncidentCreate,
    IncidentResult,
)
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.disciplinary import (
    DisciplinaryAction,
    DisciplinaryIncident,
)
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc, utc_now


def _incident_to_result(i: DisciplinaryIncident) -> IncidentResult:
    """Map ORM DisciplinaryIncident to application IncidentResult."""
    return IncidentResult(
        id=i.id,
        student_id=i.student_id,
        incident_date=i.incident_date,
        incident_type=i.incident_type,
        severity=i.severity,
        description=i.description,
        status=i.status,
        reported_by=i.reported_by,
        location=i.location,
        witnesses=i.witnesses,
        action_taken=i.action_taken,
        follow_up_date=i.follow_up_date,
        affects_status=i.affects_status,
        status_change=i.status_change,
        effective_date=i.effective_date,
        end_date=i.end_date,
        auto_restore=i.auto_restore,
        resolution_notes=i.resolution_notes,
        created_at=ensure_utc(i.created_at) or utc_now(),
        updated_at=ensure_utc(i.updated_at) or utc_now(),
    )


def _action_to_result(a: DisciplinaryAction) -> DisciplinaryActionResult:
    return DisciplinaryActionResult(
        id=a.id,
        incident_id=a.incident_id,
        action_date=a.action_date,
        action_type=a.action_type,
        performed_by=a.performed_by,
        notes=a.notes,
    )


class DisciplinaryRepository(BaseRepository[DisciplinaryIncident]):
    """IDisciplinaryRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, DisciplinaryIncident)

    async def create_incident(self, data: IncidentCreate) -> IncidentResult:
        created = await self.create(DisciplinaryIncident(**asdict(data)))
        return _incident_to_result(created)

    async def get_incident(self, incident_id: str) -> IncidentResult | None:
        orm = await super().get_by_id(incident_id)
        return _incident_to_result(orm) if orm else None

    async def update_incident(
        self, incident_id: str, changes: dict[str, Any]
    ) -> IncidentResult:
        orm = await super().get_by_id(incident_id)
        if orm is None:
            raise ResourceNotFoundException("disciplinary_incident", incident_id)
        orm = await self.apply_changes(orm, changes)
        return _incident_to_result(orm)

    async def delete_incident(self, incident_id: str) -> bool:
        orm = await super().get_by_id(incident_id)
        if orm is None:
            return False
        # Load actions so the ORM cascade deletes them without a lazy load.
        await self.db.refresh(orm, attribute_names=["actions"])
        await self.delete(orm)
        return True

    async def add_action(self, data: DisciplinaryActionCreate) -> DisciplinaryActionResult:
        action = DisciplinaryAction(
            incident_id=data.incident_id,
            action_date=data.action_date,
            action_type=data.action_type,
            performed_by=data.performed_by,
            notes=data.notes,
        )
        self.db.add(action)
        await self.db.flush()
        await self.db.refresh(action)
        return _action_to_result(action)

    async def list_actions(self, incident_id: str) -> list[DisciplinaryActionResult]:
        result = await self.db.execute(
            select(DisciplinaryAction)
            .where(DisciplinaryAction.incident_id == incident_id)
            .order_by(DisciplinaryAction.action_date, DisciplinaryAction.created_at)
        )
        return [_action_to_result(a) for a in result.scalars().all()]
