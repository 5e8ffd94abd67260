"""Status gateway: the only code that writes the status columns of subject tables.

Reads and writes go through Core-level select/update on the StatusTrackedMixin
columns, so the ORM status guard is never involved. Every write is checked
against the (status, status_version) the caller read under lock.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from datetime import date, datetime
from typing import Any

from sqlalchemy import select, text, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.transition import SubjectStatusSnapshot
from app.domain.enums import SubjectKind
from app.domain.exceptions import (
    PersistenceException,
    ResourceNotFoundException,
    StaleStatusException,
    SubjectLockedException,
    ValidationException,
)
from app.infrastructure.persistence.models import SUBJECT_MODELS
from app.shared.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

# Postgres lock_not_available (raised when lock_timeout expires).
_LOCK_NOT_AVAILABLE = "55P03"


def _sqlstate(error: DBAPIError) -> str | None:
    orig = error.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def _model_for(subject_type: SubjectKind) -> Any:
    model = SUBJECT_MODELS.get(SubjectKind(subject_type))
    if model is None:
        raise ValidationException(
            f"No table for subject type {subject_type!r}", field="subject_type"
        )
    return model


def _columns(model: Any) -> tuple[Any, ...]:
    return (
        model.id,
        model.status,
        model.status_version,
        model.status_effective_at,
        model.status_end_date,
        model.status_auto_restore,
    )


def _row_to_snapshot(subject_type: SubjectKind, row: Any) -> SubjectStatusSnapshot:
    return SubjectStatusSnapshot(
        subject_type=SubjectKind(subject_type),
        subject_id=row.id,
        status=row.status,
        status_version=row.status_version,
        status_effective_at=ensure_utc(row.status_effective_at),
        status_end_date=row.status_end_date,
        status_auto_restore=bool(row.status_auto_restore),
    )


class SubjectStatusRepository:
    """ISubjectStatusStore over the subject tables (see SUBJECT_MODELS)."""

    def __init__(self, db: AsyncSession, lock_timeout_ms: int = 3000) -> None:
        self.db = db
        self.lock_timeout_ms = lock_timeout_ms

    def _is_postgres(self) -> bool:
        return self.db.get_bind().dialect.name == "postgresql"

    async def get(
        self, subject_type: SubjectKind, subject_id: str
    ) -> SubjectStatusSnapshot | None:
        model = _model_for(subject_type)
        result = await self.db.execute(select(*_columns(model)).where(model.id == subject_id))
        row = result.one_or_none()
        return _row_to_snapshot(subject_type, row) if row else None

    async def lock(
        self, subject_type: SubjectKind, subject_id: str
    ) -> SubjectStatusSnapshot:
        """SELECT ... FOR UPDATE with a bounded wait (lock_timeout on Postgres)."""
        model = _model_for(subject_type)
        stmt = select(*_columns(model)).where(model.id == subject_id).with_for_update()
        try:
            if self._is_postgres():
                # SET does not take bind parameters; the value is an int from settings.
                await self.db.execute(
                    text(f"SET LOCAL lock_timeout = '{int(self.lock_timeout_ms)}ms'")
                )
            result = await self.db.execute(stmt)
        except DBAPIError as e:
            if _sqlstate(e) == _LOCK_NOT_AVAILABLE:
                logger.warning(
                    "Lock timeout on %s %s after %dms",
                    SubjectKind(subject_type).value,
                    subject_id,
                    self.lock_timeout_ms,
                )
                raise SubjectLockedException(SubjectKind(subject_type).value, subject_id) from e
            raise PersistenceException(
                f"Could not read status of {SubjectKind(subject_type).value} {subject_id}",
                operation="lock",
            ) from e
        row = result.one_or_none()
        if row is None:
            raise ResourceNotFoundException(SubjectKind(subject_type).value, subject_id)
        return _row_to_snapshot(subject_type, row)

    async def apply_status(
        self,
        snapshot: SubjectStatusSnapshot,
        new_status: str,
        *,
        effective_at: datetime,
        end_date: date | None,
        auto_restore: bool,
    ) -> SubjectStatusSnapshot:
        model = _model_for(snapshot.subject_type)
        stmt = (
            update(model)
            .where(
                model.id == snapshot.subject_id,
                model.status == snapshot.status,
                model.status_version == snapshot.status_version,
            )
            .values(
                status=new_status,
                status_effective_at=effective_at,
                status_end_date=end_date,
                status_auto_restore=auto_restore,
                status_version=snapshot.status_version + 1,
            )
            .execution_options(synchronize_session="evaluate")
        )
        try:
            result = await self.db.execute(stmt)
        except DBAPIError as e:
            raise PersistenceException(
                f"Could not write status of {snapshot.subject_type.value} {snapshot.subject_id}",
                operation="apply_status",
            ) from e
        if result.rowcount != 1:
            current = await self.get(snapshot.subject_type, snapshot.subject_id)
            raise StaleStatusException(
                snapshot.subject_type.value,
                snapshot.subject_id,
                expected_status=snapshot.status,
                actual_status=current.status if current else None,
            )
        return SubjectStatusSnapshot(
            subject_type=snapshot.subject_type,
            subject_id=snapshot.subject_id,
            status=new_status,
            status_version=snapshot.status_version + 1,
            status_effective_at=effective_at,
            status_end_date=end_date,
            status_auto_restore=auto_restore,
        )

    async def find_expired(
        self,
        as_of: date,
        limit: int = 500,
        exclude: Collection[tuple[SubjectKind, str]] = (),
    ) -> list[SubjectStatusSnapshot]:
        """Subjects with auto_restore set and an end date before as_of, oldest end date first.

        (kind, id) pairs in exclude are skipped.
        """
        found: list[SubjectStatusSnapshot] = []
        for kind, model in SUBJECT_MODELS.items():
            remaining = limit - len(found)
            if remaining <= 0:
                break
            stmt = select(*_columns(model)).where(
                model.status_auto_restore.is_(True),
                model.status_end_date.is_not(None),
                model.status_end_date < as_of,
            )
            skipped = [subject_id for k, subject_id in exclude if k == kind]
            if skipped:
                stmt = stmt.where(model.id.not_in(skipped))
            result = await self.db.execute(
                stmt.order_by(model.status_end_date, model.id).limit(remaining)
            )
            found.extend(_row_to_snapshot(kind, row) for row in result.all())
        return found
