"""History ledger repository. Append-only; returns application DTOs."""

from __future__ import annotations

from sqlalchemy import asc, desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.transition import TransitionRecordResult, TransitionToAppend
from app.domain.enums import ReasonCategory, SubjectKind
from app.domain.exceptions import StaleStatusException
from app.domain.value_objects.core import TriggerRef
from app.infrastructure.persistence.models import SUBJECT_MODELS, StatusTransition
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc, utc_now


def _transition_to_result(t: StatusTransition) -> TransitionRecordResult:
    """Map ORM StatusTransition to application TransitionRecordResult."""
    return TransitionRecordResult(
        id=t.id,
        subject_type=SubjectKind(t.subject_type),
        subject_id=t.subject_id,
        previous_status=t.previous_status,
        new_status=t.new_status,
        effective_date=t.effective_date,
        end_date=t.end_date,
        auto_restore=t.auto_restore,
        reason=ReasonCategory(t.reason),
        trigger_action_type=t.trigger_action_type,
        trigger_action_id=t.trigger_action_id,
        actor_id=t.actor_id,
        note=t.note,
        reverses_transition_id=t.reverses_transition_id,
        created_at=ensure_utc(t.created_at) or utc_now(),
    )


class StatusTransitionRepository(BaseRepository[StatusTransition]):
    """ITransitionLedger. Records are immutable after creation."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, StatusTransition)

    async def delete(self, obj: StatusTransition) -> None:
        raise NotImplementedError("Status transitions are immutable and cannot be deleted")

    async def append(self, transition: TransitionToAppend) -> TransitionRecordResult:
        """Insert a record whose previous_status matches the subject's live status.

        Raises StaleStatusException on mismatch, or when the reversed record was
        already compensated by a concurrent request.
        """
        model = SUBJECT_MODELS[transition.subject_type]
        live = (
            await self.db.execute(
                select(model.status).where(model.id == transition.subject_id)
            )
        ).scalar_one_or_none()
        if live != transition.previous_status:
            raise StaleStatusException(
                transition.subject_type.value,
                transition.subject_id,
                expected_status=transition.previous_status,
                actual_status=live,
            )
        record = StatusTransition(
            subject_type=transition.subject_type.value,
            subject_id=transition.subject_id,
            previous_status=transition.previous_status,
            new_status=transition.new_status,
            effective_date=transition.effective_date,
            end_date=transition.end_date,
            auto_restore=transition.auto_restore,
            reason=transition.reason.value,
            trigger_action_type=transition.trigger_action_type,
            trigger_action_id=transition.trigger_action_id,
            actor_id=transition.actor_id,
            note=transition.note,
            reverses_transition_id=transition.reverses_transition_id,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(record)
                await self.db.flush()
        except IntegrityError as e:
            # uq on reverses_transition_id: someone else compensated this record first.
            raise StaleStatusException(
                transition.subject_type.value,
                transition.subject_id,
                expected_status=transition.previous_status,
                actual_status=None,
            ) from e
        await self.db.refresh(record)
        return _transition_to_result(record)

    async def most_recent_for(
        self, subject_type: SubjectKind, subject_id: str
    ) -> TransitionRecordResult | None:
        result = await self.db.execute(
            select(StatusTransition)
            .where(
                StatusTransition.subject_type == SubjectKind(subject_type).value,
                StatusTransition.subject_id == subject_id,
            )
            .order_by(desc(StatusTransition.effective_date), desc(StatusTransition.id))
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _transition_to_result(row) if row else None

    async def find_by_trigger_action(
        self, trigger: TriggerRef
    ) -> list[TransitionRecordResult]:
        result = await self.db.execute(
            select(StatusTransition)
            .where(
                StatusTransition.trigger_action_type == trigger.action_type,
                StatusTransition.trigger_action_id == trigger.action_id,
            )
            .order_by(asc(StatusTransition.id))
        )
        return [_transition_to_result(t) for t in result.scalars().all()]

    async def list_for_subject(
        self,
        subject_type: SubjectKind,
        subject_id: str,
        skip: int = 0,
        limit: int = 100,
        newest_first: bool = False,
    ) -> list[TransitionRecordResult]:
        order = desc if newest_first else asc
        result = await self.db.execute(
            select(StatusTransition)
            .where(
                StatusTransition.subject_type == SubjectKind(subject_type).value,
                StatusTransition.subject_id == subject_id,
            )
            .order_by(order(StatusTransition.effective_date), order(StatusTransition.id))
            .offset(skip)
            .limit(limit)
        )
        return [_transition_to_result(t) for t in result.scalars().all()]
