"""Propagation engine: the only path that changes a subject's status.

Every operation runs inside the caller's database transaction:
lock subject row -> evaluate rules -> append ledger record -> write status
(version-checked) -> recompute dependent aggregates. Any failure propagates
and the caller's transaction rolls back, so no partial state is visible.
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from app.application.dtos.aggregate import AggregateResult
from app.application.dtos.transition import (
    SubjectStatusSnapshot,
    TransitionCommand,
    TransitionRecordResult,
    TransitionResult,
    TransitionToAppend,
)
from app.application.services.aggregate_registry import AggregateRegistry
from app.application.services.transition_rule_evaluator import TransitionRuleEvaluator
from app.domain.enums import ReasonCategory, SubjectKind
from app.domain.exceptions import (
    ResourceNotFoundException,
    SchoolStatusException,
)
from app.domain.value_objects.core import SubjectRef, TriggerRef
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        ISubjectStatusStore,
        ITransitionLedger,
        IUnitOfWork,
    )

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_BATCH_LIMIT = 500
REVERTED_NOTE_PREFIX = "reverted"


def _noop_result(snapshot: SubjectStatusSnapshot) -> TransitionResult:
    return TransitionResult(
        success=True,
        subject_type=snapshot.subject_type,
        subject_id=snapshot.subject_id,
        previous_status=snapshot.status,
        new_status=snapshot.status,
        changed=False,
    )


class PropagationEngine:
    """Applies transitions to the entity store and ledger, then propagates aggregates."""

    def __init__(
        self,
        store: ISubjectStatusStore,
        ledger: ITransitionLedger,
        unit_of_work: IUnitOfWork,
        evaluator: TransitionRuleEvaluator | None = None,
        aggregates: AggregateRegistry | None = None,
        *,
        default_restore_status: str = "active",
        sweep_batch_limit: int = DEFAULT_SWEEP_BATCH_LIMIT,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._uow = unit_of_work
        self._evaluator = evaluator or TransitionRuleEvaluator()
        self._aggregates = aggregates or AggregateRegistry()
        self._default_restore_status = default_restore_status
        self._sweep_batch_limit = sweep_batch_limit

    def savepoint(self) -> AbstractAsyncContextManager[Any]:
        """Nested transaction on the engine's unit of work, for callers running batches."""
        return self._uow.savepoint()

    async def current_status(
        self, subject_type: SubjectKind, subject_id: str, *, lock: bool = False
    ) -> SubjectStatusSnapshot:
        """Return the subject's live status (optionally holding its row lock)."""
        kind = self._evaluator.table_for(subject_type).subject_type
        if lock:
            return await self._store.lock(kind, subject_id)
        snapshot = await self._store.get(kind, subject_id)
        if snapshot is None:
            raise ResourceNotFoundException(kind.value, subject_id)
        return snapshot

    @traced("propagation_engine.request_transition")
    async def request_transition(self, command: TransitionCommand) -> TransitionResult:
        """Validate and apply one transition.

        Returns a no-op result (changed=False) when the subject already holds
        the desired status. Raises ValidationException, StatusConflictException
        (and subclasses), ResourceNotFoundException or PersistenceException.
        """
        kind = self._evaluator.table_for(command.subject_type).subject_type
        snapshot = await self._store.lock(kind, command.subject_id)
        effective_date = await self._next_effective_date(
            kind, command.subject_id, command.effective_date
        )
        note = command.note
        if command.effective_date is not None and effective_date != command.effective_date:
            logger.info(
                "Effective date of %s %s moved from %s to %s (later history exists)",
                kind.value,
                command.subject_id,
                command.effective_date.isoformat(),
                effective_date.isoformat(),
            )
            moved = (
                f"effective date {command.effective_date.isoformat()} moved to "
                f"{effective_date.isoformat()}"
            )
            note = f"{note} ({moved})" if note else moved
        decision = self._evaluator.evaluate(
            kind,
            command.subject_id,
            snapshot.status,
            command.desired_status,
            expected_status=command.expected_status,
            privileged=command.privileged,
            effective_date=effective_date,
            end_date=command.end_date,
            auto_restore=command.auto_restore,
        )
        if not decision.changed:
            logger.debug(
                "No-op transition for %s %s (already %s)",
                kind.value,
                command.subject_id,
                snapshot.status,
            )
            return _noop_result(snapshot)

        trigger = command.trigger
        record = await self._ledger.append(
            TransitionToAppend(
                subject_type=kind,
                subject_id=command.subject_id,
                previous_status=decision.previous_status,
                new_status=decision.new_status,
                effective_date=effective_date,
                reason=command.reason,
                end_date=command.end_date,
                auto_restore=command.auto_restore,
                trigger_action_type=trigger.action_type if trigger else None,
                trigger_action_id=trigger.action_id if trigger else None,
                actor_id=command.actor_id,
                note=note,
                reverses_transition_id=command.reverses_transition_id,
            )
        )
        await self._store.apply_status(
            snapshot,
            decision.new_status,
            effective_at=utc_now(),
            end_date=command.end_date,
            auto_restore=command.auto_restore,
        )
        add_span_attributes(
            subject_type=kind.value,
            from_status=decision.previous_status,
            to_status=decision.new_status,
        )
        logger.info(
            "Transition %s applied to %s %s: %s -> %s (reason=%s, actor=%s)",
            record.id,
            kind.value,
            command.subject_id,
            decision.previous_status,
            decision.new_status,
            command.reason.value,
            command.actor_id or "system",
        )

        for parent in await self._aggregates.parents_of(SubjectRef(kind, command.subject_id)):
            await self.recompute_aggregate(
                parent.subject_type,
                parent.subject_id,
                trigger=trigger,
                actor_id=command.actor_id,
            )

        return TransitionResult(
            success=True,
            subject_type=kind,
            subject_id=command.subject_id,
            previous_status=decision.previous_status,
            new_status=decision.new_status,
            transition_id=record.id,
            changed=True,
        )

    async def _next_effective_date(
        self, kind: SubjectKind, subject_id: str, requested: date | None
    ) -> date:
        """Requested date (default today), never earlier than the subject's latest record.

        The ledger is ordered by (effective_date, id), so a record dated before
        the latest one would not be the most recent and would break the chain.
        """
        effective_date = requested or utc_now().date()
        latest = await self._ledger.most_recent_for(kind, subject_id)
        if latest is not None and effective_date < latest.effective_date:
            return latest.effective_date
        return effective_date

    @traced("propagation_engine.restore_status")
    async def restore_status(
        self,
        subject_type: SubjectKind,
        subject_id: str,
        *,
        actor_id: str | None = None,
        reason: ReasonCategory = ReasonCategory.MANUAL_RESTORATION,
        note: str | None = None,
        trigger: TriggerRef | None = None,
        expired_before: date | None = None,
    ) -> TransitionResult:
        """Move the subject back to the status it held before its current one.

        With expired_before set (sweep path), the subject is only restored if its
        status is still auto-restoring and ended before that date.
        """
        kind = self._evaluator.table_for(subject_type).subject_type
        snapshot = await self._store.lock(kind, subject_id)
        if expired_before is not None and not snapshot.is_expired(expired_before):
            return _noop_result(snapshot)
        latest = await self._ledger.most_recent_for(kind, subject_id)
        target = self._evaluator.resolve_restore_target(
            kind, snapshot.status, latest, self._default_restore_status
        )
        return await self.request_transition(
            TransitionCommand(
                subject_type=kind,
                subject_id=subject_id,
                desired_status=target,
                reason=reason,
                trigger=trigger,
                actor_id=actor_id,
                note=note,
                expected_status=snapshot.status,
            )
        )

    @traced("propagation_engine.reverse_transitions_for")
    async def reverse_transitions_for(
        self,
        trigger: TriggerRef,
        *,
        actor_id: str | None = None,
        note: str | None = None,
        subject_type: SubjectKind | None = None,
    ) -> list[TransitionResult]:
        """Append compensating transitions that undo what the action caused.

        Records are undone newest first. A compensation carries the effective
        date of the record it undoes (moved later only if newer history exists).
        A record already compensated is skipped; a record whose subject has
        since moved on is reported with success=False and left alone. subject_type limits the reversal to subjects of that kind.
        Raises ResourceNotFoundException when no transition references the action.
        """
        records = await self._ledger.find_by_trigger_action(trigger)
        originals = [r for r in records if not r.is_compensation]
        if not originals:
            raise ResourceNotFoundException("transition", str(trigger))
        if subject_type is not None:
            originals = [r for r in originals if r.subject_type == subject_type]
        compensated = {r.reverses_transition_id for r in records if r.is_compensation}
        reversal_note = f"{REVERTED_NOTE_PREFIX}: {note}" if note else (
            f"{REVERTED_NOTE_PREFIX}: effects of {trigger} removed"
        )

        results: list[TransitionResult] = []
        for record in sorted(originals, key=lambda r: (r.effective_date, r.id), reverse=True):
            if record.id in compensated:
                continue
            snapshot = await self._store.lock(record.subject_type, record.subject_id)
            if snapshot.status != record.new_status:
                logger.info(
                    "Skipping reversal of transition %s: %s %s is now %s, not %s",
                    record.id,
                    record.subject_type.value,
                    record.subject_id,
                    snapshot.status,
                    record.new_status,
                )
                results.append(
                    TransitionResult(
                        success=False,
                        subject_type=record.subject_type,
                        subject_id=record.subject_id,
                        previous_status=snapshot.status,
                        new_status=snapshot.status,
                        error=(
                            f"subject no longer holds {record.new_status!r} "
                            f"(now {snapshot.status!r})"
                        ),
                    )
                )
                continue
            results.append(await self._compensate(record, trigger, actor_id, reversal_note))
        return results

    async def _compensate(
        self,
        record: TransitionRecordResult,
        trigger: TriggerRef,
        actor_id: str | None,
        note: str,
    ) -> TransitionResult:
        return await self.request_transition(
            TransitionCommand(
                subject_type=record.subject_type,
                subject_id=record.subject_id,
                desired_status=record.previous_status,
                reason=ReasonCategory.ACTION_REVERSAL,
                effective_date=record.effective_date,
                trigger=trigger,
                actor_id=actor_id,
                note=note,
                expected_status=record.new_status,
                privileged=True,
                reverses_transition_id=record.id,
            )
        )

    @traced("propagation_engine.sweep_expired")
    async def sweep_expired(self, now: datetime | None = None) -> list[TransitionResult]:
        """Restore every subject whose auto-restoring status ended before today.

        Each subject runs in its own savepoint with actor None and reason
        automatic_expiry; a failure is reported and does not undo the others.
        Candidates are read in pages of sweep_batch_limit. Subjects left
        unrestored are excluded from later pages, so they cannot crowd out
        the rest of the run.
        """
        as_of = (now or utc_now()).date()
        results: list[TransitionResult] = []
        unrestored: set[tuple[SubjectKind, str]] = set()
        while True:
            page = await self._store.find_expired(
                as_of, limit=self._sweep_batch_limit, exclude=unrestored
            )
            if not page:
                break
            for candidate in page:
                result = await self._restore_expired(candidate, as_of)
                if not result.changed:
                    unrestored.add((candidate.subject_type, candidate.subject_id))
                results.append(result)
        logger.info(
            "Status sweep as of %s: %d candidate(s), %d restored, %d failed",
            as_of.isoformat(),
            len(results),
            sum(1 for r in results if r.changed),
            sum(1 for r in results if not r.success),
        )
        return results

    async def _restore_expired(
        self, candidate: SubjectStatusSnapshot, as_of: date
    ) -> TransitionResult:
        try:
            async with self._uow.savepoint():
                return await self.restore_status(
                    candidate.subject_type,
                    candidate.subject_id,
                    actor_id=None,
                    reason=ReasonCategory.AUTOMATIC_EXPIRY,
                    note=f"status end date {candidate.status_end_date.isoformat()} passed",
                    expired_before=as_of,
                )
        except SchoolStatusException as exc:
            logger.warning(
                "Automatic restore failed for %s %s: %s",
                candidate.subject_type.value,
                candidate.subject_id,
                exc.message,
            )
            return TransitionResult(
                success=False,
                subject_type=candidate.subject_type,
                subject_id=candidate.subject_id,
                previous_status=candidate.status,
                new_status=candidate.status,
                error=exc.message,
            )

    @traced("propagation_engine.recompute_aggregate")
    async def recompute_aggregate(
        self,
        parent_type: SubjectKind,
        parent_id: str,
        *,
        trigger: TriggerRef | None = None,
        actor_id: str | None = None,
    ) -> AggregateResult:
        """Derive the parent's status from persisted dependents and apply it if it advances.

        Terminal parents are never reopened here. Safe to call repeatedly.
        """
        policy = self._aggregates.policy_for(parent_type)
        table = self._evaluator.table_for(policy.parent_type)
        snapshot = await self._store.lock(policy.parent_type, parent_id)
        progress = await policy.count(parent_id)
        derived = policy.derive(progress)
        result = AggregateResult(
            parent_type=policy.parent_type,
            parent_id=parent_id,
            status=snapshot.status,
            derived_status=derived,
            done=progress.done,
            expected=progress.expected,
            changed=False,
        )
        if table.is_terminal(snapshot.status) or not policy.advances(snapshot.status, derived):
            return result

        transition = await self.request_transition(
            TransitionCommand(
                subject_type=policy.parent_type,
                subject_id=parent_id,
                desired_status=derived,
                reason=ReasonCategory.COMPLETION_DERIVED,
                trigger=trigger,
                actor_id=actor_id,
                note=f"{progress.done}/{progress.expected} dependents complete",
                expected_status=snapshot.status,
            )
        )
        return AggregateResult(
            parent_type=policy.parent_type,
            parent_id=parent_id,
            status=transition.new_status or snapshot.status,
            derived_status=derived,
            done=progress.done,
            expected=progress.expected,
            changed=transition.changed,
            transition_id=transition.transition_id,
        )

    @traced("propagation_engine.reopen_aggregate")
    async def reopen_aggregate(
        self,
        parent_type: SubjectKind,
        parent_id: str,
        *,
        actor_id: str | None = None,
        note: str | None = None,
        trigger: TriggerRef | None = None,
    ) -> TransitionResult:
        """Privileged move of a completed parent back to its progress status.

        A parent that is not complete is left alone (no-op result).
        """
        policy = self._aggregates.policy_for(parent_type)
        snapshot = await self._store.lock(policy.parent_type, parent_id)
        if snapshot.status != policy.complete_status:
            return _noop_result(snapshot)
        return await self.request_transition(
            TransitionCommand(
                subject_type=policy.parent_type,
                subject_id=parent_id,
                desired_status=policy.progress_status,
                reason=ReasonCategory.ADMINISTRATIVE,
                trigger=trigger,
                actor_id=actor_id,
                note=f"reopened: {note}" if note else "reopened",
                expected_status=snapshot.status,
                privileged=True,
            )
        )

    async def history(
        self,
        subject_type: SubjectKind,
        subject_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> list[TransitionRecordResult]:
        """Return the subject's ledger, newest first."""
        snapshot = await self.current_status(subject_type, subject_id)
        return await self._ledger.list_for_subject(
            snapshot.subject_type, subject_id, skip=skip, limit=limit, newest_first=True
        )

    async def transitions_for_action(self, trigger: TriggerRef) -> list[TransitionRecordResult]:
        """Return every ledger record caused by the action (compensations included)."""
        return await self._ledger.find_by_trigger_action(trigger)
