"""PropagationEngine unit tests over the in-memory store and ledger."""

from datetime import date, datetime, timezone

import pytest

from app.application.dtos.transition import TransitionCommand
from app.domain.enums import ReasonCategory, RejectionReason, SubjectKind
from app.domain.exceptions import (
    MissingPrerequisiteException,
    ResourceNotFoundException,
    StaleStatusException,
    TransitionRejectedException,
    ValidationException,
)
from app.domain.value_objects.core import TriggerRef
from tests.fakes import EngineHarness, build_engine

STUDENT = SubjectKind.STUDENT
INCIDENT = TriggerRef("disciplinary_incident", "inc-1")
SWEEP_NOW = datetime(2026, 3, 2, 2, 0, tzinfo=timezone.utc)


def _suspend(
    student_id: str = "s1",
    trigger: TriggerRef | None = INCIDENT,
    *,
    status: str = "suspended",
    end_date: date | None = date(2025, 3, 14),
    auto_restore: bool = True,
    actor_id: str | None = "staff-1",
) -> TransitionCommand:
    return TransitionCommand(
        subject_type=STUDENT,
        subject_id=student_id,
        desired_status=status,
        reason=ReasonCategory.DISCIPLINARY,
        trigger=trigger,
        effective_date=date(2025, 3, 3),
        end_date=end_date,
        auto_restore=auto_restore,
        actor_id=actor_id,
        note="fighting",
    )


@pytest.fixture
def harness() -> EngineHarness:
    h = build_engine()
    h.store.add(STUDENT, "s1", "active")
    return h


class TestRequestTransition:
    async def test_applies_status_and_appends_record(self, harness: EngineHarness) -> None:
        result = await harness.engine.request_transition(_suspend())

        assert result.success is True
        assert result.changed is True
        assert result.previous_status == "active"
        assert result.new_status == "suspended"
        row = harness.store.rows[(STUDENT, "s1")]
        assert row.status == "suspended"
        assert row.status_version == 2
        assert row.status_end_date == date(2025, 3, 14)
        assert row.status_auto_restore is True
        assert len(harness.ledger.records) == 1
        record = harness.ledger.records[0]
        assert record.id == result.transition_id
        assert record.previous_status == "active"
        assert record.new_status == "suspended"
        assert record.reason is ReasonCategory.DISCIPLINARY
        assert record.trigger == INCIDENT
        assert record.actor_id == "staff-1"
        assert record.effective_date == date(2025, 3, 3)

    async def test_same_status_is_noop_without_record(self, harness: EngineHarness) -> None:
        result = await harness.engine.request_transition(
            _suspend(status="active", end_date=None, auto_restore=False)
        )

        assert result.success is True
        assert result.changed is False
        assert result.transition_id is None
        assert harness.ledger.records == []
        assert harness.store.rows[(STUDENT, "s1")].status_version == 1

    async def test_unknown_status_rejected_without_side_effects(
        self, harness: EngineHarness
    ) -> None:
        with pytest.raises(ValidationException):
            await harness.engine.request_transition(_suspend(status="detained"))
        assert harness.ledger.records == []
        assert harness.store.status_of(STUDENT, "s1") == "active"

    async def test_terminal_state_rejected(self, harness: EngineHarness) -> None:
        harness.store.add(STUDENT, "s2", "graduated")
        with pytest.raises(TransitionRejectedException) as exc_info:
            await harness.engine.request_transition(_suspend("s2"))
        assert exc_info.value.reason == RejectionReason.TERMINAL_STATE.value
        assert harness.ledger.records == []

    async def test_forbidden_pair_rejected(self, harness: EngineHarness) -> None:
        await harness.engine.request_transition(_suspend())
        with pytest.raises(TransitionRejectedException) as exc_info:
            await harness.engine.request_transition(
                TransitionCommand(
                    subject_type=STUDENT,
                    subject_id="s1",
                    desired_status="graduated",
                    reason=ReasonCategory.ACADEMIC_PROMOTION,
                )
            )
        assert exc_info.value.reason == RejectionReason.INVALID_TRANSITION.value
        assert len(harness.ledger.records) == 1

    async def test_auto_restore_without_end_date(self, harness: EngineHarness) -> None:
        with pytest.raises(MissingPrerequisiteException):
            await harness.engine.request_transition(_suspend(end_date=None))
        assert harness.ledger.records == []

    async def test_stale_expected_status(self, harness: EngineHarness) -> None:
        command = TransitionCommand(
            subject_type=STUDENT,
            subject_id="s1",
            desired_status="on_probation",
            reason=ReasonCategory.DISCIPLINARY,
            expected_status="suspended",
        )
        with pytest.raises(StaleStatusException):
            await harness.engine.request_transition(command)

    async def test_missing_subject(self, harness: EngineHarness) -> None:
        with pytest.raises(ResourceNotFoundException) as exc_info:
            await harness.engine.request_transition(_suspend("nope"))
        assert exc_info.value.details == {"resource_type": "student", "resource_id": "nope"}

    async def test_unknown_subject_type(self, harness: EngineHarness) -> None:
        command = TransitionCommand(
            subject_type="school_bus",  # type: ignore[arg-type]
            subject_id="b1",
            desired_status="parked",
            reason=ReasonCategory.ADMINISTRATIVE,
        )
        with pytest.raises(ValidationException, match="Unknown subject type"):
            await harness.engine.request_transition(command)

    async def test_subject_row_is_locked(self, harness: EngineHarness) -> None:
        await harness.engine.request_transition(_suspend())
        assert (STUDENT, "s1") in harness.store.locked


class TestRestoreStatus:
    async def test_restores_previous_status(self, harness: EngineHarness) -> None:
        await harness.engine.request_transition(
            _suspend(status="on_probation", trigger=TriggerRef("disciplinary_incident", "inc-0"))
        )
        await harness.engine.request_transition(_suspend())

        result = await harness.engine.restore_status(STUDENT, "s1", actor_id="staff-2")

        assert result.changed is True
        assert result.previous_status == "suspended"
        assert result.new_status == "on_probation"
        last = harness.ledger.records[-1]
        assert last.reason is ReasonCategory.MANUAL_RESTORATION
        assert last.actor_id == "staff-2"
        assert harness.store.rows[(STUDENT, "s1")].status_end_date is None

    async def test_falls_back_to_default_without_history(self) -> None:
        harness = build_engine()
        harness.store.add(STUDENT, "s1", "suspended")

        result = await harness.engine.restore_status(STUDENT, "s1")

        assert result.new_status == "active"
        assert harness.store.status_of(STUDENT, "s1") == "active"

    async def test_active_student_is_noop(self, harness: EngineHarness) -> None:
        result = await harness.engine.restore_status(STUDENT, "s1")
        assert result.changed is False
        assert harness.ledger.records == []

    async def test_expired_before_skips_subjects_not_yet_expired(
        self, harness: EngineHarness
    ) -> None:
        await harness.engine.request_transition(_suspend(end_date=date(2025, 3, 14)))

        result = await harness.engine.restore_status(
            STUDENT, "s1", expired_before=date(2025, 3, 14)
        )

        assert result.changed is False
        assert harness.store.status_of(STUDENT, "s1") == "suspended"


class TestReverseTransitionsFor:
    async def test_appends_compensation(self, harness: EngineHarness) -> None:
        original = await harness.engine.request_transition(_suspend())

        results = await harness.engine.reverse_transitions_for(INCIDENT, actor_id="staff-9")

        assert len(results) == 1
        assert results[0].new_status == "active"
        assert harness.store.status_of(STUDENT, "s1") == "active"
        assert len(harness.ledger.records) == 2
        compensation = harness.ledger.records[1]
        assert compensation.reverses_transition_id == original.transition_id
        assert compensation.reason is ReasonCategory.ACTION_REVERSAL
        assert compensation.trigger == INCIDENT
        assert compensation.note.startswith("reverted")
        assert harness.ledger.records[0].new_status == "suspended"

    async def test_reversal_is_idempotent(self, harness: EngineHarness) -> None:
        await harness.engine.request_transition(_suspend())
        await harness.engine.reverse_transitions_for(INCIDENT)

        again = await harness.engine.reverse_transitions_for(INCIDENT)

        assert again == []
        assert len(harness.ledger.records) == 2

    async def test_reverses_terminal_status_with_privilege(self, harness: EngineHarness) -> None:
        await harness.engine.request_transition(
            _suspend(status="expelled", end_date=None, auto_restore=False)
        )

        results = await harness.engine.reverse_transitions_for(INCIDENT)

        assert results[0].success is True
        assert harness.store.status_of(STUDENT, "s1") == "active"

    async def test_skips_subject_that_moved_on(self, harness: EngineHarness) -> None:
        await harness.engine.request_transition(_suspend())
        await harness.engine.request_transition(
            _suspend(
                status="expelled",
                trigger=TriggerRef("disciplinary_incident", "inc-2"),
                end_date=None,
                auto_restore=False,
            )
        )

        results = await harness.engine.reverse_transitions_for(INCIDENT)

        assert len(results) == 1
        assert results[0].success is False
        assert "expelled" in results[0].error
        assert harness.store.status_of(STUDENT, "s1") == "expelled"
        assert len(harness.ledger.records) == 2

    async def test_unknown_trigger(self, harness: EngineHarness) -> None:
        with pytest.raises(ResourceNotFoundException):
            await harness.engine.reverse_transitions_for(TriggerRef("promotion", "h-404"))

    async def test_subject_type_filter(self, harness: EngineHarness) -> None:
        harness.store.add(SubjectKind.TEACHER, "t1", "active")
        await harness.engine.request_transition(_suspend())
        await harness.engine.request_transition(
            TransitionCommand(
                subject_type=SubjectKind.TEACHER,
                subject_id="t1",
                desired_status="on_leave",
                reason=ReasonCategory.LEAVE,
                trigger=INCIDENT,
            )
        )

        results = await harness.engine.reverse_transitions_for(
            INCIDENT, subject_type=SubjectKind.TEACHER
        )

        assert [r.subject_id for r in results] == ["t1"]
        assert harness.store.status_of(SubjectKind.TEACHER, "t1") == "active"
        assert harness.store.status_of(STUDENT, "s1") == "suspended"


def _move(
    status: str,
    effective_date: date | None,
    *,
    trigger: TriggerRef | None = None,
    end_date: date | None = None,
) -> TransitionCommand:
    return TransitionCommand(
        subject_type=STUDENT,
        subject_id="s1",
        desired_status=status,
        reason=ReasonCategory.DISCIPLINARY,
        trigger=trigger,
        effective_date=effective_date,
        end_date=end_date,
        auto_restore=end_date is not None,
    )


class TestEffectiveDateOrdering:
    """Records never sort before the subject's latest record."""

    async def test_backdated_transition_is_moved_to_latest_date(
        self, harness: EngineHarness
    ) -> None:
        await harness.engine.request_transition(_move("on_probation", date(2099, 5, 1)))

        result = await harness.engine.request_transition(
            _move("suspended", date(2099, 4, 1), trigger=INCIDENT, end_date=date(2099, 5, 10))
        )

        latest = await harness.ledger.most_recent_for(STUDENT, "s1")
        assert latest.id == result.transition_id
        assert latest.effective_date == date(2099, 5, 1)
        assert "2099-04-01 moved to 2099-05-01" in latest.note

    async def test_restore_after_backdated_transition_uses_prior_status(
        self, harness: EngineHarness
    ) -> None:
        await harness.engine.request_transition(_move("on_probation", date(2099, 5, 1)))
        await harness.engine.request_transition(
            _move("suspended", date(2099, 4, 1), trigger=INCIDENT, end_date=date(2099, 5, 10))
        )

        result = await harness.engine.restore_status(STUDENT, "s1")

        assert result.new_status == "on_probation"
        assert harness.store.status_of(STUDENT, "s1") == "on_probation"

    async def test_compensation_of_forward_dated_record_is_most_recent(
        self, harness: EngineHarness
    ) -> None:
        await harness.engine.request_transition(
            _move("suspended", date(2100, 1, 1), trigger=INCIDENT, end_date=date(2100, 1, 9))
        )

        results = await harness.engine.reverse_transitions_for(INCIDENT)

        latest = await harness.ledger.most_recent_for(STUDENT, "s1")
        assert latest.id == results[0].transition_id
        assert latest.effective_date == date(2100, 1, 1)
        assert latest.new_status == "active"

    async def test_default_date_follows_forward_dated_history(
        self, harness: EngineHarness
    ) -> None:
        await harness.engine.request_transition(_move("on_probation", date(2100, 1, 1)))

        result = await harness.engine.request_transition(_move("suspended", None, end_date=date(2100, 2, 1)))

        latest = await harness.ledger.most_recent_for(STUDENT, "s1")
        assert latest.id == result.transition_id
        assert latest.effective_date == date(2100, 1, 1)
        # Only an explicit date that was moved is noted.
        assert latest.note is None

    async def test_replayed_history_chains_to_live_status(
        self, harness: EngineHarness
    ) -> None:
        engine = harness.engine
        await engine.request_transition(_move("on_probation", date(2099, 6, 1)))
        await engine.request_transition(
            _move("suspended", date(2099, 1, 1), trigger=INCIDENT, end_date=date(2099, 6, 20))
        )
        await engine.reverse_transitions_for(INCIDENT)
        await engine.request_transition(_move("suspended", date(2099, 3, 1), end_date=date(2099, 7, 1)))
        await engine.restore_status(STUDENT, "s1")

        replay = await harness.ledger.list_for_subject(STUDENT, "s1")

        assert [r.previous_status for r in replay] == [
            "active",
            "on_probation",
            "suspended",
            "on_probation",
            "suspended",
        ]
        for before, after in zip(replay, replay[1:]):
            assert after.previous_status == before.new_status
        latest = await harness.ledger.most_recent_for(STUDENT, "s1")
        assert latest.id == replay[-1].id
        assert latest.new_status == harness.store.status_of(STUDENT, "s1") == "on_probation"


class TestSweepExpired:
    async def test_restores_expired_subjects_only(self) -> None:
        harness = build_engine()
        for sid in ("s1", "s2", "s3"):
            harness.store.add(STUDENT, sid, "active")
        await harness.engine.request_transition(_suspend("s1", end_date=date(2026, 2, 27)))
        await harness.engine.request_transition(
            _suspend("s2", status="on_probation", end_date=date(2026, 3, 1))
        )
        # Ends today: still in force.
        await harness.engine.request_transition(_suspend("s3", end_date=date(2026, 3, 2)))

        results = await harness.engine.sweep_expired(SWEEP_NOW)

        assert {r.subject_id for r in results} == {"s1", "s2"}
        assert all(r.success and r.changed for r in results)
        assert harness.store.status_of(STUDENT, "s1") == "active"
        assert harness.store.status_of(STUDENT, "s2") == "active"
        assert harness.store.status_of(STUDENT, "s3") == "suspended"
        restores = [r for r in harness.ledger.records if r.reason is ReasonCategory.AUTOMATIC_EXPIRY]
        assert len(restores) == 2
        assert all(r.actor_id is None for r in restores)

    async def test_failure_is_isolated(self) -> None:
        harness = build_engine()
        harness.store.add(STUDENT, "ok", "active")
        await harness.engine.request_transition(_suspend("ok", end_date=date(2026, 2, 27)))
        # The ledger says this student was graduated before the suspension:
        # restoring would need suspended -> graduated, which is forbidden.
        harness.store.add(STUDENT, "bad", "suspended", end_date=date(2026, 2, 20), auto_restore=True)
        harness.ledger.seed(STUDENT, "bad", "graduated", "suspended", date(2026, 2, 10))

        results = await harness.engine.sweep_expired(SWEEP_NOW)

        by_id = {r.subject_id: r for r in results}
        assert by_id["ok"].changed is True
        assert by_id["bad"].success is False
        assert "invalid transition" in by_id["bad"].error
        assert harness.store.status_of(STUDENT, "bad") == "suspended"
        assert harness.uow.savepoints == 2
        assert harness.uow.rollbacks == 1

    async def test_batch_limit_is_page_size(self) -> None:
        harness = build_engine(sweep_batch_limit=1)
        for sid in ("s1", "s2"):
            harness.store.add(STUDENT, sid, "suspended", end_date=date(2026, 1, 1), auto_restore=True)

        results = await harness.engine.sweep_expired(SWEEP_NOW)

        assert [r.subject_id for r in results] == ["s1", "s2"]
        assert all(r.changed for r in results)
        assert harness.store.expired_queries == 3

    async def test_failing_subjects_do_not_starve_newer_ones(self) -> None:
        harness = build_engine(sweep_batch_limit=2)
        # Two old suspensions whose restore target is forbidden fail on every run.
        for sid in ("old-1", "old-2"):
            harness.store.add(STUDENT, sid, "suspended", end_date=date(2026, 1, 1), auto_restore=True)
            harness.ledger.seed(STUDENT, sid, "graduated", "suspended", date(2025, 12, 1))
        harness.store.add(STUDENT, "new", "suspended", end_date=date(2026, 2, 27), auto_restore=True)

        results = await harness.engine.sweep_expired(SWEEP_NOW)

        by_id = {r.subject_id: r for r in results}
        assert by_id["old-1"].success is False
        assert by_id["old-2"].success is False
        assert by_id["new"].changed is True
        assert harness.store.status_of(STUDENT, "new") == "active"
        assert len(results) == 3

    async def test_restores_teacher_after_leave(self) -> None:
        harness = build_engine()
        harness.store.add(SubjectKind.TEACHER, "t1", "active")
        await harness.engine.request_transition(
            TransitionCommand(
                subject_type=SubjectKind.TEACHER,
                subject_id="t1",
                desired_status="on_leave",
                reason=ReasonCategory.LEAVE,
                effective_date=date(2026, 2, 23),
                end_date=date(2026, 2, 27),
                auto_restore=True,
            )
        )

        await harness.engine.sweep_expired(SWEEP_NOW)

        assert harness.store.status_of(SubjectKind.TEACHER, "t1") == "active"


class TestAggregates:
    @pytest.fixture
    def exam(self) -> EngineHarness:
        h = build_engine()
        h.store.add(SubjectKind.EXAM_SCHEDULE, "sch-1", "scheduled")
        h.store.add(SubjectKind.EXAMINATION, "exam-1", "scheduled")
        h.progress.examination_of["sch-1"] = "exam-1"
        return h

    async def test_no_results_stays_scheduled(self, exam: EngineHarness) -> None:
        exam.progress.set("sch-1", 0, 30)
        result = await exam.engine.recompute_aggregate(SubjectKind.EXAM_SCHEDULE, "sch-1")
        assert result.changed is False
        assert result.status == "scheduled"
        assert result.derived_status == "scheduled"

    async def test_partial_results_move_to_in_progress(self, exam: EngineHarness) -> None:
        exam.progress.set("sch-1", 12, 30)
        result = await exam.engine.recompute_aggregate(SubjectKind.EXAM_SCHEDULE, "sch-1")
        assert result.changed is True
        assert result.status == "in_progress"
        assert (result.done, result.expected) == (12, 30)
        record = exam.ledger.records[-1]
        assert record.reason is ReasonCategory.COMPLETION_DERIVED

    async def test_completion_propagates_to_examination(self, exam: EngineHarness) -> None:
        exam.progress.set("sch-1", 30, 30)
        exam.progress.set("exam-1", 1, 2)

        result = await exam.engine.recompute_aggregate(
            SubjectKind.EXAM_SCHEDULE, "sch-1", trigger=TriggerRef("exam_result_submission", "sch-1")
        )

        assert result.status == "completed"
        assert exam.store.status_of(SubjectKind.EXAMINATION, "exam-1") == "in_progress"
        exam_record = exam.ledger.for_subject(SubjectKind.EXAMINATION, "exam-1")[0]
        assert exam_record.trigger_action_id == "sch-1"

    async def test_recompute_is_idempotent(self, exam: EngineHarness) -> None:
        exam.progress.set("sch-1", 12, 30)
        await exam.engine.recompute_aggregate(SubjectKind.EXAM_SCHEDULE, "sch-1")
        again = await exam.engine.recompute_aggregate(SubjectKind.EXAM_SCHEDULE, "sch-1")
        assert again.changed is False
        assert len(exam.ledger.for_subject(SubjectKind.EXAM_SCHEDULE, "sch-1")) == 1

    async def test_completed_parent_not_regressed(self, exam: EngineHarness) -> None:
        exam.progress.set("sch-1", 30, 30)
        await exam.engine.recompute_aggregate(SubjectKind.EXAM_SCHEDULE, "sch-1")
        exam.progress.set("sch-1", 29, 30)

        result = await exam.engine.recompute_aggregate(SubjectKind.EXAM_SCHEDULE, "sch-1")

        assert result.changed is False
        assert result.status == "completed"
        assert result.derived_status == "in_progress"

    async def test_zero_expected_never_completes(self, exam: EngineHarness) -> None:
        exam.progress.set("sch-1", 0, 0)
        result = await exam.engine.recompute_aggregate(SubjectKind.EXAM_SCHEDULE, "sch-1")
        assert result.derived_status == "scheduled"

    async def test_kind_without_policy(self, exam: EngineHarness) -> None:
        with pytest.raises(ValidationException, match="no aggregate completion policy"):
            await exam.engine.recompute_aggregate(STUDENT, "s1")

    async def test_reopen_completed_parent(self, exam: EngineHarness) -> None:
        exam.progress.set("sch-1", 30, 30)
        await exam.engine.recompute_aggregate(SubjectKind.EXAM_SCHEDULE, "sch-1")

        result = await exam.engine.reopen_aggregate(
            SubjectKind.EXAM_SCHEDULE, "sch-1", actor_id="staff-1", note="late result"
        )

        assert result.changed is True
        assert result.new_status == "in_progress"
        assert exam.ledger.records[-1].note == "reopened: late result"

    async def test_reopen_incomplete_parent_is_noop(self, exam: EngineHarness) -> None:
        result = await exam.engine.reopen_aggregate(SubjectKind.EXAM_SCHEDULE, "sch-1")
        assert result.changed is False

    async def test_room_becomes_full_at_capacity(self) -> None:
        h = build_engine()
        h.store.add(SubjectKind.DORMITORY_ROOM, "room-1", "available")

        h.progress.set("room-1", 1, 2)
        partial = await h.engine.recompute_aggregate(SubjectKind.DORMITORY_ROOM, "room-1")
        h.progress.set("room-1", 2, 2)
        full = await h.engine.recompute_aggregate(SubjectKind.DORMITORY_ROOM, "room-1")

        assert partial.changed is False
        assert full.changed is True
        assert h.store.status_of(SubjectKind.DORMITORY_ROOM, "room-1") == "full"


class TestQueries:
    async def test_history_newest_first(self, harness: EngineHarness) -> None:
        await harness.engine.request_transition(_suspend())
        await harness.engine.restore_status(STUDENT, "s1")

        history = await harness.engine.history(STUDENT, "s1")

        assert [r.new_status for r in history] == ["active", "suspended"]

    async def test_history_of_missing_subject(self, harness: EngineHarness) -> None:
        with pytest.raises(ResourceNotFoundException):
            await harness.engine.history(STUDENT, "missing")

    async def test_transitions_for_action_include_compensations(
        self, harness: EngineHarness
    ) -> None:
        await harness.engine.request_transition(_suspend())
        await harness.engine.reverse_transitions_for(INCIDENT)

        records = await harness.engine.transitions_for_action(INCIDENT)

        assert [r.is_compensation for r in records] == [False, True]

    async def test_current_status(self, harness: EngineHarness) -> None:
        snapshot = await harness.engine.current_status(STUDENT, "s1")
        assert snapshot.status == "active"
        assert snapshot.ref.subject_id == "s1"
