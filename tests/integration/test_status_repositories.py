"""Status gateway, ledger and engine against Postgres. Session is rolled back after each test."""

from datetime import date, datetime, timezone

import pytest

from app.application.dtos.transition import TransitionCommand, TransitionToAppend
from app.domain.enums import ReasonCategory, SubjectKind
from app.domain.exceptions import StaleStatusException, StatusWriteViolationException
from app.domain.value_objects.core import TriggerRef
from app.infrastructure.persistence.models import Student
from app.infrastructure.persistence.repositories import (
    StatusTransitionRepository,
    SubjectStatusRepository,
)
from app.infrastructure.services import build_propagation_engine

STUDENT = SubjectKind.STUDENT


async def _student(db_session, admission_number: str) -> Student:
    student = Student(
        admission_number=admission_number,
        first_name="Repo",
        last_name="Test",
        current_class="Form 1",
        stream="East",
    )
    db_session.add(student)
    await db_session.flush()
    return student


@pytest.mark.requires_db
async def test_new_student_starts_active(db_session) -> None:
    student = await _student(db_session, "IT-001")
    snapshot = await SubjectStatusRepository(db_session).get(STUDENT, student.id)
    assert snapshot is not None
    assert snapshot.status == "active"
    assert snapshot.status_version == 1


@pytest.mark.requires_db
async def test_status_guard_blocks_direct_writes(db_session) -> None:
    student = await _student(db_session, "IT-002")
    with pytest.raises(StatusWriteViolationException):
        student.status = "suspended"


@pytest.mark.requires_db
async def test_apply_status_is_version_checked(db_session) -> None:
    student = await _student(db_session, "IT-003")
    store = SubjectStatusRepository(db_session)
    snapshot = await store.lock(STUDENT, student.id)
    now = datetime(2026, 3, 2, tzinfo=timezone.utc)

    applied = await store.apply_status(
        snapshot, "on_probation", effective_at=now, end_date=None, auto_restore=False
    )
    assert applied.status_version == 2

    with pytest.raises(StaleStatusException):
        await store.apply_status(
            snapshot, "suspended", effective_at=now, end_date=None, auto_restore=False
        )


@pytest.mark.requires_db
async def test_ledger_rejects_stale_previous_status(db_session) -> None:
    student = await _student(db_session, "IT-004")
    engine = build_propagation_engine(db_session)
    await engine.request_transition(
        TransitionCommand(
            subject_type=STUDENT,
            subject_id=student.id,
            desired_status="on_probation",
            reason=ReasonCategory.DISCIPLINARY,
        )
    )
    ledger = StatusTransitionRepository(db_session)
    with pytest.raises(StaleStatusException):
        await ledger.append(
            TransitionToAppend(
                subject_type=STUDENT,
                subject_id=student.id,
                previous_status="active",
                new_status="suspended",
                effective_date=date(2026, 3, 2),
                reason=ReasonCategory.DISCIPLINARY,
            )
        )


@pytest.mark.requires_db
async def test_ledger_records_cannot_be_deleted(db_session) -> None:
    with pytest.raises(NotImplementedError):
        await StatusTransitionRepository(db_session).delete(object())


@pytest.mark.requires_db
async def test_suspend_sweep_and_history(db_session) -> None:
    student = await _student(db_session, "IT-005")
    engine = build_propagation_engine(db_session)

    result = await engine.request_transition(
        TransitionCommand(
            subject_type=STUDENT,
            subject_id=student.id,
            desired_status="suspended",
            reason=ReasonCategory.DISCIPLINARY,
            trigger=TriggerRef("disciplinary_incident", "inc-it-5"),
            effective_date=date(2026, 2, 23),
            end_date=date(2026, 3, 1),
            auto_restore=True,
            actor_id="staff-1",
        )
    )
    assert result.changed is True

    swept = await engine.sweep_expired(datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc))
    mine = [r for r in swept if r.subject_id == student.id]
    assert len(mine) == 1
    assert mine[0].new_status == "active"

    history = await engine.history(STUDENT, student.id)
    assert [r.new_status for r in history] == ["active", "suspended"]
    assert history[0].reason is ReasonCategory.AUTOMATIC_EXPIRY
    assert history[0].actor_id is None
    assert history[1].actor_id == "staff-1"


@pytest.mark.requires_db
async def test_reversal_appends_compensation(db_session) -> None:
    student = await _student(db_session, "IT-006")
    engine = build_propagation_engine(db_session)
    trigger = TriggerRef("disciplinary_incident", "inc-it-6")
    await engine.request_transition(
        TransitionCommand(
            subject_type=STUDENT,
            subject_id=student.id,
            desired_status="on_probation",
            reason=ReasonCategory.DISCIPLINARY,
            trigger=trigger,
        )
    )

    reversed_ = await engine.reverse_transitions_for(trigger)
    again = await engine.reverse_transitions_for(trigger)

    assert [r.new_status for r in reversed_] == ["active"]
    assert again == []
    records = await engine.transitions_for_action(trigger)
    assert len(records) == 2
    assert records[1].reverses_transition_id == records[0].id
    snapshot = await engine.current_status(STUDENT, student.id)
    assert snapshot.status == "active"
    assert snapshot.status_version == 3
