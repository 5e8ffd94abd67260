"""Transition, subject status and aggregate endpoints over an in-memory engine."""

from datetime import date

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import get_propagation_engine, get_read_engine
from app.domain.enums import ReasonCategory, SubjectKind
from app.main import app
from tests.fakes import EngineHarness, build_engine

STUDENT = SubjectKind.STUDENT


@pytest.fixture
def harness() -> EngineHarness:
    """Engine shared by read and write routes; overrides are cleared by the client fixture."""
    h = build_engine()
    h.store.add(STUDENT, "s1", "active")
    h.store.add(SubjectKind.EXAMINATION, "exam-1", "scheduled")

    async def _engine():
        return h.engine

    app.dependency_overrides[get_propagation_engine] = _engine
    app.dependency_overrides[get_read_engine] = _engine
    return h


def _suspend(**overrides) -> dict:
    body = {
        "subject_type": "student",
        "subject_id": "s1",
        "desired_status": "suspended",
        "reason": "disciplinary",
        "effective_date": "2026-02-23",
        "end_date": "2026-03-06",
        "auto_restore": True,
    }
    body.update(overrides)
    return body


async def test_request_transition(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.post(
        "/api/v1/transitions", json=_suspend(), headers={"X-Actor-ID": "staff-9"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["changed"] is True
    assert data["previous_status"] == "active"
    assert data["new_status"] == "suspended"
    assert harness.store.status_of(STUDENT, "s1") == "suspended"
    assert harness.ledger.records[0].actor_id == "staff-9"


async def test_request_transition_without_actor_is_system(
    client: AsyncClient, harness: EngineHarness
) -> None:
    await client.post("/api/v1/transitions", json=_suspend())
    assert harness.ledger.records[0].actor_id is None


async def test_noop_transition(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.post(
        "/api/v1/transitions",
        json={
            "subject_type": "student",
            "subject_id": "s1",
            "desired_status": "active",
            "reason": "administrative",
        },
    )
    assert response.status_code == 200
    assert response.json()["changed"] is False
    assert harness.ledger.records == []


async def test_unknown_subject_type_returns_422(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.post("/api/v1/transitions", json=_suspend(subject_type="parent"))
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_half_trigger_returns_422(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.post(
        "/api/v1/transitions", json=_suspend(trigger_action_type="disciplinary_incident")
    )
    assert response.status_code == 422


async def test_unknown_status_returns_400(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.post("/api/v1/transitions", json=_suspend(desired_status="asleep"))
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_auto_restore_without_end_date_returns_400(
    client: AsyncClient, harness: EngineHarness
) -> None:
    response = await client.post("/api/v1/transitions", json=_suspend(end_date=None))
    assert response.status_code == 400


async def test_terminal_status_returns_409(client: AsyncClient, harness: EngineHarness) -> None:
    harness.store.add(STUDENT, "s1", "expelled")

    response = await client.post(
        "/api/v1/transitions",
        json={
            "subject_type": "student",
            "subject_id": "s1",
            "desired_status": "active",
            "reason": "administrative",
        },
    )

    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "TRANSITION_CONFLICT"
    assert body["details"]["from_status"] == "expelled"


async def test_stale_expected_status_returns_409(
    client: AsyncClient, harness: EngineHarness
) -> None:
    response = await client.post(
        "/api/v1/transitions", json=_suspend(expected_status="on_probation")
    )
    assert response.status_code == 409
    assert response.json()["error"] == "STATUS_CONFLICT"


async def test_missing_subject_returns_404(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.post("/api/v1/transitions", json=_suspend(subject_id="s404"))
    assert response.status_code == 404
    assert response.json()["error"] == "RESOURCE_NOT_FOUND"


async def test_subject_status(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.get("/api/v1/subjects/student/s1/status")
    assert response.status_code == 200
    assert response.json()["status"] == "active"


async def test_subject_status_not_found(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.get("/api/v1/subjects/student/s404/status")
    assert response.status_code == 404


async def test_subject_status_bad_kind(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.get("/api/v1/subjects/parent/s1/status")
    assert response.status_code == 422


async def test_history_newest_first(client: AsyncClient, harness: EngineHarness) -> None:
    await client.post("/api/v1/transitions", json=_suspend())
    await client.post("/api/v1/subjects/student/s1/restore", json={"note": "served"})

    response = await client.get("/api/v1/subjects/student/s1/history")

    assert response.status_code == 200
    records = response.json()
    assert [r["new_status"] for r in records] == ["active", "suspended"]
    assert records[0]["note"] == "served"


async def test_reverse_by_action(client: AsyncClient, harness: EngineHarness) -> None:
    await client.post(
        "/api/v1/transitions",
        json=_suspend(trigger_action_type="disciplinary_incident", trigger_action_id="inc-1"),
    )

    response = await client.post(
        "/api/v1/transitions/reverse",
        json={"action_type": "disciplinary_incident", "action_id": "inc-1"},
    )

    assert response.status_code == 200
    assert [r["new_status"] for r in response.json()] == ["active"]
    assert harness.store.status_of(STUDENT, "s1") == "active"
    assert harness.ledger.records[-1].reverses_transition_id == harness.ledger.records[0].id

    by_action = await client.get("/api/v1/transitions/by-action/disciplinary_incident/inc-1")
    assert by_action.status_code == 200
    assert len(by_action.json()) == 2


async def test_reverse_unknown_action_returns_404(
    client: AsyncClient, harness: EngineHarness
) -> None:
    response = await client.post(
        "/api/v1/transitions/reverse",
        json={"action_type": "disciplinary_incident", "action_id": "inc-404"},
    )
    assert response.status_code == 404


@pytest.mark.parametrize("action_type", ["Disciplinary", "leave request", "9lives", ""])
async def test_reverse_bad_action_type_returns_422(
    client: AsyncClient, harness: EngineHarness, action_type: str
) -> None:
    response = await client.post(
        "/api/v1/transitions/reverse", json={"action_type": action_type, "action_id": "x"}
    )
    assert response.status_code == 422


async def test_by_action_bad_action_type_returns_422(
    client: AsyncClient, harness: EngineHarness
) -> None:
    response = await client.get("/api/v1/transitions/by-action/Leave-Request/lr-1")
    assert response.status_code == 422


async def test_sweep_restores_expired(client: AsyncClient, harness: EngineHarness) -> None:
    harness.store.add(STUDENT, "s1", "suspended", end_date=date(2026, 3, 1), auto_restore=True)
    harness.ledger.seed(
        STUDENT,
        "s1",
        "active",
        "suspended",
        date(2026, 2, 23),
        reason=ReasonCategory.DISCIPLINARY,
        end_date=date(2026, 3, 1),
        auto_restore=True,
    )

    response = await client.post(
        "/api/v1/transitions/sweep", json={"now": "2026-03-02T08:00:00Z"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["candidates"] == 1
    assert data["restored"] == 1
    assert data["failed"] == 0
    assert harness.store.status_of(STUDENT, "s1") == "active"
    assert harness.ledger.records[-1].reason is ReasonCategory.AUTOMATIC_EXPIRY


async def test_sweep_without_body(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.post("/api/v1/transitions/sweep")
    assert response.status_code == 200
    assert response.json()["candidates"] == 0


async def test_recompute_aggregate(client: AsyncClient, harness: EngineHarness) -> None:
    harness.progress.set("exam-1", 1, 3)

    response = await client.post("/api/v1/aggregates/examination/exam-1/recompute")

    assert response.status_code == 200
    data = response.json()
    assert data["derived_status"] == "in_progress"
    assert data["changed"] is True
    assert data["done"] == 1
    assert data["expected"] == 3


async def test_recompute_student_returns_400(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.post("/api/v1/aggregates/student/s1/recompute")
    assert response.status_code == 400
    assert response.json()["details"]["field"] == "parent_type"


async def test_reopen_completed_examination(
    client: AsyncClient, harness: EngineHarness
) -> None:
    harness.store.add(SubjectKind.EXAMINATION, "exam-1", "completed")

    response = await client.post(
        "/api/v1/aggregates/examination/exam-1/reopen", json={"note": "late script"}
    )

    assert response.status_code == 200
    assert response.json()["new_status"] == "in_progress"
    assert harness.ledger.records[-1].note == "reopened: late script"


async def test_response_carries_request_id(client: AsyncClient, harness: EngineHarness) -> None:
    response = await client.get(
        "/api/v1/subjects/student/s1/status", headers={"X-Request-ID": "req-42"}
    )
    assert response.headers["X-Request-ID"] == "req-42"
