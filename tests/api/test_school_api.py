"""Disciplinary, leave, academic session and health endpoints with services over mocked repositories."""

from datetime import date
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import (
    get_academic_session_service,
    get_disciplinary_service,
    get_leave_service,
)
from app.application.dtos.leave import LeaveRequestResult
from app.application.dtos.student import StudentResult
from app.application.use_cases import AcademicSessionService, DisciplinaryService, LeaveService
from app.domain.enums import ReasonCategory, SubjectKind
from app.infrastructure.persistence import database
from app.main import app
from tests.fakes import EngineHarness, IncidentStore, build_engine

STUDENT = StudentResult(
    id="s1",
    admission_number="ADM-001",
    first_name="Amina",
    last_name="Okello",
    current_class="Form 2",
    stream="East",
    status="active",
)

INCIDENT = {
    "incident_date": "2026-02-23",
    "incident_type": "fighting",
    "severity": "major",
    "description": "Fight in the dining hall during lunch",
    "affects_status": True,
    "status_change": "suspended",
    "effective_date": "2026-02-23",
    "end_date": "2026-03-06",
    "auto_restore": True,
}


@pytest.fixture
def harness() -> EngineHarness:
    h = build_engine()
    h.store.add(SubjectKind.STUDENT, "s1", "active")
    return h


@pytest.fixture
def student_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=STUDENT)
    repo.get_by_admission_number = AsyncMock(return_value=STUDENT)
    return repo


@pytest.fixture
def incidents(harness: EngineHarness, student_repo: AsyncMock) -> IncidentStore:
    store = IncidentStore()
    incident_repo = AsyncMock()
    incident_repo.create_incident = AsyncMock(side_effect=store.create_incident)
    incident_repo.get_incident = AsyncMock(side_effect=store.get_incident)
    incident_repo.update_incident = AsyncMock(side_effect=store.update_incident)
    incident_repo.delete_incident = AsyncMock(side_effect=store.delete_incident)
    service = DisciplinaryService(incident_repo, student_repo, harness.engine)

    async def _service():
        return service

    app.dependency_overrides[get_disciplinary_service] = _service
    return store


async def test_create_incident_suspends_student(
    client: AsyncClient, harness: EngineHarness, incidents: IncidentStore
) -> None:
    response = await client.post(
        "/api/v1/disciplinary/incidents",
        json={**INCIDENT, "student_id": "s1"},
        headers={"X-Actor-ID": "teacher-3"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["incident"]["reported_by"] == "teacher-3"
    assert [t["new_status"] for t in data["transitions"]] == ["suspended"]
    assert harness.store.status_of(SubjectKind.STUDENT, "s1") == "suspended"
    record = harness.ledger.records[0]
    assert record.reason is ReasonCategory.DISCIPLINARY
    assert record.trigger_action_id == data["incident"]["id"]
    assert record.actor_id == "teacher-3"


async def test_create_incident_by_admission_number(
    client: AsyncClient, student_repo: AsyncMock, incidents: IncidentStore
) -> None:
    response = await client.post(
        "/api/v1/disciplinary/incidents",
        json={**INCIDENT, "admission_number": "ADM-001", "affects_status": False},
    )

    assert response.status_code == 201
    assert response.json()["transitions"] == []
    student_repo.get_by_admission_number.assert_awaited_once_with("ADM-001")


async def test_create_incident_requires_student_reference(
    client: AsyncClient, incidents: IncidentStore
) -> None:
    response = await client.post("/api/v1/disciplinary/incidents", json=INCIDENT)
    assert response.status_code == 422
    assert incidents.incidents == {}


async def test_create_incident_unknown_student(
    client: AsyncClient, student_repo: AsyncMock, incidents: IncidentStore
) -> None:
    student_repo.get_by_id.return_value = None

    response = await client.post(
        "/api/v1/disciplinary/incidents", json={**INCIDENT, "student_id": "s404"}
    )

    assert response.status_code == 404
    assert incidents.incidents == {}


async def test_start_due_leave(client: AsyncClient, harness: EngineHarness) -> None:
    harness.store.add(SubjectKind.TEACHER, "t1", "active")
    leave_repo = AsyncMock()
    leave_repo.list_approved_covering = AsyncMock(
        return_value=[
            LeaveRequestResult(
                id="lr-1",
                teacher_id="t1",
                leave_type_id="annual",
                start_date=date(2026, 3, 2),
                end_date=date(2026, 3, 6),
                working_days=5,
                academic_year="2026-2027",
                reason=None,
                status="approved",
                rejection_reason=None,
                decided_by="head-1",
                decided_at=None,
            )
        ]
    )
    service = LeaveService(leave_repo, AsyncMock(), harness.engine)

    async def _service():
        return service

    app.dependency_overrides[get_leave_service] = _service

    response = await client.post("/api/v1/leave/start-due", json={"today": "2026-03-02"})

    assert response.status_code == 200
    data = response.json()
    assert (data["started"], data["failed"]) == (1, 0)
    assert data["results"][0]["new_status"] == "on_leave"
    leave_repo.list_approved_covering.assert_awaited_once_with(date(2026, 3, 2))
    assert harness.store.status_of(SubjectKind.TEACHER, "t1") == "on_leave"


async def test_current_session_not_found(client: AsyncClient, harness: EngineHarness) -> None:
    repo = AsyncMock()
    repo.get_current = AsyncMock(return_value=None)
    service = AcademicSessionService(repo, harness.engine)

    async def _service():
        return service

    app.dependency_overrides[get_academic_session_service] = _service

    response = await client.get("/api/v1/academic-sessions/current")

    assert response.status_code == 404
    assert response.json()["error"] == "CURRENT_SESSION_NOT_FOUND"


async def test_health(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_readiness_against_database(client: AsyncClient) -> None:
    """Uses the configured DATABASE_URL (in-memory SQLite unless overridden)."""
    try:
        response = await client.get("/api/v1/health/ready")
    finally:
        await database.dispose_engine()
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
