"""AcademicSessionService and RoomAllocationService unit tests."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.academic_session import (
    AcademicSessionCreate,
    AcademicSessionResult,
)
from app.application.dtos.aggregate import AggregateProgress
from app.application.dtos.hostel import AllocationResult, RoomResult
from app.application.dtos.student import StudentResult
from app.application.dtos.transition import TransitionCommand
from app.application.services.aggregate_registry import build_default_registry
from app.application.use_cases import AcademicSessionService, RoomAllocationService
from app.domain.enums import ReasonCategory, SubjectKind
from app.domain.exceptions import (
    CurrentSessionNotFoundException,
    ResourceNotFoundException,
    StatusConflictException,
    TransitionRejectedException,
    ValidationException,
)
from tests.fakes import EngineHarness, FakeProgress, build_engine


def _session(is_current: bool = False, status: str = "active") -> AcademicSessionResult:
    return AcademicSessionResult(
        id="sess-1",
        year=2025,
        term="Term 3",
        start_date=date(2025, 9, 1),
        end_date=date(2025, 11, 28),
        is_current=is_current,
        status=status,
    )


class TestAcademicSessionService:
    @pytest.fixture
    def harness(self) -> EngineHarness:
        h = build_engine()
        h.store.add(SubjectKind.ACADEMIC_SESSION, "sess-1", "active")
        return h

    @pytest.fixture
    def repo(self) -> AsyncMock:
        repo = AsyncMock()
        repo.get_by_id = AsyncMock(return_value=_session())
        repo.get_current = AsyncMock(return_value=_session(is_current=True))
        repo.set_current = AsyncMock(return_value=_session(is_current=True))
        repo.create = AsyncMock(return_value=_session())
        return repo

    @pytest.fixture
    def svc(self, repo: AsyncMock, harness: EngineHarness) -> AcademicSessionService:
        return AcademicSessionService(repo, harness.engine)

    async def test_create(self, svc: AcademicSessionService, repo: AsyncMock) -> None:
        data = AcademicSessionCreate(year=2026, term="Term 1")
        await svc.create_session(data)
        repo.create.assert_awaited_once_with(data)

    async def test_create_blank_term(self, svc: AcademicSessionService) -> None:
        with pytest.raises(ValidationException, match="term"):
            await svc.create_session(AcademicSessionCreate(year=2026, term="  "))

    async def test_create_inverted_dates(self, svc: AcademicSessionService) -> None:
        with pytest.raises(ValidationException, match="end_date"):
            await svc.create_session(
                AcademicSessionCreate(
                    year=2026,
                    term="Term 1",
                    start_date=date(2026, 4, 3),
                    end_date=date(2026, 1, 12),
                )
            )

    async def test_academic_year_label(self, svc: AcademicSessionService) -> None:
        current = await svc.get_current()
        assert current.academic_year == "2025-2026"

    async def test_no_current_session(self, svc: AcademicSessionService, repo: AsyncMock) -> None:
        repo.get_current = AsyncMock(return_value=None)
        with pytest.raises(CurrentSessionNotFoundException) as exc_info:
            await svc.get_current()
        assert exc_info.value.error_code == "CURRENT_SESSION_NOT_FOUND"

    async def test_session_not_found(self, svc: AcademicSessionService, repo: AsyncMock) -> None:
        repo.get_by_id = AsyncMock(return_value=None)
        with pytest.raises(ResourceNotFoundException):
            await svc.get_session("sess-404")

    async def test_set_current(self, svc: AcademicSessionService, repo: AsyncMock) -> None:
        result = await svc.set_current("sess-1")
        assert result.is_current is True
        repo.set_current.assert_awaited_once_with("sess-1")

    async def test_completed_session_cannot_be_current(
        self, svc: AcademicSessionService, repo: AsyncMock
    ) -> None:
        repo.get_by_id = AsyncMock(return_value=_session(status="completed"))
        with pytest.raises(StatusConflictException, match="completed session"):
            await svc.set_current("sess-1")
        repo.set_current.assert_not_awaited()

    async def test_complete_session(
        self, svc: AcademicSessionService, harness: EngineHarness
    ) -> None:
        result = await svc.complete_session("sess-1", actor_id="principal")

        assert result.new_status == "completed"
        assert harness.ledger.records[0].note == "Session 2025 Term 3 closed"

    async def test_current_session_cannot_be_completed(
        self, svc: AcademicSessionService, repo: AsyncMock
    ) -> None:
        repo.get_by_id = AsyncMock(return_value=_session(is_current=True))
        with pytest.raises(ValidationException, match="current session cannot be completed"):
            await svc.complete_session("sess-1")

    async def test_completed_session_is_terminal(
        self, svc: AcademicSessionService, harness: EngineHarness
    ) -> None:
        await svc.complete_session("sess-1")
        with pytest.raises(TransitionRejectedException):
            await harness.engine.request_transition(
                TransitionCommand(
                    subject_type=SubjectKind.ACADEMIC_SESSION,
                    subject_id="sess-1",
                    desired_status="active",
                    reason=ReasonCategory.ADMINISTRATIVE,
                )
            )


def _student(status: str = "active") -> StudentResult:
    return StudentResult(
        id="s1",
        admission_number="ADM-001",
        first_name="Cynthia",
        last_name="Achieng",
        current_class="Form 2",
        stream="West",
        status=status,
    )


def _allocation(status: str = "active") -> AllocationResult:
    return AllocationResult(
        id="alloc-1",
        room_id="room-1",
        student_id="s1",
        allocated_on=date(2026, 1, 12),
        vacated_on=None if status == "active" else date(2026, 3, 1),
        status=status,
    )


class TestRoomAllocationService:
    @pytest.fixture
    def hostel_repo(self) -> AsyncMock:
        repo = AsyncMock()
        repo.get_room = AsyncMock(
            return_value=RoomResult(
                id="room-1", name="K1", dormitory="Kilimanjaro", capacity=2, status="available"
            )
        )
        repo.get_active_allocation_for_student = AsyncMock(return_value=None)
        repo.create_allocation = AsyncMock(return_value=_allocation())
        repo.get_allocation = AsyncMock(return_value=_allocation())
        repo.vacate_allocation = AsyncMock(return_value=_allocation("vacated"))
        repo.room_occupancy = AsyncMock(return_value=AggregateProgress(1, 2))
        return repo

    @pytest.fixture
    def harness(self, hostel_repo: AsyncMock) -> EngineHarness:
        h = build_engine(build_default_registry(FakeProgress(), hostel_repo))
        h.store.add(SubjectKind.DORMITORY_ROOM, "room-1", "available")
        return h

    @pytest.fixture
    def student_repo(self) -> AsyncMock:
        repo = AsyncMock()
        repo.get_by_id = AsyncMock(return_value=_student())
        return repo

    @pytest.fixture
    def svc(self, hostel_repo, student_repo, harness: EngineHarness) -> RoomAllocationService:
        return RoomAllocationService(hostel_repo, student_repo, harness.engine)

    async def test_allocate_with_free_beds(
        self, svc: RoomAllocationService, hostel_repo: AsyncMock, harness: EngineHarness
    ) -> None:
        hostel_repo.room_occupancy.side_effect = [AggregateProgress(0, 2), AggregateProgress(1, 2)]

        outcome = await svc.allocate("room-1", "s1", actor_id="matron")

        assert outcome.allocation.id == "alloc-1"
        assert outcome.room is not None
        assert outcome.room.changed is False
        assert harness.store.status_of(SubjectKind.DORMITORY_ROOM, "room-1") == "available"
        created = hostel_repo.create_allocation.call_args[0][0]
        assert created.allocated_by == "matron"

    async def test_last_bed_fills_room(
        self, svc: RoomAllocationService, hostel_repo: AsyncMock, harness: EngineHarness
    ) -> None:
        hostel_repo.room_occupancy.side_effect = [AggregateProgress(1, 2), AggregateProgress(2, 2)]

        outcome = await svc.allocate("room-1", "s1")

        assert outcome.room.changed is True
        assert outcome.room.status == "full"
        assert harness.store.status_of(SubjectKind.DORMITORY_ROOM, "room-1") == "full"

    async def test_full_room_rejects_allocation(
        self, svc: RoomAllocationService, hostel_repo: AsyncMock, harness: EngineHarness
    ) -> None:
        harness.store.add(SubjectKind.DORMITORY_ROOM, "room-1", "full")
        with pytest.raises(StatusConflictException, match="is full"):
            await svc.allocate("room-1", "s1")
        hostel_repo.create_allocation.assert_not_awaited()

    async def test_inactive_student(
        self, svc: RoomAllocationService, student_repo: AsyncMock
    ) -> None:
        student_repo.get_by_id = AsyncMock(return_value=_student("suspended"))
        with pytest.raises(ValidationException, match="Only active students"):
            await svc.allocate("room-1", "s1")

    async def test_student_already_allocated(
        self, svc: RoomAllocationService, hostel_repo: AsyncMock
    ) -> None:
        hostel_repo.get_active_allocation_for_student = AsyncMock(return_value=_allocation())
        with pytest.raises(ValidationException, match="already has an active"):
            await svc.allocate("room-1", "s1")

    async def test_room_not_found(self, svc: RoomAllocationService, hostel_repo: AsyncMock) -> None:
        hostel_repo.get_room = AsyncMock(return_value=None)
        with pytest.raises(ResourceNotFoundException):
            await svc.allocate("room-404", "s1")

    async def test_vacate_reopens_full_room(
        self, svc: RoomAllocationService, harness: EngineHarness
    ) -> None:
        harness.store.add(SubjectKind.DORMITORY_ROOM, "room-1", "full")

        outcome = await svc.vacate("alloc-1", actor_id="matron")

        assert outcome.allocation.status == "vacated"
        assert outcome.reopen is not None
        assert outcome.reopen.new_status == "available"
        assert harness.store.status_of(SubjectKind.DORMITORY_ROOM, "room-1") == "available"
        assert harness.ledger.records[-1].note == "reopened: bed vacated"

    async def test_vacate_from_available_room(
        self, svc: RoomAllocationService, harness: EngineHarness
    ) -> None:
        outcome = await svc.vacate("alloc-1")
        assert outcome.reopen.changed is False
        assert harness.ledger.records == []

    async def test_vacate_twice(self, svc: RoomAllocationService, hostel_repo: AsyncMock) -> None:
        hostel_repo.get_allocation = AsyncMock(return_value=_allocation("vacated"))
        with pytest.raises(ValidationException, match="already vacated"):
            await svc.vacate("alloc-1")
        hostel_repo.vacate_allocation.assert_not_awaited()
