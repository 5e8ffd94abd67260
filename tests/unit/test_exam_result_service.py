"""ExamResultService and resolve_grade unit tests."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.aggregate import AggregateProgress
from app.application.dtos.exam import (
    ExamResultEntry,
    ExamResultResult,
    ExamResultWrite,
    ExamScheduleResult,
    GradePointResult,
)
from app.application.dtos.student import StudentResult
from app.application.services.aggregate_registry import build_default_registry
from app.application.use_cases.exams import ExamResultService, resolve_grade
from app.domain.enums import SubjectKind
from app.domain.exceptions import (
    ResourceNotFoundException,
    StatusConflictException,
    ValidationException,
)
from tests.fakes import EngineHarness, FakeProgress, build_engine

GRADES = [
    GradePointResult("A", 80, 100, 12, "Excellent"),
    GradePointResult("B", 65, 79.99, 9, "Good"),
    GradePointResult("C", 50, 64.99, 6),
    GradePointResult("D", 35, 49.99, 3),
    GradePointResult("E", 0, 34.99, 1),
]

SCHEDULE = ExamScheduleResult(
    id="sch-1",
    examination_id="exam-1",
    subject_name="Mathematics",
    class_name="Form 2",
    stream="East",
    exam_date=date(2025, 11, 16),
    total_marks=100,
    passing_marks=40,
    status="scheduled",
)


def _student(student_id: str) -> StudentResult:
    return StudentResult(
        id=student_id,
        admission_number=f"ADM-{student_id}",
        first_name="Test",
        last_name=student_id,
        current_class="Form 2",
        stream="East",
        status="active",
    )


async def _upsert(data: ExamResultWrite) -> ExamResultResult:
    return ExamResultResult(
        id=f"res-{data.student_id}",
        schedule_id=data.schedule_id,
        student_id=data.student_id,
        marks_obtained=data.marks_obtained,
        grade=data.grade,
        points=data.points,
        is_absent=data.is_absent,
        remarks=data.remarks,
    )


class TestResolveGrade:
    @pytest.mark.parametrize(
        ("marks", "grade"),
        [(100, "A"), (80, "A"), (79.5, "B"), (50, "C"), (34.99, "E"), (0, "E")],
    )
    def test_band_lookup(self, marks: float, grade: str) -> None:
        band = resolve_grade(marks, GRADES)
        assert band is not None
        assert band.grade == grade

    def test_outside_scale(self) -> None:
        assert resolve_grade(101, GRADES) is None

    def test_gap_between_bands(self) -> None:
        assert resolve_grade(79.995, GRADES) is None


@pytest.fixture
def exam_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_schedule = AsyncMock(return_value=SCHEDULE)
    repo.list_grade_points = AsyncMock(return_value=GRADES)
    repo.upsert_result = AsyncMock(side_effect=_upsert)
    repo.schedule_progress = AsyncMock(return_value=AggregateProgress(1, 2))
    repo.examination_progress = AsyncMock(return_value=AggregateProgress(0, 2))
    repo.examination_for_schedule = AsyncMock(return_value="exam-1")
    return repo


@pytest.fixture
def harness(exam_repo: AsyncMock) -> EngineHarness:
    h = build_engine(build_default_registry(exam_repo, FakeProgress()))
    h.store.add(SubjectKind.EXAM_SCHEDULE, "sch-1", "scheduled")
    h.store.add(SubjectKind.EXAMINATION, "exam-1", "scheduled")
    return h


@pytest.fixture
def student_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.list_in_class = AsyncMock(return_value=[_student("s1"), _student("s2")])
    return repo


@pytest.fixture
def svc(exam_repo, student_repo, harness: EngineHarness) -> ExamResultService:
    return ExamResultService(exam_repo, student_repo, harness.engine)


async def test_partial_results_move_schedule_in_progress(
    svc: ExamResultService, exam_repo: AsyncMock, harness: EngineHarness
) -> None:
    result = await svc.save_results(
        "sch-1", [ExamResultEntry("s1", marks_obtained=72)], actor_id="staff-1"
    )

    assert result.status == "in_progress"
    assert result.schedule.changed is True
    assert result.saved[0].grade == "B"
    assert result.saved[0].points == 9
    assert harness.store.status_of(SubjectKind.EXAM_SCHEDULE, "sch-1") == "in_progress"
    written = exam_repo.upsert_result.call_args[0][0]
    assert written.recorded_by == "staff-1"


async def test_all_results_complete_schedule_and_advance_examination(
    svc: ExamResultService, exam_repo: AsyncMock, harness: EngineHarness
) -> None:
    exam_repo.schedule_progress.return_value = AggregateProgress(2, 2)
    exam_repo.examination_progress.return_value = AggregateProgress(1, 2)

    result = await svc.save_results(
        "sch-1",
        [ExamResultEntry("s1", marks_obtained=85), ExamResultEntry("s2", is_absent=True)],
    )

    assert result.status == "completed"
    assert result.schedule.status == "completed"
    assert result.examination is not None
    assert result.examination.status == "in_progress"
    assert harness.store.status_of(SubjectKind.EXAMINATION, "exam-1") == "in_progress"
    absent = result.saved[1]
    assert absent.is_absent is True
    assert absent.grade is None
    assert absent.marks_obtained is None


async def test_schedule_not_found(svc: ExamResultService, exam_repo: AsyncMock) -> None:
    exam_repo.get_schedule = AsyncMock(return_value=None)
    with pytest.raises(ResourceNotFoundException):
        await svc.save_results("sch-404", [ExamResultEntry("s1", marks_obtained=50)])


async def test_closed_schedule_rejects_results(
    svc: ExamResultService, exam_repo: AsyncMock, harness: EngineHarness
) -> None:
    harness.store.add(SubjectKind.EXAM_SCHEDULE, "sch-1", "completed")
    with pytest.raises(StatusConflictException, match="completed exam"):
        await svc.save_results("sch-1", [ExamResultEntry("s1", marks_obtained=50)])
    exam_repo.upsert_result.assert_not_awaited()


async def test_grading_scale_required(svc: ExamResultService, exam_repo: AsyncMock) -> None:
    exam_repo.list_grade_points = AsyncMock(return_value=[])
    with pytest.raises(ValidationException, match="Grading system"):
        await svc.save_results("sch-1", [ExamResultEntry("s1", marks_obtained=50)])


async def test_students_outside_class_rejected(
    svc: ExamResultService, exam_repo: AsyncMock
) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await svc.save_results(
            "sch-1",
            [ExamResultEntry("s1", marks_obtained=50), ExamResultEntry("s9", marks_obtained=50)],
        )
    assert exc_info.value.details["invalid_students"] == ["s9"]
    exam_repo.upsert_result.assert_not_awaited()


async def test_marks_above_total_rejected(svc: ExamResultService, exam_repo: AsyncMock) -> None:
    with pytest.raises(ValidationException, match="between 0 and 100"):
        await svc.save_results("sch-1", [ExamResultEntry("s1", marks_obtained=101)])
    exam_repo.upsert_result.assert_not_awaited()


async def test_marks_required_unless_absent(svc: ExamResultService) -> None:
    with pytest.raises(ValidationException, match="unless absent"):
        await svc.save_results("sch-1", [ExamResultEntry("s1")])


async def test_empty_submission(svc: ExamResultService) -> None:
    with pytest.raises(ValidationException):
        await svc.save_results("sch-1", [])
