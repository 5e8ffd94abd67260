"""Status column guard on new (transient) ORM rows. No database needed."""

import pytest

from app.domain.enums import LeaveStatus, SubjectKind
from app.domain.exceptions import ValidationException
from app.infrastructure.persistence.models import (
    SUBJECT_MODELS,
    LeaveRequest,
    Student,
    Teacher,
)


def _student(**overrides) -> Student:
    fields = dict(
        admission_number="ADM-900",
        first_name="Guard",
        last_name="Test",
        current_class="Form 1",
        stream="East",
    )
    fields.update(overrides)
    return Student(**fields)


class TestNewRowStatus:
    def test_known_status_accepted(self) -> None:
        assert _student(status="on_probation").status == "on_probation"

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            _student(status="detained")
        assert exc_info.value.details["field"] == "status"

    def test_status_of_another_kind_rejected(self) -> None:
        with pytest.raises(ValidationException, match="teacher status 'suspended'"):
            Teacher(status="suspended")

    def test_enum_member_accepted(self) -> None:
        request = LeaveRequest(status=LeaveStatus.APPROVED)
        assert request.status == LeaveStatus.APPROVED

    def test_every_subject_model_declares_its_kind(self) -> None:
        for kind, model in SUBJECT_MODELS.items():
            assert model.__subject_kind__ is kind
        assert set(SUBJECT_MODELS) == set(SubjectKind)
