"""Tests for domain exceptions (error_code, message, details) and their HTTP mapping."""

from app.core.exception_handlers import status_code_for
from app.domain.exceptions import (
    CurrentSessionNotFoundException,
    MissingPrerequisiteException,
    PersistenceException,
    ResourceNotFoundException,
    SchoolStatusException,
    SqlNotConfiguredException,
    StaleStatusException,
    StatusConflictException,
    StatusWriteViolationException,
    SubjectLockedException,
    TransitionRejectedException,
    ValidationException,
)


def test_base_exception_default_error_code() -> None:
    """Base SchoolStatusException uses class name as error_code when not provided."""
    exc = SchoolStatusException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "SchoolStatusException"
    assert exc.details == {}


def test_to_dict() -> None:
    exc = SchoolStatusException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Invalid date", field="end_date", allowed=["a"])
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "end_date", "allowed": ["a"]}


def test_validation_exception_without_field() -> None:
    exc = ValidationException("Invalid")
    assert exc.details == {}


def test_missing_prerequisite_is_validation_error() -> None:
    exc = MissingPrerequisiteException("needs end date", "student", "s1", "end_date")
    assert isinstance(exc, ValidationException)
    assert exc.details["reason"] == "missing prerequisite data"
    assert exc.details["subject_id"] == "s1"


def test_transition_rejected() -> None:
    exc = TransitionRejectedException("student", "s1", "expelled", "active", "terminal state")
    assert isinstance(exc, StatusConflictException)
    assert exc.error_code == "TRANSITION_CONFLICT"
    assert exc.reason == "terminal state"
    assert "'expelled' -> 'active'" in exc.message


def test_stale_status() -> None:
    exc = StaleStatusException("leave_request", "l1", "pending", "approved")
    assert exc.error_code == "STATUS_CONFLICT"
    assert exc.reason == "stale status"
    assert exc.details["expected_status"] == "pending"
    assert exc.details["actual_status"] == "approved"


def test_subject_locked_is_retryable() -> None:
    exc = SubjectLockedException("student", "s1")
    assert exc.error_code == "SUBJECT_LOCKED"
    assert exc.details["retryable"] is True


def test_resource_not_found() -> None:
    exc = ResourceNotFoundException("student", "s1")
    assert exc.message == "student not found: s1"
    assert exc.details == {"resource_type": "student", "resource_id": "s1"}


def test_status_codes() -> None:
    assert status_code_for(ValidationException("x")) == 400
    assert status_code_for(ResourceNotFoundException("student", "s1")) == 404
    assert status_code_for(CurrentSessionNotFoundException()) == 404
    assert status_code_for(StaleStatusException("student", "s1", "a", "b")) == 409
    assert status_code_for(TransitionRejectedException("student", "s1", "a", "b", "c")) == 409
    assert status_code_for(SubjectLockedException("student", "s1")) == 409
    assert status_code_for(StatusWriteViolationException("Student")) == 500
    assert status_code_for(PersistenceException("db down", operation="append")) == 503
    assert status_code_for(SqlNotConfiguredException()) == 503
