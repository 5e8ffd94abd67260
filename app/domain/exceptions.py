"""Domain exceptions for the school status ledger.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class SchoolStatusException(Exception):
    """Base exception for all application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. subject_id, reason).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the API error handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(SchoolStatusException):
    """Raised when input validation fails (e.g. unknown status or bad date range)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        **details_extra: Any,
    ) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
            **details_extra: Optional keys merged into details.
        """
        details: dict[str, Any] = {"field": field} if field else {}
        details.update(details_extra)
        super().__init__(message, "VALIDATION_ERROR", details)


class MissingPrerequisiteException(ValidationException):
    """Raised when a transition lacks data its target state requires (e.g. auto-restore without end date)."""

    def __init__(self, message: str, subject_type: str, subject_id: str, field: str) -> None:
        super().__init__(
            message,
            field=field,
            subject_type=subject_type,
            subject_id=subject_id,
            reason="missing prerequisite data",
        )


class StatusConflictException(SchoolStatusException):
    """Raised when the subject's current status does not allow the requested change.

    Covers stale reads, chain mismatches and rule violations. Callers may
    re-read state and retry.
    """

    def __init__(
        self,
        message: str,
        subject_type: str,
        subject_id: str,
        reason: str,
        error_code: str = "STATUS_CONFLICT",
        **details_extra: Any,
    ) -> None:
        """Initialize with the subject and reason for the conflict.

        Args:
            message: Human-readable description.
            subject_type: Type of the subject (e.g. 'student').
            subject_id: Subject identifier.
            reason: Short reason (e.g. 'terminal state', 'stale status').
            error_code: Machine-readable code for the handler.
            **details_extra: Optional keys merged into details (e.g. from_status, to_status).
        """
        details = {
            "subject_type": subject_type,
            "subject_id": subject_id,
            "reason": reason,
            **details_extra,
        }
        super().__init__(message, error_code, details)

    @property
    def reason(self) -> str:
        return self.details["reason"]


class TransitionRejectedException(StatusConflictException):
    """Raised when a transition is forbidden by the subject type's transition table."""

    def __init__(
        self,
        subject_type: str,
        subject_id: str,
        from_status: str,
        to_status: str,
        reason: str,
    ) -> None:
        super().__init__(
            f"Transition {from_status!r} -> {to_status!r} rejected for "
            f"{subject_type} {subject_id}: {reason}",
            subject_type=subject_type,
            subject_id=subject_id,
            reason=reason,
            error_code="TRANSITION_CONFLICT",
            from_status=from_status,
            to_status=to_status,
        )


class StaleStatusException(StatusConflictException):
    """Raised when the live status differs from the status the caller based its change on."""

    def __init__(
        self,
        subject_type: str,
        subject_id: str,
        expected_status: str | None,
        actual_status: str | None,
    ) -> None:
        super().__init__(
            f"Status of {subject_type} {subject_id} changed concurrently "
            f"(expected {expected_status!r}, found {actual_status!r})",
            subject_type=subject_type,
            subject_id=subject_id,
            reason="stale status",
            expected_status=expected_status,
            actual_status=actual_status,
        )


class SubjectLockedException(StatusConflictException):
    """Raised when the subject row lock cannot be acquired within the configured timeout."""

    def __init__(self, subject_type: str, subject_id: str) -> None:
        super().__init__(
            f"{subject_type} {subject_id} is being modified by another request; retry.",
            subject_type=subject_type,
            subject_id=subject_id,
            reason="lock timeout",
            error_code="SUBJECT_LOCKED",
            retryable=True,
        )


class StatusWriteViolationException(SchoolStatusException):
    """Raised when code outside the status write gateway assigns a persisted status."""

    def __init__(self, model_name: str) -> None:
        super().__init__(
            f"Status of a persisted {model_name} may only change through the propagation engine",
            "STATUS_WRITE_VIOLATION",
            {"model": model_name},
        )


class ResourceNotFoundException(SchoolStatusException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'student', 'transition').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class CurrentSessionNotFoundException(SchoolStatusException):
    """Raised when an operation needs the current academic session and none is marked current."""

    def __init__(self) -> None:
        super().__init__(
            "No academic session is marked as current",
            "CURRENT_SESSION_NOT_FOUND",
        )


class PersistenceException(SchoolStatusException):
    """Raised when the underlying store fails (connection loss, constraint violation)."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        details = {"operation": operation} if operation else {}
        super().__init__(message, "STORAGE_ERROR", details)


class SqlNotConfiguredException(SchoolStatusException):
    """Raised when an operation requires a SQL database that is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
