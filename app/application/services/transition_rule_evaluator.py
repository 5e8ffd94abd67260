"""Decides whether a status transition is legal (pure; no I/O)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from app.domain.enums import RejectionReason, SubjectKind
from app.domain.exceptions import (
    MissingPrerequisiteException,
    StaleStatusException,
    TransitionRejectedException,
    ValidationException,
)
from app.domain.value_objects.transition_table import TRANSITION_TABLES, TransitionTable

if TYPE_CHECKING:
    from app.application.dtos.transition import TransitionRecordResult


@dataclass(frozen=True)
class TransitionDecision:
    """Authorized transition descriptor."""

    subject_type: SubjectKind
    subject_id: str
    previous_status: str
    new_status: str
    changed: bool
    privileged: bool = False


def _reject(
    subject_type: SubjectKind,
    subject_id: str,
    from_status: str,
    to_status: str,
    reason: RejectionReason,
) -> None:
    """Raise TransitionRejectedException with common args."""
    raise TransitionRejectedException(
        subject_type=subject_type.value,
        subject_id=subject_id,
        from_status=from_status,
        to_status=to_status,
        reason=reason.value,
    )


class TransitionRuleEvaluator:
    """Checks a requested status change against the subject kind's transition table."""

    def __init__(
        self, tables: Mapping[SubjectKind, TransitionTable] | None = None
    ) -> None:
        self._tables = tables if tables is not None else TRANSITION_TABLES

    def table_for(self, subject_type: SubjectKind | str) -> TransitionTable:
        """Return the transition table; ValidationException for unknown subject types."""
        try:
            kind = SubjectKind(subject_type)
        except ValueError as e:
            raise ValidationException(
                f"Unknown subject type: {subject_type!r}", field="subject_type"
            ) from e
        table = self._tables.get(kind)
        if table is None:
            raise ValidationException(
                f"No transition table for subject type {kind.value!r}",
                field="subject_type",
            )
        return table

    def evaluate(
        self,
        subject_type: SubjectKind,
        subject_id: str,
        current_status: str,
        desired_status: str,
        *,
        expected_status: str | None = None,
        privileged: bool = False,
        effective_date: date | None = None,
        end_date: date | None = None,
        auto_restore: bool = False,
    ) -> TransitionDecision:
        """Return a decision or raise.

        Raises:
            ValidationException: desired status is not a state of the type, or the date range is inverted.
            MissingPrerequisiteException: auto-restore requested without an end date.
            StaleStatusException: expected_status given and it differs from current_status.
            TransitionRejectedException: terminal state or forbidden pair.
        """
        table = self.table_for(subject_type)
        if not table.has_state(desired_status):
            raise ValidationException(
                f"Unknown {table.subject_type.value} status: {desired_status!r}",
                field="desired_status",
                allowed=sorted(table.states),
            )
        if expected_status is not None and expected_status != current_status:
            raise StaleStatusException(
                subject_type=table.subject_type.value,
                subject_id=subject_id,
                expected_status=expected_status,
                actual_status=current_status,
            )
        if desired_status == current_status:
            return TransitionDecision(
                subject_type=table.subject_type,
                subject_id=subject_id,
                previous_status=current_status,
                new_status=desired_status,
                changed=False,
            )

        if table.is_terminal(current_status):
            if not (privileged and table.is_privileged_exit(current_status, desired_status)):
                _reject(
                    table.subject_type,
                    subject_id,
                    current_status,
                    desired_status,
                    RejectionReason.TERMINAL_STATE,
                )
        elif table.is_forbidden(current_status, desired_status):
            _reject(
                table.subject_type,
                subject_id,
                current_status,
                desired_status,
                RejectionReason.INVALID_TRANSITION,
            )

        if auto_restore and end_date is None:
            raise MissingPrerequisiteException(
                f"Status {desired_status!r} with auto-restore requires an end date",
                subject_type=table.subject_type.value,
                subject_id=subject_id,
                field="end_date",
            )
        if end_date is not None and effective_date is not None and end_date < effective_date:
            raise ValidationException(
                "end_date must not be before effective_date", field="end_date"
            )

        return TransitionDecision(
            subject_type=table.subject_type,
            subject_id=subject_id,
            previous_status=current_status,
            new_status=desired_status,
            changed=True,
            privileged=privileged,
        )

    def resolve_restore_target(
        self,
        subject_type: SubjectKind,
        current_status: str,
        latest: TransitionRecordResult | None,
        fallback_status: str | None = None,
    ) -> str:
        """Return the status a restoration should move the subject to.

        Uses previous_status of the most recent record when that record is the one
        that put the subject in its current status; otherwise falls back to
        fallback_status (when it is a state of this type) or the table default.
        """
        table = self.table_for(subject_type)
        if latest is not None and latest.new_status == current_status:
            return latest.previous_status
        if fallback_status and table.has_state(fallback_status):
            return fallback_status
        return table.default_status
