"""Disciplinary incidents: record, amend, delete, and their effect on student status.

An incident with affects_status moves the student through the propagation
engine (reason disciplinary, trigger = the incident). Amending or deleting
the incident undoes that effect with compensating transitions; history is
never rewritten.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from app.application.dtos.disciplinary import (
    DisciplinaryActionCreate,
    DisciplinaryActionResult,
    IncidentCreate,
    IncidentOutcome,
    IncidentResult,
)
from app.application.dtos.transition import TransitionCommand, TransitionResult
from app.domain.enums import IncidentStatus, ReasonCategory, StudentStatus, SubjectKind
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.domain.value_objects.core import TriggerRef
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.dtos.student import PendingRestorationResult, StudentResult
    from app.application.interfaces.repositories import (
        IDisciplinaryRepository,
        IStudentRepository,
    )
    from app.application.services.propagation_engine import PropagationEngine

INCIDENT_ACTION_TYPE = "disciplinary_incident"
RESOLUTION_ACTION_TYPE = "resolution"
MANUAL_RESTORATION_ACTION_TYPE = "manual_restoration"
DEFAULT_PENDING_WINDOW_DAYS = 7

# Statuses an incident may impose on a student.
DISCIPLINARY_STATUSES = (
    StudentStatus.SUSPENDED.value,
    StudentStatus.ON_PROBATION.value,
    StudentStatus.EXPELLED.value,
)
# Statuses that can end on their own.
TIME_BOUNDED_STATUSES = (
    StudentStatus.SUSPENDED.value,
    StudentStatus.ON_PROBATION.value,
)

_UPDATABLE_FIELDS = frozenset(
    {
        "incident_date",
        "incident_type",
        "severity",
        "description",
        "location",
        "witnesses",
        "action_taken",
        "status",
        "follow_up_date",
        "resolution_notes",
        "affects_status",
        "status_change",
        "effective_date",
        "end_date",
        "auto_restore",
    }
)


def _status_terms(incident: IncidentResult) -> tuple[Any, ...] | None:
    """The part of an incident that determines the student's status, or None."""
    if not (incident.affects_status and incident.status_change):
        return None
    return (
        incident.status_change,
        incident.effective_date,
        incident.end_date,
        incident.auto_restore,
    )


def _validate_status_change(affects_status: bool, status_change: str | None) -> None:
    if not affects_status:
        return
    if not status_change:
        raise ValidationException(
            "status_change is required when affects_status is true",
            field="status_change",
        )
    if status_change not in DISCIPLINARY_STATUSES:
        raise ValidationException(
            f"status_change must be one of {', '.join(DISCIPLINARY_STATUSES)}",
            field="status_change",
        )


class DisciplinaryService:
    """Incident lifecycle plus manual restoration and status reports for students."""

    def __init__(
        self,
        incident_repo: IDisciplinaryRepository,
        student_repo: IStudentRepository,
        engine: PropagationEngine,
        *,
        pending_window_days: int = DEFAULT_PENDING_WINDOW_DAYS,
    ) -> None:
        self._incidents = incident_repo
        self._students = student_repo
        self._engine = engine
        self._pending_window_days = pending_window_days

    async def resolve_student(
        self, student_id: str | None = None, admission_number: str | None = None
    ) -> StudentResult:
        """Find a student by id or admission number."""
        student = None
        if student_id:
            student = await self._students.get_by_id(student_id)
        elif admission_number:
            student = await self._students.get_by_admission_number(admission_number)
        else:
            raise ValidationException(
                "student_id or admission_number is required", field="student_id"
            )
        if student is None:
            raise ResourceNotFoundException("student", student_id or admission_number or "")
        return student

    async def get_incident(self, incident_id: str) -> IncidentResult | None:
        return await self._incidents.get_incident(incident_id)

    async def list_actions(self, incident_id: str) -> list[DisciplinaryActionResult]:
        if await self._incidents.get_incident(incident_id) is None:
            raise ResourceNotFoundException("disciplinary_incident", incident_id)
        return await self._incidents.list_actions(incident_id)

    async def create_incident(
        self, data: IncidentCreate, actor_id: str | None = None
    ) -> IncidentOutcome:
        """Record an incident; apply its status change to the student when requested."""
        await self.resolve_student(student_id=data.student_id)
        _validate_status_change(data.affects_status, data.status_change)
        incident = await self._incidents.create_incident(
            replace(data, reported_by=data.reported_by or actor_id)
        )
        transitions: tuple[TransitionResult, ...] = ()
        if _status_terms(incident) is not None:
            transitions = (await self._apply_status(incident, actor_id),)
        return IncidentOutcome(incident=incident, transitions=transitions)

    async def update_incident(
        self,
        incident_id: str,
        changes: dict[str, Any],
        actor_id: str | None = None,
    ) -> IncidentOutcome:
        """Amend an incident.

        If the status terms change (status added, removed, or its dates changed),
        the previous effect is reversed and the new one applied. Moving the
        incident to resolved logs a resolution action.
        """
        existing = await self._incidents.get_incident(incident_id)
        if existing is None:
            raise ResourceNotFoundException("disciplinary_incident", incident_id)
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        merged = replace(existing, **changes)
        _validate_status_change(merged.affects_status, merged.status_change)

        updated = await self._incidents.update_incident(incident_id, changes)
        transitions: list[TransitionResult] = []
        old_terms = _status_terms(existing)
        new_terms = _status_terms(updated)
        if old_terms != new_terms:
            if old_terms is not None:
                transitions.extend(
                    await self._reverse_status(incident_id, actor_id, "incident amended")
                )
            if new_terms is not None:
                transitions.append(await self._apply_status(updated, actor_id))

        if (
            updated.status == IncidentStatus.RESOLVED.value
            and existing.status != IncidentStatus.RESOLVED.value
        ):
            await self._incidents.add_action(
                DisciplinaryActionCreate(
                    incident_id=incident_id,
                    action_date=utc_now().date(),
                    action_type=RESOLUTION_ACTION_TYPE,
                    performed_by=actor_id,
                    notes=updated.resolution_notes or "Incident resolved",
                )
            )
        return IncidentOutcome(incident=updated, transitions=tuple(transitions))

    async def delete_incident(
        self, incident_id: str, actor_id: str | None = None
    ) -> IncidentOutcome:
        """Delete an incident after reversing any status change it caused."""
        existing = await self._incidents.get_incident(incident_id)
        if existing is None:
            raise ResourceNotFoundException("disciplinary_incident", incident_id)
        transitions: list[TransitionResult] = []
        if _status_terms(existing) is not None:
            transitions = await self._reverse_status(incident_id, actor_id, "incident deleted")
        await self._incidents.delete_incident(incident_id)
        return IncidentOutcome(incident=None, transitions=tuple(transitions))

    async def restore_student_status(
        self,
        student_id: str,
        actor_id: str | None = None,
        note: str | None = None,
    ) -> TransitionResult:
        """Manual restoration to the status the student held before the current one.

        When the status being lifted came from an incident, the restoration is
        also logged as an action on that incident.
        """
        lifted = await self._engine.history(SubjectKind.STUDENT, student_id, limit=1)
        result = await self._engine.restore_status(
            SubjectKind.STUDENT,
            student_id,
            actor_id=actor_id,
            reason=ReasonCategory.MANUAL_RESTORATION,
            note=note or "Manual status restoration",
        )
        if not (result.changed and lifted):
            return result
        record = lifted[0]
        if record.trigger_action_type != INCIDENT_ACTION_TYPE or not record.trigger_action_id:
            return result
        if await self._incidents.get_incident(record.trigger_action_id) is None:
            return result
        await self._incidents.add_action(
            DisciplinaryActionCreate(
                incident_id=record.trigger_action_id,
                action_date=utc_now().date(),
                action_type=MANUAL_RESTORATION_ACTION_TYPE,
                performed_by=actor_id,
                notes=(
                    f"Status restored from {result.previous_status} to {result.new_status}"
                    + (f": {note}" if note else "")
                ),
            )
        )
        return result

    async def list_pending_restorations(
        self, as_of: date | None = None, window_days: int | None = None
    ) -> list[PendingRestorationResult]:
        """Students whose suspension or probation auto-restores within the window."""
        start = as_of or utc_now().date()
        days = window_days if window_days is not None else self._pending_window_days
        return await self._students.list_pending_restorations(
            list(TIME_BOUNDED_STATUSES), start, start + timedelta(days=days)
        )

    async def active_status_counts(self) -> dict[str, int]:
        """Number of students currently suspended, on probation, or expelled."""
        return await self._students.count_by_status(list(DISCIPLINARY_STATUSES))

    async def _apply_status(
        self, incident: IncidentResult, actor_id: str | None
    ) -> TransitionResult:
        summary = incident.description[:50]
        return await self._engine.request_transition(
            TransitionCommand(
                subject_type=SubjectKind.STUDENT,
                subject_id=incident.student_id,
                desired_status=incident.status_change or "",
                reason=ReasonCategory.DISCIPLINARY,
                trigger=TriggerRef(INCIDENT_ACTION_TYPE, incident.id),
                effective_date=incident.effective_date,
                end_date=incident.end_date,
                auto_restore=incident.auto_restore,
                actor_id=actor_id,
                note=f"Status change due to disciplinary incident: {incident.incident_type} - {summary}",
            )
        )

    async def _reverse_status(
        self, incident_id: str, actor_id: str | None, note: str
    ) -> list[TransitionResult]:
        try:
            return await self._engine.reverse_transitions_for(
                TriggerRef(INCIDENT_ACTION_TYPE, incident_id),
                actor_id=actor_id,
                note=note,
            )
        except ResourceNotFoundException:
            # The incident's status change was a no-op (student already held it).
            return []
