"""Declared state machines, one per subject kind.

Each table lists the allowed states, the default (initial) state, the
terminal states, (from, to) pairs that are never allowed, and the
privileged exits: the only way out of a terminal state.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from app.domain.enums import (
    ExamStatus,
    LeaveStatus,
    RoomStatus,
    SessionStatus,
    StudentStatus,
    SubjectKind,
    TeacherStatus,
)


def _pairs(*pairs: tuple[str, str]) -> frozenset[tuple[str, str]]:
    return frozenset((str(a), str(b)) for a, b in pairs)


@dataclass(frozen=True)
class TransitionTable:
    """Transition rules for one subject kind."""

    subject_type: SubjectKind
    states: frozenset[str]
    default_status: str
    terminal_states: frozenset[str] = field(default_factory=frozenset)
    forbidden: frozenset[tuple[str, str]] = field(default_factory=frozenset)
    privileged_exits: frozenset[tuple[str, str]] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.default_status not in self.states:
            raise ValueError(
                f"default status {self.default_status!r} is not a state of {self.subject_type.value}"
            )
        unknown = set(self.terminal_states) - set(self.states)
        for a, b in set(self.forbidden) | set(self.privileged_exits):
            unknown.update(s for s in (a, b) if s not in self.states)
        if unknown:
            raise ValueError(
                f"unknown states in {self.subject_type.value} table: {sorted(unknown)}"
            )

    def has_state(self, status: str) -> bool:
        return status in self.states

    def is_terminal(self, status: str) -> bool:
        return status in self.terminal_states

    def is_forbidden(self, from_status: str, to_status: str) -> bool:
        return (from_status, to_status) in self.forbidden

    def is_privileged_exit(self, from_status: str, to_status: str) -> bool:
        return (from_status, to_status) in self.privileged_exits


def _values(members: Iterable[str]) -> frozenset[str]:
    return frozenset(str(m.value) if hasattr(m, "value") else str(m) for m in members)


_EXAM_TERMINAL = _values([ExamStatus.COMPLETED, ExamStatus.CANCELLED])
_EXAM_FORBIDDEN = _pairs(
    (ExamStatus.IN_PROGRESS.value, ExamStatus.SCHEDULED.value),
)
_EXAM_REOPEN = _pairs(
    (ExamStatus.COMPLETED.value, ExamStatus.IN_PROGRESS.value),
)

TRANSITION_TABLES: Mapping[SubjectKind, TransitionTable] = {
    SubjectKind.STUDENT: TransitionTable(
        subject_type=SubjectKind.STUDENT,
        states=_values(StudentStatus),
        default_status=StudentStatus.ACTIVE.value,
        terminal_states=_values(
            [StudentStatus.EXPELLED, StudentStatus.GRADUATED, StudentStatus.TRANSFERRED]
        ),
        forbidden=_pairs(
            (StudentStatus.SUSPENDED.value, StudentStatus.GRADUATED.value),
            (StudentStatus.ON_PROBATION.value, StudentStatus.GRADUATED.value),
        ),
        privileged_exits=_pairs(
            (StudentStatus.EXPELLED.value, StudentStatus.ACTIVE.value),
            (StudentStatus.EXPELLED.value, StudentStatus.SUSPENDED.value),
            (StudentStatus.EXPELLED.value, StudentStatus.ON_PROBATION.value),
            (StudentStatus.TRANSFERRED.value, StudentStatus.ACTIVE.value),
        ),
    ),
    SubjectKind.TEACHER: TransitionTable(
        subject_type=SubjectKind.TEACHER,
        states=_values(TeacherStatus),
        default_status=TeacherStatus.ACTIVE.value,
    ),
    SubjectKind.EXAMINATION: TransitionTable(
        subject_type=SubjectKind.EXAMINATION,
        states=_values(ExamStatus),
        default_status=ExamStatus.SCHEDULED.value,
        terminal_states=_EXAM_TERMINAL,
        forbidden=_EXAM_FORBIDDEN,
        privileged_exits=_EXAM_REOPEN,
    ),
    SubjectKind.EXAM_SCHEDULE: TransitionTable(
        subject_type=SubjectKind.EXAM_SCHEDULE,
        states=_values(ExamStatus),
        default_status=ExamStatus.SCHEDULED.value,
        terminal_states=_EXAM_TERMINAL,
        forbidden=_EXAM_FORBIDDEN,
        privileged_exits=_EXAM_REOPEN,
    ),
    SubjectKind.LEAVE_REQUEST: TransitionTable(
        subject_type=SubjectKind.LEAVE_REQUEST,
        states=_values(LeaveStatus),
        default_status=LeaveStatus.PENDING.value,
        terminal_states=_values(
            [LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED]
        ),
        privileged_exits=_pairs((LeaveStatus.APPROVED.value, LeaveStatus.CANCELLED.value)),
    ),
    SubjectKind.ACADEMIC_SESSION: TransitionTable(
        subject_type=SubjectKind.ACADEMIC_SESSION,
        states=_values(SessionStatus),
        default_status=SessionStatus.ACTIVE.value,
        terminal_states=_values([SessionStatus.COMPLETED]),
    ),
    SubjectKind.DORMITORY_ROOM: TransitionTable(
        subject_type=SubjectKind.DORMITORY_ROOM,
        states=_values(RoomStatus),
        default_status=RoomStatus.AVAILABLE.value,
        terminal_states=_values([RoomStatus.FULL]),
        privileged_exits=_pairs((RoomStatus.FULL.value, RoomStatus.AVAILABLE.value)),
    ),
}
