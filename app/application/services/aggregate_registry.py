"""Completion policies for parents whose status is derived from dependents.

A parent is pending while no dependent is done, in progress while some
are, and complete once done >= expected (expected > 0). Derived statuses
only move forward; regressions and reopening are explicit operations.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.domain.enums import ExamStatus, RoomStatus, SubjectKind
from app.domain.exceptions import ValidationException
from app.domain.value_objects.core import SubjectRef

if TYPE_CHECKING:
    from app.application.dtos.aggregate import AggregateProgress
    from app.application.interfaces.repositories import (
        IExamProgressReader,
        IRoomOccupancyReader,
    )


@dataclass(frozen=True)
class CompletionPolicy:
    """How one parent kind derives its status from its dependents."""

    parent_type: SubjectKind
    pending_status: str
    progress_status: str
    complete_status: str
    count: Callable[[str], Awaitable[AggregateProgress]]
    child_type: SubjectKind | None = None
    parent_of: Callable[[str], Awaitable[str | None]] | None = None

    def derive(self, progress: AggregateProgress) -> str:
        if progress.expected > 0 and progress.done >= progress.expected:
            return self.complete_status
        if progress.done > 0:
            return self.progress_status
        return self.pending_status

    def advances(self, current_status: str, derived_status: str) -> bool:
        """Return True if derived_status is further along than current_status."""
        ranks = {self.pending_status: 0}
        ranks[self.progress_status] = 1
        ranks[self.complete_status] = 2
        if current_status not in ranks:
            return False
        return ranks[derived_status] > ranks[current_status]


class AggregateRegistry:
    """Registered completion policies, keyed by parent kind."""

    def __init__(self, policies: list[CompletionPolicy] | None = None) -> None:
        self._policies: dict[SubjectKind, CompletionPolicy] = {}
        for policy in policies or []:
            self.register(policy)

    def register(self, policy: CompletionPolicy) -> None:
        self._policies[policy.parent_type] = policy

    def policy_for(self, parent_type: SubjectKind | str) -> CompletionPolicy:
        """Return the policy; ValidationException if the kind has no derived status."""
        try:
            kind = SubjectKind(parent_type)
        except ValueError as e:
            raise ValidationException(
                f"Unknown subject type: {parent_type!r}", field="parent_type"
            ) from e
        policy = self._policies.get(kind)
        if policy is None:
            raise ValidationException(
                f"{kind.value} has no aggregate completion policy",
                field="parent_type",
            )
        return policy

    async def parents_of(self, child: SubjectRef) -> list[SubjectRef]:
        """Return parents whose derived status depends on the child's status."""
        parents: list[SubjectRef] = []
        for policy in self._policies.values():
            if policy.child_type != child.subject_type or policy.parent_of is None:
                continue
            parent_id = await policy.parent_of(child.subject_id)
            if parent_id:
                parents.append(SubjectRef(policy.parent_type, parent_id))
        return parents


def build_default_registry(
    exams: IExamProgressReader,
    rooms: IRoomOccupancyReader,
) -> AggregateRegistry:
    """Registry with the exam schedule, examination and dormitory room policies."""
    return AggregateRegistry(
        [
            CompletionPolicy(
                parent_type=SubjectKind.EXAM_SCHEDULE,
                pending_status=ExamStatus.SCHEDULED.value,
                progress_status=ExamStatus.IN_PROGRESS.value,
                complete_status=ExamStatus.COMPLETED.value,
                count=exams.schedule_progress,
            ),
            CompletionPolicy(
                parent_type=SubjectKind.EXAMINATION,
                pending_status=ExamStatus.SCHEDULED.value,
                progress_status=ExamStatus.IN_PROGRESS.value,
                complete_status=ExamStatus.COMPLETED.value,
                count=exams.examination_progress,
                child_type=SubjectKind.EXAM_SCHEDULE,
                parent_of=exams.examination_for_schedule,
            ),
            CompletionPolicy(
                parent_type=SubjectKind.DORMITORY_ROOM,
                pending_status=RoomStatus.AVAILABLE.value,
                progress_status=RoomStatus.AVAILABLE.value,
                complete_status=RoomStatus.FULL.value,
                count=rooms.room_occupancy,
            ),
        ]
    )
