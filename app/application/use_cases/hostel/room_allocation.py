"""Dormitory bed allocation; room status (available/full) is derived from occupancy."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from app.application.dtos.hostel import AllocationCreate, AllocationOutcome
from app.domain.enums import (
    AllocationStatus,
    RejectionReason,
    RoomStatus,
    StudentStatus,
    SubjectKind,
)
from app.domain.exceptions import (
    ResourceNotFoundException,
    StatusConflictException,
    ValidationException,
)
from app.domain.value_objects.core import TriggerRef
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        IHostelRepository,
        IStudentRepository,
    )
    from app.application.services.propagation_engine import PropagationEngine

ALLOCATION_ACTION_TYPE = "room_allocation"


class RoomAllocationService:
    """Allocate and vacate beds; the engine keeps the room status in step."""

    def __init__(
        self,
        hostel_repo: IHostelRepository,
        student_repo: IStudentRepository,
        engine: PropagationEngine,
    ) -> None:
        self.hostel_repo = hostel_repo
        self.student_repo = student_repo
        self.engine = engine

    async def allocate(
        self,
        room_id: str,
        student_id: str,
        allocated_on: date | None = None,
        actor_id: str | None = None,
    ) -> AllocationOutcome:
        student = await self.student_repo.get_by_id(student_id)
        if student is None:
            raise ResourceNotFoundException("student", student_id)
        if student.status != StudentStatus.ACTIVE.value:
            raise ValidationException(
                f"Only active students can be allocated a bed (student is {student.status})",
                field="student_id",
            )
        if await self.hostel_repo.get_active_allocation_for_student(student_id):
            raise ValidationException(
                "Student already has an active room allocation", field="student_id"
            )
        room = await self.hostel_repo.get_room(room_id)
        if room is None:
            raise ResourceNotFoundException("dormitory_room", room_id)

        snapshot = await self.engine.current_status(
            SubjectKind.DORMITORY_ROOM, room_id, lock=True
        )
        occupancy = await self.hostel_repo.room_occupancy(room_id)
        if snapshot.status == RoomStatus.FULL.value or occupancy.done >= occupancy.expected:
            raise StatusConflictException(
                f"Room {room.name} is full",
                subject_type=SubjectKind.DORMITORY_ROOM.value,
                subject_id=room_id,
                reason=RejectionReason.TERMINAL_STATE.value,
                current_status=snapshot.status,
                occupied=occupancy.done,
                capacity=occupancy.expected,
            )

        allocation = await self.hostel_repo.create_allocation(
            AllocationCreate(
                room_id=room_id,
                student_id=student_id,
                allocated_on=allocated_on or utc_now().date(),
                allocated_by=actor_id,
            )
        )
        room_result = await self.engine.recompute_aggregate(
            SubjectKind.DORMITORY_ROOM,
            room_id,
            trigger=TriggerRef(ALLOCATION_ACTION_TYPE, allocation.id),
            actor_id=actor_id,
        )
        return AllocationOutcome(allocation=allocation, room=room_result)

    async def vacate(
        self,
        allocation_id: str,
        vacated_on: date | None = None,
        actor_id: str | None = None,
    ) -> AllocationOutcome:
        """Free the bed; a full room is reopened to available."""
        allocation = await self.hostel_repo.get_allocation(allocation_id)
        if allocation is None:
            raise ResourceNotFoundException("room_allocation", allocation_id)
        if allocation.status != AllocationStatus.ACTIVE.value:
            raise ValidationException("Allocation is already vacated", field="allocation_id")

        await self.engine.current_status(
            SubjectKind.DORMITORY_ROOM, allocation.room_id, lock=True
        )
        vacated = await self.hostel_repo.vacate_allocation(
            allocation_id, vacated_on or utc_now().date()
        )
        reopen = await self.engine.reopen_aggregate(
            SubjectKind.DORMITORY_ROOM,
            allocation.room_id,
            actor_id=actor_id,
            note="bed vacated",
            trigger=TriggerRef(ALLOCATION_ACTION_TYPE, allocation_id),
        )
        return AllocationOutcome(allocation=vacated, reopen=reopen)
