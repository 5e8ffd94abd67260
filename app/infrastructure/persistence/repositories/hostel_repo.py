"""Dormitory room and allocation repository; also the room occupancy counter."""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.aggregate import AggregateProgress
from app.application.dtos.hostel import AllocationCreate, AllocationResult, RoomResult
from app.domain.enums import AllocationStatus
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.hostel import DormitoryRoom, RoomAllocation
from app.infrastructure.persistence.repositories.base import BaseRepository


def _room_to_result(r: DormitoryRoom) -> RoomResult:
    return RoomResult(
        id=r.id, name=r.name, dormitory=r.dormitory, capacity=r.capacity, status=r.status
    )


def _allocation_to_result(a: RoomAllocation) -> AllocationResult:
    return AllocationResult(
        id=a.id,
        room_id=a.room_id,
        student_id=a.student_id,
        allocated_on=a.allocated_on,
        vacated_on=a.vacated_on,
        status=a.status,
    )


class HostelRepository(BaseRepository[RoomAllocation]):
    """IHostelRepository (and IRoomOccupancyReader for the room policy)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, RoomAllocation)

    async def get_room(self, room_id: str) -> RoomResult | None:
        result = await self.db.execute(select(DormitoryRoom).where(DormitoryRoom.id == room_id))
        orm = result.scalar_one_or_none()
        return _room_to_result(orm) if orm else None

    async def get_allocation(self, allocation_id: str) -> AllocationResult | None:
        orm = await super().get_by_id(allocation_id)
        return _allocation_to_result(orm) if orm else None

    async def get_active_allocation_for_student(
        self, student_id: str
    ) -> AllocationResult | None:
        result = await self.db.execute(
            select(RoomAllocation).where(
                RoomAllocation.student_id == student_id,
                RoomAllocation.status == AllocationStatus.ACTIVE.value,
            )
        )
        orm = result.scalars().first()
        return _allocation_to_result(orm) if orm else None

    async def create_allocation(self, data: AllocationCreate) -> AllocationResult:
        created = await self.create(
            RoomAllocation(
                room_id=data.room_id,
                student_id=data.student_id,
                allocated_on=data.allocated_on,
                allocated_by=data.allocated_by,
                status=AllocationStatus.ACTIVE.value,
            )
        )
        return _allocation_to_result(created)

    async def vacate_allocation(
        self, allocation_id: str, vacated_on: date
    ) -> AllocationResult:
        orm = await super().get_by_id(allocation_id)
        if orm is None:
            raise ResourceNotFoundException("room_allocation", allocation_id)
        orm = await self.apply_changes(
            orm, {"status": AllocationStatus.VACATED.value, "vacated_on": vacated_on}
        )
        return _allocation_to_result(orm)

    async def room_occupancy(self, room_id: str) -> AggregateProgress:
        """Active allocations vs. room capacity."""
        capacity = (
            await self.db.execute(
                select(DormitoryRoom.capacity).where(DormitoryRoom.id == room_id)
            )
        ).scalar_one_or_none()
        if capacity is None:
            raise ResourceNotFoundException("dormitory_room", room_id)
        occupied = (
            await self.db.execute(
                select(func.count(RoomAllocation.id)).where(
                    RoomAllocation.room_id == room_id,
                    RoomAllocation.status == AllocationStatus.ACTIVE.value,
                )
            )
        ).scalar_one()
        return AggregateProgress(done=occupied, expected=capacity)
