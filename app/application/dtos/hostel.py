"""DTOs for dormitory rooms and bed allocations."""

from dataclasses import dataclass
from datetime import date

from app.application.dtos.aggregate import AggregateResult
from app.application.dtos.transition import TransitionResult


@dataclass(frozen=True)
class RoomResult:
    """Dormitory room read-model."""

    id: str
    name: str
    dormitory: str
    capacity: int
    status: str


@dataclass(frozen=True)
class AllocationCreate:
    """Input for allocating a bed."""

    room_id: str
    student_id: str
    allocated_on: date
    allocated_by: str | None = None


@dataclass(frozen=True)
class AllocationResult:
    """Room allocation read-model."""

    id: str
    room_id: str
    student_id: str
    allocated_on: date
    vacated_on: date | None
    status: str


@dataclass(frozen=True)
class AllocationOutcome:
    """Allocation after a write, with the room's derived status."""

    allocation: AllocationResult
    room: AggregateResult | None = None
    reopen: TransitionResult | None = None
