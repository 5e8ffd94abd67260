"""Hostel use cases."""

from app.application.use_cases.hostel.room_allocation import RoomAllocationService

__all__ = ["RoomAllocationService"]
