"""Leave request and balance repository. Returns application DTOs."""

from __future__ import annotations

from collections.abc import Collection
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.leave import (
    LeaveBalanceResult,
    LeaveRequestCreate,
    LeaveRequestResult,
)
from app.domain.enums import LeaveStatus
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.staff import LeaveBalance, LeaveRequest, Teacher
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc, utc_now


def _request_to_result(r: LeaveRequest) -> LeaveRequestResult:
    """Map ORM LeaveRequest to application LeaveRequestResult."""
    return LeaveRequestResult(
        id=r.id,
        teacher_id=r.teacher_id,
        leave_type_id=r.leave_type_id,
        start_date=r.start_date,
        end_date=r.end_date,
        working_days=r.working_days,
        academic_year=r.academic_year,
        reason=r.reason,
        status=r.status,
        rejection_reason=r.rejection_reason,
        decided_by=r.decided_by,
        decided_at=ensure_utc(r.decided_at),
    )


def _balance_to_result(b: LeaveBalance) -> LeaveBalanceResult:
    return LeaveBalanceResult(
        id=b.id,
        teacher_id=b.teacher_id,
        leave_type_id=b.leave_type_id,
        academic_year=b.academic_year,
        total_days=b.total_days,
        used_days=b.used_days,
    )


class LeaveRepository(BaseRepository[LeaveRequest]):
    """ILeaveRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, LeaveRequest)

    async def create_request(self, data: LeaveRequestCreate) -> LeaveRequestResult:
        created = await self.create(
            LeaveRequest(
                teacher_id=data.teacher_id,
                leave_type_id=data.leave_type_id,
                start_date=data.start_date,
                end_date=data.end_date,
                working_days=data.working_days,
                academic_year=data.academic_year,
                reason=data.reason,
            )
        )
        return _request_to_result(created)

    async def get_request(self, request_id: str) -> LeaveRequestResult | None:
        orm = await super().get_by_id(request_id)
        return _request_to_result(orm) if orm else None

    async def record_decision(
        self,
        request_id: str,
        decided_by: str | None,
        rejection_reason: str | None,
    ) -> LeaveRequestResult:
        orm = await super().get_by_id(request_id)
        if orm is None:
            raise ResourceNotFoundException("leave_request", request_id)
        orm = await self.apply_changes(
            orm,
            {
                "decided_by": decided_by,
                "decided_at": utc_now(),
                "rejection_reason": rejection_reason,
            },
        )
        return _request_to_result(orm)

    async def get_balance(
        self, teacher_id: str, leave_type_id: str, academic_year: str
    ) -> LeaveBalanceResult | None:
        result = await self.db.execute(
            select(LeaveBalance).where(
                LeaveBalance.teacher_id == teacher_id,
                LeaveBalance.leave_type_id == leave_type_id,
                LeaveBalance.academic_year == academic_year,
            )
        )
        orm = result.scalar_one_or_none()
        return _balance_to_result(orm) if orm else None

    async def list_balances(
        self, teacher_id: str, academic_year: str
    ) -> list[LeaveBalanceResult]:
        result = await self.db.execute(
            select(LeaveBalance)
            .where(
                LeaveBalance.teacher_id == teacher_id,
                LeaveBalance.academic_year == academic_year,
            )
            .order_by(LeaveBalance.leave_type_id)
        )
        return [_balance_to_result(b) for b in result.scalars().all()]

    async def add_used_days(self, balance_id: str, days: int) -> LeaveBalanceResult:
        result = await self.db.execute(
            select(LeaveBalance).where(LeaveBalance.id == balance_id).with_for_update()
        )
        orm = result.scalar_one_or_none()
        if orm is None:
            raise ResourceNotFoundException("leave_balance", balance_id)
        orm.used_days = orm.used_days + days
        await self.db.flush()
        return _balance_to_result(orm)

    async def list_approved_ending_on(self, day: date) -> list[LeaveRequestResult]:
        result = await self.db.execute(
            select(LeaveRequest)
            .where(
                LeaveRequest.status == LeaveStatus.APPROVED.value,
                LeaveRequest.end_date == day,
            )
            .order_by(LeaveRequest.teacher_id)
        )
        return [_request_to_result(r) for r in result.scalars().all()]

    async def list_approved_covering(self, day: date) -> list[LeaveRequestResult]:
        result = await self.db.execute(
            select(LeaveRequest)
            .where(
                LeaveRequest.status == LeaveStatus.APPROVED.value,
                LeaveRequest.start_date <= day,
                LeaveRequest.end_date >= day,
            )
            .order_by(LeaveRequest.start_date, LeaveRequest.id)
        )
        return [_request_to_result(r) for r in result.scalars().all()]

    async def find_overlapping(
        self,
        teacher_id: str,
        start_date: date,
        end_date: date,
        statuses: Collection[str],
        exclude_id: str | None = None,
    ) -> list[LeaveRequestResult]:
        stmt = select(LeaveRequest).where(
            LeaveRequest.teacher_id == teacher_id,
            LeaveRequest.status.in_(list(statuses)),
            LeaveRequest.start_date <= end_date,
            LeaveRequest.end_date >= start_date,
        )
        if exclude_id is not None:
            stmt = stmt.where(LeaveRequest.id != exclude_id)
        result = await self.db.execute(stmt.order_by(LeaveRequest.start_date))
        return [_request_to_result(r) for r in result.scalars().all()]

    async def teacher_exists(self, teacher_id: str) -> bool:
        result = await self.db.execute(select(Teacher.id).where(Teacher.id == teacher_id))
        return result.scalar_one_or_none() is not None
