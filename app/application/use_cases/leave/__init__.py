"""Leave use cases."""

from app.application.use_cases.leave.leave_operations import (
    LeaveService,
    count_working_days,
)

__all__ = ["LeaveService", "count_working_days"]
