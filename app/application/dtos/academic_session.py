"""DTOs for academic sessions."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class AcademicSessionCreate:
    """Input for creating an academic session."""

    year: int
    term: str
    start_date: date | None = None
    end_date: date | None = None


@dataclass(frozen=True)
class AcademicSessionResult:
    """Academic session read-model."""

    id: str
    year: int
    term: str
    start_date: date | None
    end_date: date | None
    is_current: bool
    status: str

    @property
    def academic_year(self) -> str:
        """Academic year label used by leave balances (e.g. '2025-2026')."""
        return f"{self.year}-{self.year + 1}"
