"""DTOs for aggregate completion recomputation."""

from dataclasses import dataclass

from app.domain.enums import SubjectKind


@dataclass(frozen=True)
class AggregateProgress:
    """Count of dependents in a terminal condition vs. the expected total."""

    done: int
    expected: int


@dataclass(frozen=True)
class AggregateResult:
    """Result of recomputing a parent's derived status."""

    parent_type: SubjectKind
    parent_id: str
    status: str
    derived_status: str
    done: int
    expected: int
    changed: bool
    transition_id: int | None = None
