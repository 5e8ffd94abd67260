"""Wire the propagation engine to the SQLAlchemy status store, ledger and counters."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.aggregate_registry import build_default_registry
from app.application.services.propagation_engine import PropagationEngine
from app.application.services.transition_rule_evaluator import TransitionRuleEvaluator
from app.core.config import Settings, get_settings
from app.infrastructure.persistence.repositories.exam_repo import ExamRepository
from app.infrastructure.persistence.repositories.hostel_repo import HostelRepository
from app.infrastructure.persistence.repositories.status_transition_repo import (
    StatusTransitionRepository,
)
from app.infrastructure.persistence.repositories.subject_status_repo import (
    SubjectStatusRepository,
)
from app.infrastructure.persistence.repositories.unit_of_work import SqlAlchemyUnitOfWork


def build_propagation_engine(
    db: AsyncSession, settings: Settings | None = None
) -> PropagationEngine:
    """Return an engine whose writes all go through db (the caller owns the transaction)."""
    settings = settings or get_settings()
    return PropagationEngine(
        store=SubjectStatusRepository(db, lock_timeout_ms=settings.status_lock_timeout_ms),
        ledger=StatusTransitionRepository(db),
        unit_of_work=SqlAlchemyUnitOfWork(db),
        evaluator=TransitionRuleEvaluator(),
        aggregates=build_default_registry(ExamRepository(db), HostelRepository(db)),
        default_restore_status=settings.default_restore_status,
        sweep_batch_limit=settings.sweep_batch_limit,
    )
