"""Application services: transition rules, aggregate policies, propagation engine."""

from app.application.services.aggregate_registry import (
    AggregateRegistry,
    CompletionPolicy,
    build_default_registry,
)
from app.application.services.propagation_engine import PropagationEngine
from app.application.services.transition_rule_evaluator import (
    TransitionDecision,
    TransitionRuleEvaluator,
)

__all__ = [
    "AggregateRegistry",
    "CompletionPolicy",
    "PropagationEngine",
    "TransitionDecision",
    "TransitionRuleEvaluator",
    "build_default_registry",
]
