"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (status store, ledger, repositories).
"""

from app.application.services.aggregate_registry import AggregateRegistry
from app.application.services.propagation_engine import PropagationEngine
from app.application.services.transition_rule_evaluator import TransitionRuleEvaluator

__all__ = [
    "AggregateRegistry",
    "PropagationEngine",
    "TransitionRuleEvaluator",
]
