"""Infrastructure wiring for application services."""

from app.infrastructure.services.propagation import build_propagation_engine

__all__ = ["build_propagation_engine"]
