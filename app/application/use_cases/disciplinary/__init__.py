"""Disciplinary use cases."""

from app.application.use_cases.disciplinary.incident_operations import (
    DisciplinaryService,
)

__all__ = ["DisciplinaryService"]
