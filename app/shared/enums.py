"""Shared enumerations for the school status ledger.

Cross-cutting enums used by the API and infrastructure layers (e.g. who
performed an action). Domain enums (statuses, reason categories) live
in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Who performed an action: a staff member or the system itself."""

    STAFF = "staff"
    SYSTEM = "system"
