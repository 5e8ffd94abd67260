"""Shared utilities: context, enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.context import (
    ActorContext,
    clear_current_actor,
    get_actor_context,
    get_current_actor_id,
    get_current_actor_type,
    get_current_request_id,
    set_current_actor,
    set_current_request_id,
)
from app.shared.enums import ActorType
from app.shared.utils import ensure_utc, generate_cuid, utc_now, utc_today

__all__ = [
    "set_current_actor",
    "set_current_request_id",
    "clear_current_actor",
    "get_current_actor_id",
    "get_current_actor_type",
    "get_current_request_id",
    "get_actor_context",
    "ActorContext",
    "ActorType",
    "generate_cuid",
    "utc_now",
    "utc_today",
    "ensure_utc",
]
