"""Acting staff member for the request (set by ActorContextMiddleware)."""

from fastapi import Request

from app.shared.context import get_current_actor_id


def get_actor_id(request: Request) -> str | None:
    """Return the actor id from context (None means system)."""
    return get_current_actor_id() or getattr(request.state, "actor_id", None)
