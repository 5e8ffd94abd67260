"""Actor context middleware.

Reads the acting staff member's id from X-Actor-ID (set by the upstream
gateway that authenticated the user) and stores it in the request context.
Requests without the header run as the system actor. Raw ASGI.
"""

import logging
from typing import Callable

from app.middleware.headers import get_header, safe_header_value
from app.shared.context import clear_current_actor, set_current_actor

logger = logging.getLogger(__name__)


def ActorContextMiddleware(app: Callable, header_name: str = "X-Actor-ID") -> Callable:
    """Set the current actor from header_name for the duration of the request."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        raw = get_header(scope, header_name)
        actor_id = safe_header_value(raw)
        if raw is not None and actor_id is None:
            logger.warning("Ignoring malformed %s header on %s", header_name, scope.get("path", ""))
        set_current_actor(actor_id)
        scope.setdefault("state", {})["actor_id"] = actor_id
        try:
            await app(scope, receive, send)
        finally:
            clear_current_actor()

    return asgi_app
