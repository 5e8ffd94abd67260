"""Request timeout middleware.

A request that runs past the limit is cancelled. Cancellation unwinds the
request's session dependency, so the transaction (and every status change
made in it) rolls back. Raw ASGI, like the other middleware.
"""

import asyncio
import json
import logging
from typing import Callable

logger = logging.getLogger(__name__)


def _timeout_body(timeout_seconds: int) -> bytes:
    return json.dumps(
        {
            "error": "GATEWAY_TIMEOUT",
            "message": f"Request timed out after {timeout_seconds} seconds",
            "details": {"timeout_seconds": timeout_seconds, "retryable": True},
        }
    ).encode()


def TimeoutMiddleware(app: Callable, timeout_seconds: int) -> Callable:
    """Cancel the request after timeout_seconds and answer 504 if nothing was sent yet."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        started = False

        async def send_tracking(message: dict) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await asyncio.wait_for(app(scope, receive, send_tracking), timeout=timeout_seconds)
        except TimeoutError:
            logger.warning(
                "%s %s cancelled after %ss (transaction rolled back)",
                scope.get("method", ""),
                scope.get("path", ""),
                timeout_seconds,
            )
            if started:
                return
            await send(
                {
                    "type": "http.response.start",
                    "status": 504,
                    "headers": [
                        (b"content-type", b"application/json"),
                        (b"retry-after", b"1"),
                    ],
                }
            )
            await send({"type": "http.response.body", "body": _timeout_body(timeout_seconds)})

    return asgi_app
