"""HTTP middleware: timeout, request ID, actor context.

Applied in main app; order matters (first added = outermost).
Import and use from app.main.
"""

from app.middleware.actor import ActorContextMiddleware
from app.middleware.request_id import RequestIDMiddleware
from app.middleware.timeout import TimeoutMiddleware

__all__ = [
    "ActorContextMiddleware",
    "RequestIDMiddleware",
    "TimeoutMiddleware",
]
