"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and endpoint modules use the same
instance without circular imports. Write endpoints take a `request: Request`
parameter so SlowAPI can key on the client address.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

WRITE_ENDPOINT_LIMIT = "120/minute"
# Sweeps and recomputes lock many rows; keep them rare.
BATCH_ENDPOINT_LIMIT = "10/minute"

limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
limit_batch = limiter.limit(BATCH_ENDPOINT_LIMIT)
