"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from procurement.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)

WRITE_ENDPOINT_LIMIT = "120/minute"


def _vote_limit() -> str:
    # Read lazily so tests can change VOTE_RATE_LIMIT before the first request.
    return get_settings().vote_rate_limit


limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
limit_votes = limiter.limit(_vote_limit)
