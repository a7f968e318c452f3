"""Per-client-IP request limits (slowapi).

Every route gets `GLOBAL_RATE_LIMIT` through SlowAPIMiddleware; the routes
that exchange credentials add `AUTH_RATE_LIMIT` with a decorator. Counters
live in Redis when REDIS_URL is set and in process memory otherwise.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.carledger.core.config import get_settings
from src.carledger.core.logging import get_logger

logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    # Socket peer only; X-Forwarded-For is client-controlled
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    settings = get_settings()
    if settings.app_env == "testing":
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    backend = "redis" if settings.redis_url else "memory"
    logger.info("Rate limiter ready", backend=backend, default_limit=settings.global_rate_limit)
    return Limiter(
        key_func=get_rate_limit_key,
        default_limits=[settings.global_rate_limit],
        # slowapi's storage client is synchronous and wants a plain redis:// URI
        storage_uri=settings.redis_url or "memory://",
    )


# Limits are read once at import; changing them needs a restart
limiter = create_limiter()
