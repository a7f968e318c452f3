"""`/health` probe and the Prometheus `/metrics` endpoint."""

import secrets
import time
from dataclasses import dataclass
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text

from src.carledger.core.config import get_settings
from src.carledger.core.db import get_session
from src.carledger.core.logging import get_logger
from src.carledger.core.rate_limit import limiter

logger = get_logger(__name__)

HEALTH_CACHE_TTL = 10  # seconds

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"


@dataclass
class _ProbeResult:
    database: str
    checked_at: float

    @property
    def healthy(self) -> bool:
        return self.database == HEALTHY

    def body(self, now: float, cached: bool) -> dict[str, Any]:
        body: dict[str, Any] = {
            "status": HEALTHY if self.healthy else UNHEALTHY,
            "database": self.database,
            "cached": cached,
            "timestamp": self.checked_at,
        }
        if cached:
            body["cache_age_seconds"] = round(now - self.checked_at, 1)
        return body


# Load balancers poll often; one database round trip per TTL is enough
_last_probe: _ProbeResult | None = None


def reset_health_cache() -> None:
    global _last_probe
    _last_probe = None


async def check_database() -> str:
    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database health check failed", error=str(e))
        return UNHEALTHY
    return HEALTHY


async def _probe(now: float) -> tuple[_ProbeResult, bool]:
    """Latest probe result and whether it came from the cache."""
    global _last_probe
    if _last_probe is not None and now - _last_probe.checked_at < HEALTH_CACHE_TTL:
        return _last_probe, True
    _last_probe = _ProbeResult(database=await check_database(), checked_at=now)
    return _last_probe, False


def setup_health_endpoint(app: FastAPI) -> None:
    @app.get("/health", tags=["health"])
    @limiter.exempt
    async def health() -> JSONResponse:
        """Database reachability, re-checked at most every HEALTH_CACHE_TTL seconds."""
        now = time.time()
        result, cached = await _probe(now)
        code = status.HTTP_200_OK if result.healthy else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=result.body(now, cached), status_code=code)


def _metrics_key_guard(expected: str) -> Any:
    header = APIKeyHeader(name="X-Metrics-Key", auto_error=False)

    async def require_metrics_key(api_key: str | None = Depends(header)) -> None:
        if api_key is None or not secrets.compare_digest(api_key, expected):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or missing metrics API key",
            )

    return Depends(require_metrics_key)


def setup_metrics(app: FastAPI) -> None:
    """Instrument every route and expose `/metrics`, behind X-Metrics-Key when one is configured."""
    key = get_settings().metrics_api_key
    dependencies = [_metrics_key_guard(key)] if key else []
    Instrumentator(excluded_handlers=["/health", "/metrics"]).instrument(app).expose(
        app, endpoint="/metrics", dependencies=dependencies
    )
