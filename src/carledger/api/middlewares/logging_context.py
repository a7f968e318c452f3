"""Per-request structlog context and access log line."""

import time

from asgi_correlation_id import correlation_id
from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

from src.carledger.core.logging import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

# Probe endpoints are hit every few seconds; keep them out of the access log
QUIET_PATHS = frozenset({"/health", "/metrics"})


async def request_log_middleware(request: Request, call_next: RequestResponseEndpoint) -> Response:
    """Bind request id, method and path for the duration of the request.

    Emits one `request_completed` event per request, or `request_failed`
    when the handler raised.
    """
    clear_request_context()
    bind_request_context(correlation_id.get(), method=request.method, path=request.url.path)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_failed", duration_ms=_elapsed_ms(started))
        raise
    else:
        if request.url.path not in QUIET_PATHS:
            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started),
            )
        return response
    finally:
        clear_request_context()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
