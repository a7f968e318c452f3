"""HTTP middleware stack."""

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from src.carledger.core.config import Settings
from src.carledger.core.rate_limit import limiter
from src.carledger.core.security.headers import API_ONLY_CSP, DEFAULT_CSP, SecurityHeadersMiddleware

from .logging_context import request_log_middleware

__all__ = ["request_log_middleware", "setup_middlewares"]


def setup_middlewares(app: FastAPI, settings: Settings) -> None:
    """Install middlewares innermost first.

    Starlette wraps each new middleware around the previous ones, so the
    correlation id middleware, added last, sees the request before anything
    else and the request id is already set when the access log binds it.
    """
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    app.middleware("http")(request_log_middleware)

    csp = DEFAULT_CSP if settings.enable_openapi else API_ONLY_CSP
    app.add_middleware(SecurityHeadersMiddleware, content_security_policy=csp)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    app.add_middleware(CorrelationIdMiddleware)
