"""Service error taxonomy and the exception handlers that render it.

Every error leaves the API as the same envelope:

    {"success": false, "error": <message>, "code": <error_code>, "request_id": <id>}

Only unexpected exceptions are logged with a traceback; their message never
reaches the client.
"""

from typing import Any

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.carledger.core.logging import get_logger

logger = get_logger(__name__)


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP status and a stable code."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "invalid_request"
    default_message: str = "Invalid request"

    def __init__(self, message: str | None = None, *, detail: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.detail = detail or {}
        super().__init__(self.message)


class InvalidRequestError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "invalid_request"
    default_message = "Invalid request"


class UnauthorizedError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "unauthorized"
    default_message = "Unauthorized"


class TokenInvalidError(UnauthorizedError):
    """Access token is malformed, tampered with, or signed with another key/algorithm."""

    error_code = "token_invalid"
    default_message = "Invalid access token"


class TokenExpiredError(TokenInvalidError):
    error_code = "token_expired"
    default_message = "Access token expired"


class InvalidAssertionError(UnauthorizedError):
    """The identity provider rejected the assertion."""

    error_code = "invalid_assertion"
    default_message = "Invalid identity token"


class RefreshInvalidError(UnauthorizedError):
    """Unknown, revoked, expired, or already-rotated refresh token."""

    error_code = "refresh_invalid"
    default_message = "Invalid refresh token"


class ForbiddenError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"
    default_message = "Forbidden"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"
    default_message = "Not found"


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "conflict"
    default_message = "Conflict"


class DuplicateNumberError(ConflictError):
    error_code = "duplicate_number"
    default_message = "Document number already exists"


class UpstreamUnavailableError(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "upstream_unavailable"
    default_message = "Upstream service unavailable"


_STATUS_TO_CODE = {
    400: "invalid_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    429: "rate_limited",
    503: "upstream_unavailable",
}


def error_response(
    status_code: int,
    message: str,
    code: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the uniform error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": message,
            "code": code or _STATUS_TO_CODE.get(status_code, "internal"),
            "request_id": correlation_id.get(),
        },
        headers=headers,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that render the error envelope."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            "Request rejected",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            error_code=exc.error_code,
        )
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return error_response(exc.status_code, exc.message, exc.error_code, headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Malformed bodies are a 400 for this API, not FastAPI's default 422
        fields = [".".join(str(part) for part in err["loc"]) for err in exc.errors()]
        message = "Invalid body" if not fields else f"Invalid body: {', '.join(fields)}"
        return error_response(status.HTTP_400_BAD_REQUEST, message, "invalid_request")

    # Sync on purpose: SlowAPIMiddleware calls this handler without awaiting it
    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        logger.warning("Rate limit exceeded", path=request.url.path, limit=str(exc.detail))
        return error_response(
            status.HTTP_429_TOO_MANY_REQUESTS, "Too many requests", "rate_limited"
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail), headers=exc.headers)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=correlation_id.get(),
            path=request.url.path,
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "internal"
        )
