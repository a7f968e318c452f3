"""structlog setup and the context helpers used across the API and worker."""

import logging
import sys
from uuid import UUID

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars
from structlog.typing import EventDict, Processor, WrappedLogger

# Event keys whose values are bearer credentials
SECRET_KEYS = frozenset(
    {"access_token", "refresh_token", "id_token", "token", "authorization", "password"}
)
REDACTED = "[redacted]"
FINGERPRINT_LENGTH = 8

NOISY_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "temporalio": logging.INFO,
    "google.auth": logging.WARNING,
    "urllib3": logging.WARNING,
}


def redact_secrets(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Replace credential values that slipped into an event.

    Values already shortened with `token_fingerprint` pass through.
    """
    for key in SECRET_KEYS.intersection(event_dict):
        value = event_dict[key]
        if isinstance(value, str) and len(value) <= FINGERPRINT_LENGTH:
            continue
        event_dict[key] = REDACTED
    return event_dict


def setup_logging(debug: bool = False) -> None:
    """Configure structlog: colored console output when `debug`, JSON lines otherwise."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        redact_secrets,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name, level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(request_id: str | None, **fields: str) -> None:
    """Attach the correlation id (and any extra request fields) to later log calls."""
    if request_id:
        fields["request_id"] = request_id
    if fields:
        bind_contextvars(**fields)


def bind_user_context(user_id: UUID, role: str) -> None:
    """Attach the authenticated principal. The email address is never bound."""
    bind_contextvars(user_id=str(user_id), role=role)


def clear_request_context() -> None:
    clear_contextvars()


def token_fingerprint(token_hash: str) -> str:
    """Short, log-safe prefix of a token hash."""
    return token_hash[:FINGERPRINT_LENGTH]
