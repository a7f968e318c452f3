"""Process-wide async engine."""

import ssl
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from src.carledger.core.config import Settings, get_settings

_engine: AsyncEngine | None = None

# sslmode -> (check_hostname, verify_mode); "disable" sends no context at all
_SSL_MODES: dict[str, tuple[bool, ssl.VerifyMode]] = {
    "prefer": (False, ssl.CERT_NONE),
    "require": (False, ssl.CERT_NONE),
    "verify-ca": (False, ssl.CERT_REQUIRED),
    "verify-full": (True, ssl.CERT_REQUIRED),
}

SQLITE_BUSY_TIMEOUT = 5.0


def _ssl_context(ssl_mode: str) -> ssl.SSLContext | None:
    if ssl_mode not in _SSL_MODES:
        return None
    check_hostname, verify_mode = _SSL_MODES[ssl_mode]
    context = ssl.create_default_context()
    context.check_hostname = check_hostname
    context.verify_mode = verify_mode
    return context


def engine_options(settings: Settings) -> dict[str, Any]:
    """Keyword arguments for `create_async_engine` for the configured backend.

    SQLite gets neither pool sizing nor SSL. Its busy timeout is set so that
    concurrent writers wait on the database lock instead of failing.
    """
    if make_url(settings.database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"timeout": SQLITE_BUSY_TIMEOUT}}

    connect_args: dict[str, Any] = {}
    context = _ssl_context(settings.database_ssl_mode)
    if context is not None:
        connect_args["ssl"] = context
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
        "connect_args": connect_args,
    }


def get_engine() -> AsyncEngine:
    """Create the engine on first use and return the same one afterwards."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(settings.database_url, **engine_options(settings))
    return _engine


async def dispose_engine() -> None:
    """Close pooled connections; the next `get_engine` builds a fresh engine."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
