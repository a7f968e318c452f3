"""structlog context binding, secret redaction and the access log middleware."""

from uuid import uuid4

import pytest
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from structlog.testing import CapturingLogger

from src.carledger.api.middlewares import request_log_middleware
from src.carledger.core.logging import (
    REDACTED,
    bind_request_context,
    bind_user_context,
    clear_request_context,
    redact_secrets,
    token_fingerprint,
)
from src.carledger.core.security import hash_token

pytestmark = pytest.mark.unit


@pytest.fixture
def cap() -> CapturingLogger:
    """Route structlog through contextvars merging and redaction into a capturing logger."""
    sink = CapturingLogger()
    previous = structlog.get_config()
    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars, redact_secrets],
        context_class=dict,
        logger_factory=lambda *_: sink,
        cache_logger_on_first_use=False,
    )
    clear_request_context()
    yield sink
    clear_request_context()
    structlog.configure(**previous)


def events(sink: CapturingLogger) -> list[dict]:
    return [call.kwargs for call in sink.calls]


class TestContextBinding:
    def test_request_id_and_extra_fields(self, cap):
        bind_request_context("req-42", method="GET", path="/api/v1/auth/me")
        structlog.get_logger().info("hello")

        (entry,) = events(cap)
        assert entry["request_id"] == "req-42"
        assert entry["method"] == "GET"
        assert entry["path"] == "/api/v1/auth/me"

    def test_missing_request_id_binds_nothing(self, cap):
        bind_request_context(None)
        structlog.get_logger().info("hello")

        assert "request_id" not in events(cap)[0]

    def test_user_context_has_role_but_no_email(self, cap):
        user_id = uuid4()
        bind_user_context(user_id, "SALES")
        structlog.get_logger().info("hello")

        (entry,) = events(cap)
        assert (entry["user_id"], entry["role"]) == (str(user_id), "SALES")
        assert not {"email", "user_email"} & entry.keys()

    def test_clear_drops_everything(self, cap):
        bind_request_context("req-1")
        bind_user_context(uuid4(), "USER")
        clear_request_context()
        structlog.get_logger().info("hello")

        assert not {"request_id", "user_id", "role"} & events(cap)[0].keys()

    def test_bound_values_survive_several_calls(self, cap):
        bind_request_context("req-1")
        log = structlog.get_logger()
        log.info("first")
        log.warning("second")

        assert [e["request_id"] for e in events(cap)] == ["req-1", "req-1"]


class TestRedaction:
    @pytest.mark.parametrize("key", ["access_token", "refresh_token", "id_token", "authorization"])
    def test_credentials_are_replaced(self, cap, key):
        structlog.get_logger().info("oops", **{key: "eyJhbGciOiJIUzI1NiJ9.payload.sig"})

        assert events(cap)[0][key] == REDACTED

    def test_fingerprints_pass_through(self, cap):
        fingerprint = token_fingerprint(hash_token("opaque"))
        structlog.get_logger().warning("refresh_token_reuse", token=fingerprint)

        assert events(cap)[0]["token"] == fingerprint

    def test_unrelated_keys_untouched(self, cap):
        structlog.get_logger().info("login", user_id="abc", role="USER")

        assert events(cap)[0] == {"event": "login", "user_id": "abc", "role": "USER"}


def test_token_fingerprint_is_short_prefix_of_hash():
    token_hash = hash_token("raw-refresh-secret")

    fingerprint = token_fingerprint(token_hash)

    assert len(fingerprint) == 8
    assert token_hash.startswith(fingerprint)


class TestRequestLogMiddleware:
    @pytest.fixture
    def app(self) -> FastAPI:
        app = FastAPI()
        app.middleware("http")(request_log_middleware)

        @app.get("/ping")
        async def ping() -> dict:
            structlog.get_logger().info("inside_handler")
            return {"ok": True}

        @app.get("/health")
        async def health() -> dict:
            return {"status": "healthy"}

        return app

    async def test_handler_logs_carry_method_and_path(self, cap, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/ping")

        assert response.status_code == 200
        inside, completed = events(cap)
        assert (inside["method"], inside["path"]) == ("GET", "/ping")
        assert completed["status_code"] == 200
        assert completed["duration_ms"] >= 0
        assert [e["event"] for e in events(cap)] == ["inside_handler", "request_completed"]

    async def test_probe_paths_are_not_logged(self, cap, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            await client.get("/health")

        assert cap.calls == []

    async def test_context_is_cleared_after_request(self, cap, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            await client.get("/ping")
        structlog.get_logger().info("after")

        assert "path" not in events(cap)[-1]
