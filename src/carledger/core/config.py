from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

PLACEHOLDER_SECRET = "change-this-to-a-secure-random-string"

# Invoice numbering relies on INSERT ... ON CONFLICT ... RETURNING
SUPPORTED_DATABASE_BACKENDS = ("postgresql", "sqlite")


class Settings(BaseSettings):
    """Environment-driven configuration. Field names map to upper-case env vars."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Carledger API"
    app_env: Literal["development", "testing", "production"] = "development"
    debug: bool = False
    enable_openapi: bool = True
    api_prefix: str = "/api/v1"

    database_url: str
    database_pool_size: int = Field(default=5, ge=1)
    database_max_overflow: int = Field(default=10, ge=0)
    database_ssl_mode: Literal["disable", "prefer", "require", "verify-ca", "verify-full"] = (
        "prefer"
    )

    # Session tokens. Asymmetric algorithms would need a key pair, so HMAC only.
    jwt_secret_key: str = Field(min_length=32)
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"
    access_token_expire_minutes: int = Field(default=15, gt=0)
    refresh_token_expire_days: int = Field(default=30, gt=0)
    refresh_token_bytes: int = Field(default=32, ge=32)

    google_client_id: str
    google_verify_timeout_seconds: float = Field(default=5.0, gt=0)
    google_clock_skew_seconds: int = Field(default=300, ge=0)

    invoice_sequence_width: int = Field(default=2, ge=1)

    cors_origins: list[str] = ["http://localhost:3002"]

    # slowapi storage; in-memory when unset
    redis_url: str | None = None
    global_rate_limit: str = "200/minute"
    auth_rate_limit: str = "10/minute"

    metrics_api_key: str | None = None

    temporal_host: str = "localhost:7233"
    temporal_namespace: str = "default"
    temporal_task_queue: str = "carledger-jobs"
    cleanup_retention_days: int = Field(default=30, ge=1)

    @field_validator("database_url")
    @classmethod
    def require_supported_backend(cls, v: str) -> str:
        try:
            backend = make_url(v).get_backend_name()
        except ArgumentError as e:
            raise ValueError("DATABASE_URL is not a database URL") from e
        if backend not in SUPPORTED_DATABASE_BACKENDS:
            raise ValueError(
                f"DATABASE_URL backend {backend!r} is not supported; use PostgreSQL or SQLite"
            )
        return v

    @field_validator("jwt_secret_key")
    @classmethod
    def reject_placeholder_secret(cls, v: str) -> str:
        if v == PLACEHOLDER_SECRET:
            raise ValueError(
                "JWT_SECRET_KEY is still the placeholder; generate one with: openssl rand -hex 32"
            )
        return v

    @field_validator("cors_origins")
    @classmethod
    def reject_wildcard_origin(cls, v: list[str]) -> list[str]:
        # Credentials are allowed on CORS requests, which browsers refuse with "*"
        if "*" in v:
            raise ValueError("CORS_ORIGINS must list explicit origins, not '*'")
        return v

    @property
    def access_token_ttl_seconds(self) -> int:
        return self.access_token_expire_minutes * 60


@lru_cache
def get_settings() -> Settings:
    return Settings()
