"""Refresh token storage."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.carledger.models.base import utc_now


class RefreshToken(SQLModel, table=True):
    """Server-side record of an opaque refresh token.

    Only the SHA-256 hash of the bearer secret is stored. A rotated token is
    revoked and points at the hash of the token that replaced it.
    """

    __tablename__ = "refresh_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    token_hash: str = Field(max_length=64, unique=True, index=True)
    expires_at: datetime = Field(index=True)
    revoked_at: datetime | None = Field(default=None)
    replaced_by_hash: str | None = Field(default=None, max_length=64)
    created_at: datetime = Field(default_factory=utc_now)
