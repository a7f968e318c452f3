"""Refresh token persistence.

A token is live while it is neither revoked nor past `expires_at`. Every
state change below is a single conditional UPDATE, so concurrent callers
race on the database row rather than on Python objects.
"""

from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import and_, delete, or_, update
from sqlmodel import select

from src.carledger.models import RefreshToken
from src.carledger.models.base import utc_now
from src.carledger.repositories.base import BaseRepository


def _live(now: datetime) -> list[Any]:
    return [
        RefreshToken.revoked_at.is_(None),  # type: ignore[union-attr]
        RefreshToken.expires_at > now,  # type: ignore[operator]
    ]


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    model = RefreshToken

    async def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Row for `token_hash` whatever its state, reloaded from the database."""
        result = await self.session.execute(
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_valid_by_hash(
        self, token_hash: str, for_update: bool = False
    ) -> RefreshToken | None:
        """Row for `token_hash` only if it is live.

        `for_update` takes a row lock on backends that have one.
        """
        query = select(RefreshToken).where(RefreshToken.token_hash == token_hash, *_live(utc_now()))
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def _revoke(self, *criteria: Any, **extra: Any) -> int:
        now = utc_now()
        result = await self.session.execute(
            update(RefreshToken)
            .where(*criteria)
            .values(revoked_at=now, **extra)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def mark_rotated(self, token_id: UUID, replaced_by_hash: str) -> bool:
        """Revoke a live token and record its successor.

        Of several concurrent callers for the same token exactly one gets True.
        """
        changed = await self._revoke(
            RefreshToken.id == token_id, *_live(utc_now()), replaced_by_hash=replaced_by_hash
        )
        return changed == 1

    async def revoke_by_hash(self, token_hash: str) -> int:
        """1 when a live token was revoked; 0 for unknown, revoked or expired ones."""
        return await self._revoke(RefreshToken.token_hash == token_hash, *_live(utc_now()))

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        return await self._revoke(RefreshToken.user_id == user_id, *_live(utc_now()))

    async def cleanup_expired(self, retention_days: int) -> int:
        """Purge rows that can no longer matter and commit.

        A row goes once it expired, or was revoked and created, more than
        `retention_days` ago. Safe to repeat.
        """
        cutoff = utc_now() - timedelta(days=retention_days)
        result = await self.session.execute(
            delete(RefreshToken).where(
                or_(
                    RefreshToken.expires_at < cutoff,  # type: ignore[operator]
                    and_(
                        RefreshToken.revoked_at.is_not(None),  # type: ignore[union-attr]
                        RefreshToken.created_at < cutoff,  # type: ignore[operator]
                    ),
                )
            )
        )
        await self.session.commit()
        return result.rowcount or 0  # type: ignore[attr-defined]
