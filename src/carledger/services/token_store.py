"""Refresh token store - opaque secrets, hashed at rest, rotated on use."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from src.carledger.core.exceptions import RefreshInvalidError
from src.carledger.core.logging import get_logger, token_fingerprint
from src.carledger.core.security import generate_refresh_secret, hash_token
from src.carledger.models import RefreshToken
from src.carledger.models.base import utc_now
from src.carledger.repositories import RefreshTokenRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class IssuedRefreshToken:
    """A freshly minted refresh token. `raw` exists only in this object."""

    raw: str
    expires_at: datetime
    record: RefreshToken


class RefreshTokenStore:
    """Issue, validate, rotate and revoke refresh tokens.

    Works inside the caller's session and never commits: each SessionService
    protocol commits (or rolls back) its writes as one transaction.
    """

    def __init__(
        self,
        token_repo: RefreshTokenRepository,
        ttl: timedelta = timedelta(days=30),
        secret_bytes: int = 32,
    ):
        self.token_repo = token_repo
        self.ttl = ttl
        self.secret_bytes = secret_bytes

    def issue(self, user_id: UUID) -> IssuedRefreshToken:
        """Create a new token record for `user_id` and hand back its raw secret."""
        raw = generate_refresh_secret(self.secret_bytes)
        record = RefreshToken(
            user_id=user_id,
            token_hash=hash_token(raw),
            expires_at=utc_now() + self.ttl,
        )
        self.token_repo.add(record)
        return IssuedRefreshToken(raw=raw, expires_at=record.expires_at, record=record)

    async def validate(self, raw: str, for_update: bool = False) -> RefreshToken:
        """Return the live record for `raw` or raise RefreshInvalidError."""
        token_hash = hash_token(raw)
        record = await self.token_repo.get_valid_by_hash(token_hash, for_update=for_update)
        if record is not None:
            return record

        stale = await self.token_repo.get_by_hash(token_hash)
        if stale is not None and stale.replaced_by_hash is not None:
            # A rotated-away secret came back: either a lost race or a replayed copy
            logger.warning(
                "Rotated refresh token presented again",
                user_id=str(stale.user_id),
                token=token_fingerprint(token_hash),
            )
        raise RefreshInvalidError()

    async def rotate(self, old: RefreshToken) -> IssuedRefreshToken:
        """Revoke `old`, chain it to a new token, and return the new one.

        Raises RefreshInvalidError when another request already consumed `old`.
        """
        issued_raw = generate_refresh_secret(self.secret_bytes)
        new_hash = hash_token(issued_raw)

        if not await self.token_repo.mark_rotated(old.id, new_hash):
            raise RefreshInvalidError()

        record = RefreshToken(
            user_id=old.user_id,
            token_hash=new_hash,
            expires_at=utc_now() + self.ttl,
        )
        self.token_repo.add(record)
        return IssuedRefreshToken(raw=issued_raw, expires_at=record.expires_at, record=record)

    async def revoke(self, raw: str) -> int:
        """Revoke the token for `raw` if it is live. Unknown secrets are a no-op."""
        return await self.token_repo.revoke_by_hash(hash_token(raw))

    async def revoke_all(self, user_id: UUID) -> int:
        return await self.token_repo.revoke_all_for_user(user_id)
