"""Cryptographic utilities - access-token signing and refresh-secret hashing."""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from hashlib import sha256
from typing import Any
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt

from src.carledger.core.config import get_settings
from src.carledger.core.exceptions import TokenExpiredError, TokenInvalidError
from src.carledger.models.enums import Role

ACCESS_TOKEN_TYPE = "access"


def hash_token(token: str) -> str:
    """Hash a token using SHA256 for secure storage."""
    return sha256(token.encode()).hexdigest()


def generate_refresh_secret(nbytes: int = 32) -> str:
    """Opaque refresh secret: `nbytes` of CSPRNG output, hex encoded."""
    return secrets.token_hex(nbytes)


@dataclass(frozen=True)
class AccessClaims:
    """Verified contents of an access token."""

    subject_id: UUID
    role: Role
    email: str
    expires_at: datetime


class TokenSigner:
    """Issues and verifies short-lived access tokens.

    Stateless: verification needs only the signing secret, never the database.
    Tokens are accepted only when their header names the configured algorithm,
    so a token signed with "none" or a different algorithm is rejected even if
    the library would otherwise entertain it.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta | None = None):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl or timedelta(minutes=15)

    def issue_access(
        self,
        subject_id: str | UUID,
        role: Role | str,
        email: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a signed access token carrying subject, role and email."""
        now = datetime.now(UTC)
        expire = now + (expires_delta if expires_delta is not None else self.ttl)
        to_encode = {
            "sub": str(subject_id),
            "role": Role(role).value,
            "email": email,
            "iat": now,
            "exp": expire,
            "type": ACCESS_TOKEN_TYPE,
        }
        return jwt.encode(  # type: ignore[no-any-return]
            to_encode,
            self.secret,
            algorithm=self.algorithm,
        )

    def verify_access(self, token: str) -> AccessClaims:
        """Verify signature and expiry, returning the claims.

        Raises:
            TokenExpiredError: the token's ttl has elapsed.
            TokenInvalidError: anything else wrong with the token.
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise TokenInvalidError() from e

        if header.get("alg") != self.algorithm:
            raise TokenInvalidError()

        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except JWTError as e:
            raise TokenInvalidError() from e

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise TokenInvalidError()

        try:
            return AccessClaims(
                subject_id=UUID(payload["sub"]),
                role=Role(payload["role"]),
                email=str(payload["email"]),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise TokenInvalidError() from e


@lru_cache
def get_token_signer() -> TokenSigner:
    """Process-wide signer built from settings at first use."""
    settings = get_settings()
    return TokenSigner(
        settings.jwt_secret_key,
        settings.jwt_algorithm,
        timedelta(minutes=settings.access_token_expire_minutes),
    )
