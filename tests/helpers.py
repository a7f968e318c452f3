"""Shared test helpers."""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from src.carledger.core.exceptions import InvalidAssertionError
from src.carledger.core.security import TokenSigner, get_token_signer
from src.carledger.models import User
from src.carledger.repositories import RefreshTokenRepository, UserRepository
from src.carledger.services import IdentityClaims, RefreshTokenStore, SessionService


class FakeIdentityVerifier:
    """In-memory identity provider: only registered assertions verify."""

    def __init__(self) -> None:
        self.identities: dict[str, IdentityClaims] = {}

    def register(
        self,
        assertion: str,
        email: str,
        subject_id: str | None = None,
        name: str | None = "Test User",
        avatar_url: str | None = None,
    ) -> str:
        self.identities[assertion] = IdentityClaims(
            subject_id=subject_id or f"google-{assertion}",
            email=email,
            name=name,
            avatar_url=avatar_url,
        )
        return assertion

    async def verify(self, assertion: str) -> IdentityClaims:
        try:
            return self.identities[assertion]
        except KeyError:
            raise InvalidAssertionError() from None


def build_session_service(
    session: AsyncSession,
    verifier: FakeIdentityVerifier,
    signer: TokenSigner | None = None,
) -> SessionService:
    store = RefreshTokenStore(RefreshTokenRepository(session), ttl=timedelta(days=30))
    return SessionService(
        UserRepository(session),
        store,
        signer or get_token_signer(),
        verifier,
        session,
    )


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header carrying a fresh access token for `user`."""
    token = get_token_signer().issue_access(user.id, user.role, user.email)
    return {"Authorization": f"Bearer {token}"}
