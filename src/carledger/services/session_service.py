"""Session service - login, refresh, logout for Google-authenticated users.

Refresh-token lineage per login:

    ISSUED -> (ROTATED -> ISSUED)* -> REVOKED
    ISSUED -> EXPIRED

Nothing leaves REVOKED or EXPIRED. Each protocol below commits its writes as a
single transaction and rolls back on any failure; a transaction abandoned by a
cancelled request is rolled back when its session closes.

Logins add a session; they never revoke the user's other refresh tokens.
"""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.carledger.core.exceptions import ConflictError, UnauthorizedError
from src.carledger.core.logging import get_logger
from src.carledger.core.security import TokenSigner
from src.carledger.models import Role, User
from src.carledger.models.base import utc_now
from src.carledger.repositories import UserRepository
from src.carledger.schemas.auth import LoginResponse, SetupStatus, TokenPair
from src.carledger.schemas.user import UserRead
from src.carledger.services.identity import IdentityClaims, IdentityVerifier
from src.carledger.services.token_store import RefreshTokenStore

logger = get_logger(__name__)


class SessionService:
    """Orchestrates the identity verifier, token store and token signer."""

    def __init__(
        self,
        user_repo: UserRepository,
        token_store: RefreshTokenStore,
        signer: TokenSigner,
        verifier: IdentityVerifier,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.token_store = token_store
        self.signer = signer
        self.verifier = verifier
        self.session = session

    @property
    def expires_in(self) -> int:
        return int(self.signer.ttl.total_seconds())

    async def login(self, assertion: str) -> LoginResponse:
        """Exchange an identity assertion for a user record and a token pair.

        Email is the merge key: an existing user gets its Google linkage and
        profile refreshed, a new one is created with the bootstrap role rule.
        """
        # Network call stays outside the transaction
        identity = await self.verifier.verify(assertion)

        try:
            user = await self._upsert_user(identity)
            if not user.is_active:
                raise UnauthorizedError("Account is disabled")

            issued = self.token_store.issue(user.id)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("Login conflicted with an existing account", error=str(e.orig))
            raise ConflictError("Identity is already linked to another account") from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info("User logged in", user_id=str(user.id), role=user.role)
        return LoginResponse(
            user=UserRead.model_validate(user),
            access_token=self.signer.issue_access(user.id, user.role, user.email),
            refresh_token=issued.raw,
            expires_in=self.expires_in,
        )

    async def _upsert_user(self, identity: IdentityClaims) -> User:
        user = await self.user_repo.get_by_email(identity.email)
        if user is not None:
            user.google_id = identity.subject_id
            if identity.name is not None:
                user.name = identity.name
            if identity.avatar_url is not None:
                user.avatar_url = identity.avatar_url
            user.updated_at = utc_now()
            return user

        role = await self._bootstrap_role()
        user = User(
            email=identity.email,
            google_id=identity.subject_id,
            name=identity.name,
            avatar_url=identity.avatar_url,
            role=role.value,
        )
        self.user_repo.add(user)
        await self.session.flush()

        if role is Role.SUPER_ADMIN:
            logger.info("Bootstrap user promoted to SUPER_ADMIN", user_id=str(user.id))
        else:
            logger.info("User created", user_id=str(user.id))
        return user

    async def _bootstrap_role(self) -> Role:
        """SUPER_ADMIN for the very first user, USER for everyone after."""
        if await self.user_repo.count() > 0:
            return Role.USER
        await self.user_repo.lock_for_bootstrap()
        # Re-count under the lock: another first login may have committed meanwhile
        return Role.SUPER_ADMIN if await self.user_repo.count() == 0 else Role.USER

    async def refresh(self, raw_refresh_token: str) -> TokenPair:
        """Rotate a refresh token and mint a new access token.

        Of two concurrent calls with the same token exactly one succeeds; the
        other gets RefreshInvalidError.
        """
        try:
            record = await self.token_store.validate(raw_refresh_token, for_update=True)

            user = await self.user_repo.get_by_id(record.user_id)
            if user is None or not user.is_active:
                raise UnauthorizedError("User no longer exists")

            issued = await self.token_store.rotate(record)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Refresh token rotated", user_id=str(user.id))
        return TokenPair(
            access_token=self.signer.issue_access(user.id, user.role, user.email),
            refresh_token=issued.raw,
            expires_in=self.expires_in,
        )

    async def logout(self, raw_refresh_token: str | None) -> int:
        """Revoke one refresh token. Missing or dead tokens are not an error."""
        if not raw_refresh_token:
            return 0

        try:
            revoked = await self.token_store.revoke(raw_refresh_token)
            if revoked:
                await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        if revoked:
            logger.info("User logged out")
        return revoked

    async def logout_all(self, user_id: UUID) -> int:
        """Revoke every live refresh token of the user."""
        try:
            revoked = await self.token_store.revoke_all(user_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("All sessions revoked", user_id=str(user_id), revoked=revoked)
        return revoked

    async def who_am_i(self, access_token: str) -> User:
        """Resolve an access token to its (still existing, active) user."""
        claims = self.signer.verify_access(access_token)
        user = await self.user_repo.get_by_id(claims.subject_id)
        if user is None or not user.is_active:
            raise UnauthorizedError("User no longer exists")
        return user

    async def setup_status(self) -> SetupStatus:
        if await self.user_repo.count() == 0:
            return SetupStatus(status="bootstrap")
        return SetupStatus(status="ready")
