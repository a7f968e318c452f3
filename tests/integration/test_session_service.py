"""SessionService protocols: login, refresh, logout."""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from src.carledger.core.exceptions import (
    InvalidAssertionError,
    RefreshInvalidError,
    TokenInvalidError,
    UnauthorizedError,
)
from src.carledger.core.security import get_token_signer, hash_token
from src.carledger.models import RefreshToken, Role, User
from src.carledger.repositories import RefreshTokenRepository, UserRepository
from src.carledger.schemas.auth import TokenPair
from tests.factories import RefreshTokenFactory, UserFactory
from tests.helpers import FakeIdentityVerifier, build_session_service

pytestmark = pytest.mark.integration


@pytest.fixture
def service(db_session: AsyncSession, verifier: FakeIdentityVerifier):
    return build_session_service(db_session, verifier)


class TestLogin:
    async def test_first_user_becomes_super_admin(self, service, verifier):
        verifier.register("assertion-first", "first@example.com")

        result = await service.login("assertion-first")

        assert result.user.role is Role.SUPER_ADMIN
        assert result.user.email == "first@example.com"
        assert result.expires_in == 900
        claims = get_token_signer().verify_access(result.access_token)
        assert claims.subject_id == result.user.id
        assert claims.role is Role.SUPER_ADMIN

    async def test_later_users_start_as_user(self, service, verifier):
        verifier.register("assertion-first", "first@example.com")
        verifier.register("assertion-second", "second@example.com")
        await service.login("assertion-first")

        result = await service.login("assertion-second")

        assert result.user.role is Role.USER

    async def test_existing_user_is_linked_not_duplicated(
        self, service, verifier, db_session: AsyncSession
    ):
        existing = UserFactory.with_role(
            Role.SALES, email="sales@example.com", google_id=None, name="Old Name"
        )
        db_session.add(existing)
        await db_session.commit()
        verifier.register(
            "assertion-sales",
            "sales@example.com",
            subject_id="google-sub-42",
            name="New Name",
            avatar_url="https://example.com/a.png",
        )

        result = await service.login("assertion-sales")

        assert result.user.id == existing.id
        assert result.user.role is Role.SALES
        assert await UserRepository(db_session).count() == 1
        await db_session.refresh(existing)
        assert existing.google_id == "google-sub-42"
        assert existing.name == "New Name"
        assert existing.avatar_url == "https://example.com/a.png"

    async def test_missing_profile_fields_keep_stored_values(
        self, service, verifier, db_session: AsyncSession
    ):
        existing = UserFactory.build(email="keep@example.com", name="Kept Name")
        db_session.add(existing)
        await db_session.commit()
        verifier.register("assertion-keep", "keep@example.com", name=None)

        await service.login("assertion-keep")

        await db_session.refresh(existing)
        assert existing.name == "Kept Name"

    async def test_each_login_is_a_separate_session(self, service, verifier):
        verifier.register("assertion-user", "user@example.com")

        first = await service.login("assertion-user")
        second = await service.login("assertion-user")

        assert first.refresh_token != second.refresh_token
        # The earlier session survives the later login
        pair = await service.refresh(first.refresh_token)
        assert isinstance(pair, TokenPair)

    async def test_inactive_user_is_rejected(self, service, verifier, db_session: AsyncSession):
        user = UserFactory.inactive(email="gone@example.com")
        db_session.add(user)
        await db_session.commit()
        verifier.register("assertion-gone", "gone@example.com")

        with pytest.raises(UnauthorizedError):
            await service.login("assertion-gone")

        tokens = await db_session.execute(
            select(RefreshToken).where(RefreshToken.user_id == user.id)
        )
        assert tokens.scalars().first() is None

    async def test_rejected_assertion_creates_nothing(self, service, db_session: AsyncSession):
        with pytest.raises(InvalidAssertionError):
            await service.login("assertion-unknown")

        assert await UserRepository(db_session).count() == 0


class TestRefresh:
    async def test_rotates_refresh_token(self, service, verifier, db_session: AsyncSession):
        verifier.register("assertion-user", "user@example.com")
        login = await service.login("assertion-user")

        pair = await service.refresh(login.refresh_token)

        assert pair.refresh_token != login.refresh_token
        assert get_token_signer().verify_access(pair.access_token).subject_id == login.user.id
        with pytest.raises(RefreshInvalidError):
            await service.refresh(login.refresh_token)
        # The replacement still works
        await service.refresh(pair.refresh_token)

    async def test_unknown_token(self, service):
        with pytest.raises(RefreshInvalidError):
            await service.refresh("not-a-real-token")

    async def test_new_access_token_carries_current_role(
        self, service, verifier, db_session: AsyncSession
    ):
        verifier.register("assertion-first", "first@example.com")
        verifier.register("assertion-user", "user@example.com")
        await service.login("assertion-first")
        login = await service.login("assertion-user")

        user = await UserRepository(db_session).get_by_id(login.user.id)
        user.role = Role.MARKETING.value
        await db_session.commit()

        pair = await service.refresh(login.refresh_token)

        assert get_token_signer().verify_access(pair.access_token).role is Role.MARKETING

    async def test_deactivated_user_cannot_refresh(
        self, service, verifier, db_session: AsyncSession
    ):
        verifier.register("assertion-user", "user@example.com")
        login = await service.login("assertion-user")
        user = await UserRepository(db_session).get_by_id(login.user.id)
        user.is_active = False
        await db_session.commit()

        with pytest.raises(UnauthorizedError):
            await service.refresh(login.refresh_token)

        # Failed refresh leaves the token untouched
        record = await RefreshTokenRepository(db_session).get_by_hash(
            hash_token(login.refresh_token)
        )
        assert record.revoked_at is None

    async def test_deleted_user_tokens_are_gone(
        self, service, verifier, db_session: AsyncSession
    ):
        verifier.register("assertion-user", "user@example.com")
        login = await service.login("assertion-user")
        user = await UserRepository(db_session).get_by_id(login.user.id)
        await db_session.delete(user)
        await db_session.commit()

        with pytest.raises(RefreshInvalidError):
            await service.refresh(login.refresh_token)

    async def test_concurrent_refresh_succeeds_exactly_once(
        self,
        service,
        verifier: FakeIdentityVerifier,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        verifier.register("assertion-user", "user@example.com")
        login = await service.login("assertion-user")

        async def attempt():
            async with session_factory() as session:
                return await build_session_service(session, verifier).refresh(
                    login.refresh_token
                )

        results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

        successes = [r for r in results if isinstance(r, TokenPair)]
        failures = [r for r in results if isinstance(r, RefreshInvalidError)]
        assert len(successes) == 1
        assert len(failures) == 1


class TestLogout:
    async def test_logout_revokes_token(self, service, verifier):
        verifier.register("assertion-user", "user@example.com")
        login = await service.login("assertion-user")

        assert await service.logout(login.refresh_token) == 1

        with pytest.raises(RefreshInvalidError):
            await service.refresh(login.refresh_token)

    @pytest.mark.parametrize("raw", [None, "", "never-issued"])
    async def test_logout_without_live_token_is_noop(self, service, raw):
        assert await service.logout(raw) == 0

    async def test_logout_expired_token_is_noop(
        self, service, db_session: AsyncSession, plain_user: User
    ):
        raw = "expired-refresh-secret"
        token = RefreshTokenFactory.expired(user_id=plain_user.id, token_hash=hash_token(raw))
        db_session.add(token)
        await db_session.commit()

        assert await service.logout(raw) == 0

        stored = await RefreshTokenRepository(db_session).get_by_hash(token.token_hash)
        assert stored.revoked_at is None

    async def test_logout_twice(self, service, verifier):
        verifier.register("assertion-user", "user@example.com")
        login = await service.login("assertion-user")

        assert await service.logout(login.refresh_token) == 1
        assert await service.logout(login.refresh_token) == 0

    async def test_logout_all_ends_every_session(self, service, verifier):
        verifier.register("assertion-user", "user@example.com")
        sessions = [await service.login("assertion-user") for _ in range(3)]

        revoked = await service.logout_all(sessions[0].user.id)

        assert revoked == 3
        for login in sessions:
            with pytest.raises(RefreshInvalidError):
                await service.refresh(login.refresh_token)


class TestWhoAmI:
    async def test_resolves_user(self, service, verifier):
        verifier.register("assertion-user", "user@example.com")
        login = await service.login("assertion-user")

        user = await service.who_am_i(login.access_token)

        assert isinstance(user, User)
        assert user.email == "user@example.com"

    async def test_invalid_token(self, service):
        with pytest.raises(TokenInvalidError):
            await service.who_am_i("garbage")

    async def test_unknown_user(self, service):
        user = UserFactory.build()
        token = get_token_signer().issue_access(user.id, user.role, user.email)

        with pytest.raises(UnauthorizedError):
            await service.who_am_i(token)


class TestSetupStatus:
    async def test_bootstrap_then_ready(self, service, verifier):
        assert (await service.setup_status()).status == "bootstrap"

        verifier.register("assertion-first", "first@example.com")
        await service.login("assertion-first")

        assert (await service.setup_status()).status == "ready"
