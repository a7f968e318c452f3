"""Integration test fixtures for database and HTTP client operations.

Each test gets its own SQLite file, created from the model metadata, with
foreign keys enforced so cascades behave as they do on PostgreSQL.
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from src.carledger.api.dependencies import get_db_session
from src.carledger.core import db
from src.carledger.core.health import reset_health_cache
from src.carledger.main import create_app
from src.carledger.models import User
from src.carledger.services import get_identity_verifier
from tests.factories import UserFactory
from tests.helpers import FakeIdentityVerifier


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture(autouse=True)
async def _reset_global_engine() -> AsyncGenerator[None]:
    """The app-wide engine is bound to the event loop of the test that created it."""
    await db.dispose_engine()
    reset_health_cache()
    yield
    await db.dispose_engine()
    reset_health_cache()


@pytest.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine]:
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'carledger.db'}",
        poolclass=NullPool,
    )
    event.listen(test_engine.sync_engine, "connect", _enable_foreign_keys)

    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Independent sessions, for tests that race two requests."""
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Session for arranging and inspecting data.

    Not auto-committed: tests call `await db_session.commit()` themselves.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def verifier() -> FakeIdentityVerifier:
    return FakeIdentityVerifier()


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession], verifier: FakeIdentityVerifier
) -> AsyncGenerator[AsyncClient]:
    app = create_app()

    async def _test_db_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _test_db_session
    app.dependency_overrides[get_identity_verifier] = lambda: verifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def _persist(session: AsyncSession, user: User) -> User:
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def super_admin(db_session: AsyncSession) -> User:
    return await _persist(db_session, UserFactory.super_admin())


@pytest.fixture
async def plain_user(db_session: AsyncSession) -> User:
    return await _persist(db_session, UserFactory.build())
