from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.carledger.core.db.engine import get_engine


@lru_cache(maxsize=8)
def _sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Loaded attributes survive commit; services return entities after committing
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@asynccontextmanager
async def get_session(engine: AsyncEngine | None = None) -> AsyncGenerator[AsyncSession]:
    """Session on `engine` (the process engine by default).

    Anything not committed when the block exits is rolled back.
    """
    async with _sessionmaker(engine or get_engine())() as session:
        yield session
