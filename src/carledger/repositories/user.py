"""Repository for User entity."""

from sqlalchemy import func, text
from sqlmodel import select

from src.carledger.models import User
from src.carledger.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entity."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def count(self) -> int:
        """Total number of users."""
        result = await self.session.execute(select(func.count()).select_from(User))
        return int(result.scalar_one())

    async def lock_for_bootstrap(self) -> None:
        """Block concurrent user inserts until the current transaction ends.

        Only taken while the table is empty, so two simultaneous first logins
        cannot both become SUPER_ADMIN. No-op on SQLite, which has no table locks.
        """
        if self.session.get_bind().dialect.name == "postgresql":
            await self.session.execute(text("LOCK TABLE users IN SHARE ROW EXCLUSIVE MODE"))

    async def list_page(
        self, cursor: str | None, limit: int
    ) -> tuple[list[User], str | None, bool]:
        """Page through users, newest first."""
        return await self.paginate(select(User), cursor, limit)
