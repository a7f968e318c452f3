"""User administration."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.carledger.core.exceptions import InvalidRequestError, NotFoundError
from src.carledger.core.logging import get_logger
from src.carledger.models import Role, User
from src.carledger.models.base import utc_now
from src.carledger.repositories import UserRepository
from src.carledger.schemas.pagination import PaginatedResponse
from src.carledger.schemas.user import UserRead

logger = get_logger(__name__)


class UserService:
    def __init__(self, user_repo: UserRepository, session: AsyncSession):
        self.user_repo = user_repo
        self.session = session

    async def list_users(self, cursor: str | None, limit: int) -> PaginatedResponse[UserRead]:
        try:
            users, next_cursor, has_more = await self.user_repo.list_page(cursor, limit)
        except ValueError as e:
            raise InvalidRequestError("Invalid cursor") from e
        return PaginatedResponse[UserRead](
            items=[UserRead.model_validate(u) for u in users],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def _get_or_404(self, user_id: UUID) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_role(self, user_id: UUID, role: Role) -> User:
        """Change a user's role. Takes effect at their next token refresh."""
        try:
            user = await self._get_or_404(user_id)
            user.role = role.value
            user.updated_at = utc_now()
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("User role changed", target_user_id=str(user_id), new_role=role.value)
        return user

    async def delete_user(self, user_id: UUID) -> None:
        """Delete a user; their refresh tokens go with them."""
        try:
            user = await self._get_or_404(user_id)
            await self.user_repo.delete(user)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("User deleted", target_user_id=str(user_id))
