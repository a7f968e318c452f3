"""Generic repository shared by the entity repositories."""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from src.carledger.schemas.pagination import decode_cursor, encode_cursor


ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Data access for one model.

    Nothing here commits; the calling service owns the transaction.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: UUID) -> ModelType | None:
        pk = self.model.id  # type: ignore[attr-defined]
        result = await self.session.execute(select(self.model).where(pk == id))
        return result.scalar_one_or_none()

    def add(self, entity: ModelType) -> None:
        self.session.add(entity)

    async def delete(self, entity: ModelType) -> None:
        await self.session.delete(entity)

    async def paginate(
        self, query: Any, cursor: str | None, limit: int
    ) -> tuple[list[ModelType], str | None, bool]:
        """Run `query` one page at a time ordered by (created_at, id), newest first.

        Rows sharing a timestamp are split by id, so no row is skipped or
        repeated across pages.

        Raises:
            ValueError: `cursor` is malformed
        """
        created_at = self.model.created_at  # type: ignore[attr-defined]
        row_id = self.model.id  # type: ignore[attr-defined]

        if cursor is not None:
            after_ts, after_id = decode_cursor(cursor)
            query = query.where(
                or_(created_at < after_ts, and_(created_at == after_ts, row_id < after_id))
            )

        result = await self.session.execute(
            query.order_by(created_at.desc(), row_id.desc()).limit(limit + 1)
        )
        rows = list(result.scalars().all())

        has_more = len(rows) > limit
        rows = rows[:limit]
        next_cursor = None
        if has_more:
            last = rows[-1]
            next_cursor = encode_cursor(last.created_at, last.id)  # type: ignore[attr-defined]
        return rows, next_cursor, has_more
