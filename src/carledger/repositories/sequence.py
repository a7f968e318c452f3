"""Repository for per-day document sequence counters."""

from datetime import date

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from src.carledger.models import DocumentSequence
from src.carledger.models.base import utc_now


# Settings only accept these two backends; each spells "larger of" differently
_UPSERT_BY_DIALECT = {
    "postgresql": (postgresql.insert, func.greatest),
    "sqlite": (sqlite.insert, func.max),
}


class DocumentSequenceRepository:
    """Atomic increment-and-read on `document_sequences`.

    Not a BaseRepository: rows are keyed by (partition_code, day), not an id.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def reserve_next(self, partition_code: str, day: date, floor: int = 0) -> int:
        """Reserve and return the next ordinal for (partition_code, day).

        A single INSERT ... ON CONFLICT DO UPDATE ... RETURNING, so two callers
        can never read the same value. The result is at least `floor + 1`.
        The row stays locked until the caller's transaction ends.
        """
        insert, greatest = _UPSERT_BY_DIALECT[self.session.get_bind().dialect.name]

        table = DocumentSequence.__table__  # type: ignore[attr-defined]
        now = utc_now()
        stmt = insert(table).values(
            partition_code=partition_code,
            day=day,
            last_value=floor + 1,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.partition_code, table.c.day],
            set_={
                "last_value": greatest(table.c.last_value + 1, stmt.excluded.last_value),
                "updated_at": now,
            },
        ).returning(table.c.last_value)

        result = await self.session.execute(stmt)
        return int(result.scalar_one())
