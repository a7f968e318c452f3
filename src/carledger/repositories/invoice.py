"""Repository for Invoice entity."""

from datetime import datetime

from sqlalchemy import func
from sqlmodel import select

from src.carledger.models import Invoice
from src.carledger.repositories.base import BaseRepository


class InvoiceRepository(BaseRepository[Invoice]):
    model = Invoice

    async def count_in_window(self, partition_code: str, start: datetime, end: datetime) -> int:
        """Count invoices for a partition dated within [start, end]."""
        result = await self.session.execute(
            select(func.count())
            .select_from(Invoice)
            .where(
                Invoice.partition_code == partition_code,
                Invoice.invoice_date >= start,
                Invoice.invoice_date <= end,
            )
        )
        return int(result.scalar_one())
