from datetime import datetime
from uuid import UUID

from pydantic import Field

from src.carledger.schemas.base import CamelModel


class InvoiceCreate(CamelModel):
    country: str = Field(min_length=1, max_length=100)
    invoice_date: datetime | None = None


class InvoiceRead(CamelModel):
    id: UUID
    invoice_number: str
    country: str
    invoice_date: datetime
    author_id: UUID | None
