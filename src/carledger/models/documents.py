"""Numbered business documents and their per-day sequence counters."""

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from src.carledger.models.base import utc_now


class Invoice(SQLModel, table=True):
    """Invoice header. Only what numbering needs lives here."""

    __tablename__ = "invoices"
    __table_args__ = (Index("ix_invoices_partition_date", "partition_code", "invoice_date"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    invoice_number: str = Field(max_length=32, unique=True, index=True)
    country: str = Field(max_length=100)
    partition_code: str = Field(max_length=8)
    invoice_date: datetime
    author_id: UUID | None = Field(
        default=None, foreign_key="users.id", index=True, ondelete="SET NULL"
    )
    created_at: datetime = Field(default_factory=utc_now)


class DocumentSequence(SQLModel, table=True):
    """Last ordinal handed out for a partition code on a calendar day (UTC)."""

    __tablename__ = "document_sequences"

    partition_code: str = Field(max_length=8, primary_key=True)
    day: date = Field(primary_key=True)
    last_value: int = Field(default=0)
    updated_at: datetime = Field(default_factory=utc_now)
