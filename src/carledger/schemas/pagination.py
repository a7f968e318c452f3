"""Keyset pagination: response envelope and the opaque cursor codec."""

import base64
import binascii
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import Field

from src.carledger.schemas.base import CamelModel

T = TypeVar("T")

_SEPARATOR = "|"


class PaginatedResponse(CamelModel, Generic[T]):
    """One page of results, newest first."""

    items: list[T]
    next_cursor: str | None = Field(
        default=None,
        description="Pass back as `cursor` to fetch the following page; null on the last page.",
    )
    has_more: bool = Field(default=False, description="True when another page follows.")


def encode_cursor(created_at: datetime, row_id: UUID) -> str:
    """Pack the sort key of the last row on a page."""
    raw = f"{created_at.isoformat()}{_SEPARATOR}{row_id}"
    return base64.urlsafe_b64encode(raw.encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, UUID]:
    """Inverse of `encode_cursor`.

    Raises:
        ValueError: the cursor was not produced by `encode_cursor`
    """
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        stamp, _, row_id = raw.partition(_SEPARATOR)
        return datetime.fromisoformat(stamp), UUID(row_id)
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise ValueError("Invalid cursor") from e
