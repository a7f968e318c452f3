"""Human-readable document numbers: {CODE}-{YYYYMMDD}{SEQ}."""

from datetime import UTC, date, datetime, time, timedelta

from src.carledger.core.logging import get_logger
from src.carledger.repositories import DocumentSequenceRepository, InvoiceRepository

logger = get_logger(__name__)

COUNTRY_CODE_MAP = {
    "russia": "RU",
    "uzbekistan": "UZ",
    "kazakhstan": "KZ",
    "kyrgyzstan": "KG",
}


def partition_code_for(partition_key: str) -> str:
    """Map a partition key (a country name or code) to its two-letter code."""
    key = partition_key.strip()
    return COUNTRY_CODE_MAP.get(key.lower(), key[:2].upper())


def utc_day(on: date | datetime) -> date:
    """Calendar day in UTC. Naive datetimes are taken to be UTC already."""
    if isinstance(on, datetime):
        if on.tzinfo is not None:
            on = on.astimezone(UTC)
        return on.date()
    return on


def day_window(day: date) -> tuple[datetime, datetime]:
    """Naive-UTC [start, end] bounds of a calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def format_document_number(code: str, day: date, ordinal: int, width: int = 2) -> str:
    """Render a number such as RU-2025011503. SEQ grows past `width` digits."""
    if ordinal < 1:
        raise ValueError("ordinal must be positive")
    return f"{code}-{day:%Y%m%d}{ordinal:0{width}d}"


class SequenceAllocator:
    """Hands out per-partition, per-day document numbers.

    The ordinal is reserved in `document_sequences` by a single atomic upsert,
    seeded from the documents already recorded for that day. Reservation joins
    the caller's transaction: commit keeps it, rollback gives it back.
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        sequence_repo: DocumentSequenceRepository,
        width: int = 2,
    ):
        self.invoice_repo = invoice_repo
        self.sequence_repo = sequence_repo
        self.width = width

    async def next_number(self, partition_key: str, on: date | datetime) -> str:
        code = partition_code_for(partition_key)
        day = utc_day(on)
        start, end = day_window(day)

        existing = await self.invoice_repo.count_in_window(code, start, end)
        ordinal = await self.sequence_repo.reserve_next(code, day, floor=existing)

        number = format_document_number(code, day, ordinal, self.width)
        logger.debug("Document number reserved", partition_code=code, number=number)
        return number
