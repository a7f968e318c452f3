"""Invoice creation - only the parts that depend on document numbering."""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.carledger.core.exceptions import ConflictError, DuplicateNumberError, UnauthorizedError
from src.carledger.core.logging import get_logger
from src.carledger.models import Invoice
from src.carledger.models.base import utc_now
from src.carledger.repositories import InvoiceRepository, UserRepository
from src.carledger.services.sequence_service import SequenceAllocator, partition_code_for

logger = get_logger(__name__)


def is_number_collision(error: IntegrityError) -> bool:
    """True when the violated constraint is the unique invoice number.

    PostgreSQL names the index (`ix_invoices_invoice_number`), SQLite names
    the column (`invoices.invoice_number`); both mention the column.
    """
    return "invoice_number" in str(error.orig)


class InvoiceService:
    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        user_repo: UserRepository,
        allocator: SequenceAllocator,
        session: AsyncSession,
    ):
        self.invoice_repo = invoice_repo
        self.user_repo = user_repo
        self.allocator = allocator
        self.session = session

    async def create_invoice(
        self,
        country: str,
        invoice_date: datetime | None,
        author_id: UUID | None,
    ) -> Invoice:
        """Create an invoice numbered by the allocator.

        Raises:
            UnauthorizedError: the author's account was deleted after their token was issued.
            DuplicateNumberError: the number collided with an existing invoice.
            ConflictError: any other constraint rejected the row.
        """
        if invoice_date is None:
            invoice_date = utc_now()
        elif invoice_date.tzinfo is not None:
            invoice_date = invoice_date.astimezone(UTC).replace(tzinfo=None)

        try:
            if author_id is not None and await self.user_repo.get_by_id(author_id) is None:
                raise UnauthorizedError("User no longer exists")
            number = await self.allocator.next_number(country, invoice_date)
            invoice = Invoice(
                invoice_number=number,
                country=country.strip(),
                partition_code=partition_code_for(country),
                invoice_date=invoice_date,
                author_id=author_id,
            )
            self.invoice_repo.add(invoice)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if is_number_collision(e):
                logger.warning("Invoice number collision", error=str(e.orig))
                raise DuplicateNumberError() from e
            logger.warning("Invoice rejected by constraint", error=str(e.orig))
            raise ConflictError("Invoice could not be stored") from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Invoice created", invoice_id=str(invoice.id), number=invoice.invoice_number)
        return invoice
