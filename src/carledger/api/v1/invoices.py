"""Invoice endpoints."""

from fastapi import APIRouter, status

from src.carledger.api.dependencies import InvoiceAuthor, InvoiceServiceDep
from src.carledger.schemas import Envelope, InvoiceCreate, InvoiceRead

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post(
    "",
    response_model=Envelope[InvoiceRead],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Invoice number already taken, retry"}},
)
async def create_invoice(
    body: InvoiceCreate, principal: InvoiceAuthor, service: InvoiceServiceDep
) -> Envelope[InvoiceRead]:
    """Create an invoice numbered `{CODE}-{YYYYMMDD}{SEQ}` for its country and day."""
    invoice = await service.create_invoice(body.country, body.invoice_date, principal.subject_id)
    return Envelope(data=InvoiceRead.model_validate(invoice))
