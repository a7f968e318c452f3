"""Classification of integrity errors raised while storing an invoice."""

import pytest
from sqlalchemy.exc import IntegrityError

from src.carledger.services.invoice_service import is_number_collision

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "message",
    [
        "UNIQUE constraint failed: invoices.invoice_number",
        'duplicate key value violates unique constraint "ix_invoices_invoice_number"',
    ],
)
def test_unique_number_violation(message: str):
    assert is_number_collision(IntegrityError("INSERT", {}, Exception(message)))


@pytest.mark.parametrize(
    "message",
    [
        "FOREIGN KEY constraint failed",
        'insert or update on table "invoices" violates foreign key constraint '
        '"invoices_author_id_fkey"',
    ],
)
def test_other_violations(message: str):
    assert not is_number_collision(IntegrityError("INSERT", {}, Exception(message)))
