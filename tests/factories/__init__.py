"""Model factories: `from tests.factories import UserFactory, ...`."""

from tests.factories.auth import RefreshTokenFactory, generate_token_hash
from tests.factories.base import BaseFactory, generate_uuid, utc_now
from tests.factories.documents import InvoiceFactory
from tests.factories.user import UserFactory

__all__ = [
    "BaseFactory",
    "InvoiceFactory",
    "RefreshTokenFactory",
    "UserFactory",
    "generate_token_hash",
    "generate_uuid",
    "utc_now",
]
