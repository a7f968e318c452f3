"""Repository layer - data access abstraction."""

from src.carledger.repositories.base import BaseRepository
from src.carledger.repositories.invoice import InvoiceRepository
from src.carledger.repositories.sequence import DocumentSequenceRepository
from src.carledger.repositories.token import RefreshTokenRepository
from src.carledger.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "DocumentSequenceRepository",
    "InvoiceRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
