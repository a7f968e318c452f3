"""Model exports.

Import from here: `from src.carledger.models import User, RefreshToken`
"""

from src.carledger.models.auth import RefreshToken
from src.carledger.models.documents import DocumentSequence, Invoice
from src.carledger.models.enums import Role
from src.carledger.models.user import User

__all__ = [
    # Enums
    "Role",
    # Models
    "DocumentSequence",
    "Invoice",
    "RefreshToken",
    "User",
]
