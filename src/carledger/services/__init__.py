from src.carledger.services.identity import (
    GoogleIdentityVerifier,
    IdentityClaims,
    IdentityVerifier,
    get_identity_verifier,
)
from src.carledger.services.invoice_service import InvoiceService
from src.carledger.services.sequence_service import (
    SequenceAllocator,
    format_document_number,
    partition_code_for,
)
from src.carledger.services.session_service import SessionService
from src.carledger.services.token_store import IssuedRefreshToken, RefreshTokenStore
from src.carledger.services.user_service import UserService

__all__ = [
    "GoogleIdentityVerifier",
    "IdentityClaims",
    "IdentityVerifier",
    "InvoiceService",
    "IssuedRefreshToken",
    "RefreshTokenStore",
    "SequenceAllocator",
    "SessionService",
    "UserService",
    "format_document_number",
    "get_identity_verifier",
    "partition_code_for",
]
