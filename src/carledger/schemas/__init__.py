from src.carledger.schemas.auth import (
    GoogleLoginRequest,
    LoginResponse,
    LogoutRequest,
    LogoutResponse,
    RefreshRequest,
    SetupStatus,
    TokenPair,
)
from src.carledger.schemas.base import CamelModel, Envelope
from src.carledger.schemas.invoice import InvoiceCreate, InvoiceRead
from src.carledger.schemas.pagination import PaginatedResponse
from src.carledger.schemas.user import UserRead, UserRoleUpdate

__all__ = [
    # Base
    "CamelModel",
    "Envelope",
    "PaginatedResponse",
    # Auth
    "GoogleLoginRequest",
    "LoginResponse",
    "LogoutRequest",
    "LogoutResponse",
    "RefreshRequest",
    "SetupStatus",
    "TokenPair",
    # Invoice
    "InvoiceCreate",
    "InvoiceRead",
    # User
    "UserRead",
    "UserRoleUpdate",
]
