"""FastAPI dependency injection definitions."""

from src.carledger.api.dependencies.auth import (
    BearerToken,
    CurrentPrincipal,
    InvoiceAuthor,
    SuperAdmin,
    get_bearer_token,
    get_current_principal,
    require_roles,
)
from src.carledger.api.dependencies.db import DBSession, get_db_session
from src.carledger.api.dependencies.repositories import (
    InvoiceRepo,
    SequenceRepo,
    TokenRepo,
    UserRepo,
)
from src.carledger.api.dependencies.services import (
    InvoiceServiceDep,
    SessionServiceDep,
    Signer,
    UserServiceDep,
    Verifier,
)

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Auth
    "BearerToken",
    "CurrentPrincipal",
    "InvoiceAuthor",
    "SuperAdmin",
    "get_bearer_token",
    "get_current_principal",
    "require_roles",
    # Repositories
    "InvoiceRepo",
    "SequenceRepo",
    "TokenRepo",
    "UserRepo",
    # Services
    "InvoiceServiceDep",
    "SessionServiceDep",
    "Signer",
    "UserServiceDep",
    "Verifier",
]
