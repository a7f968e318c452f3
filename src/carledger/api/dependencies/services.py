"""Service factory dependencies."""

from datetime import timedelta
from typing import Annotated

from fastapi import Depends

from src.carledger.api.dependencies.db import DBSession
from src.carledger.api.dependencies.repositories import (
    InvoiceRepo,
    SequenceRepo,
    TokenRepo,
    UserRepo,
)
from src.carledger.core.config import get_settings
from src.carledger.core.security import TokenSigner, get_token_signer
from src.carledger.services import (
    IdentityVerifier,
    InvoiceService,
    RefreshTokenStore,
    SequenceAllocator,
    SessionService,
    UserService,
    get_identity_verifier,
)

Signer = Annotated[TokenSigner, Depends(get_token_signer)]
Verifier = Annotated[IdentityVerifier, Depends(get_identity_verifier)]


def get_token_store(token_repo: TokenRepo) -> RefreshTokenStore:
    settings = get_settings()
    return RefreshTokenStore(
        token_repo,
        ttl=timedelta(days=settings.refresh_token_expire_days),
        secret_bytes=settings.refresh_token_bytes,
    )


TokenStore = Annotated[RefreshTokenStore, Depends(get_token_store)]


def get_session_service(
    user_repo: UserRepo,
    token_store: TokenStore,
    signer: Signer,
    verifier: Verifier,
    session: DBSession,
) -> SessionService:
    return SessionService(user_repo, token_store, signer, verifier, session)


def get_sequence_allocator(
    invoice_repo: InvoiceRepo, sequence_repo: SequenceRepo
) -> SequenceAllocator:
    return SequenceAllocator(
        invoice_repo, sequence_repo, width=get_settings().invoice_sequence_width
    )


def get_invoice_service(
    invoice_repo: InvoiceRepo,
    user_repo: UserRepo,
    allocator: Annotated[SequenceAllocator, Depends(get_sequence_allocator)],
    session: DBSession,
) -> InvoiceService:
    return InvoiceService(invoice_repo, user_repo, allocator, session)


def get_user_service(user_repo: UserRepo, session: DBSession) -> UserService:
    return UserService(user_repo, session)


SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
InvoiceServiceDep = Annotated[InvoiceService, Depends(get_invoice_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
