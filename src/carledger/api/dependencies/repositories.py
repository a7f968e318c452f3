"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.carledger.api.dependencies.db import DBSession
from src.carledger.repositories import (
    DocumentSequenceRepository,
    InvoiceRepository,
    RefreshTokenRepository,
    UserRepository,
)


def get_user_repository(session: DBSession) -> UserRepository:
    return UserRepository(session)


def get_token_repository(session: DBSession) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)


def get_invoice_repository(session: DBSession) -> InvoiceRepository:
    return InvoiceRepository(session)


def get_sequence_repository(session: DBSession) -> DocumentSequenceRepository:
    return DocumentSequenceRepository(session)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
TokenRepo = Annotated[RefreshTokenRepository, Depends(get_token_repository)]
InvoiceRepo = Annotated[InvoiceRepository, Depends(get_invoice_repository)]
SequenceRepo = Annotated[DocumentSequenceRepository, Depends(get_sequence_repository)]
