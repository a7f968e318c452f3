from typing import Literal

from pydantic import Field

from src.carledger.schemas.base import CamelModel
from src.carledger.schemas.user import UserRead


class GoogleLoginRequest(CamelModel):
    id_token: str = Field(min_length=10)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class LogoutRequest(CamelModel):
    refresh_token: str | None = None


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"


class LoginResponse(TokenPair):
    user: UserRead


class LogoutResponse(CamelModel):
    revoked: int = 0


class SetupStatus(CamelModel):
    status: Literal["ready", "bootstrap"]
