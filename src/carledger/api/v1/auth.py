"""Authentication endpoints - Google sign-in and session lifecycle."""

from fastapi import APIRouter
from starlette.requests import Request

from src.carledger.api.dependencies import BearerToken, CurrentPrincipal, SessionServiceDep
from src.carledger.core.config import get_settings
from src.carledger.core.rate_limit import limiter
from src.carledger.schemas import (
    Envelope,
    GoogleLoginRequest,
    LoginResponse,
    LogoutRequest,
    LogoutResponse,
    RefreshRequest,
    SetupStatus,
    TokenPair,
    UserRead,
)

router = APIRouter(prefix="/auth", tags=["auth"])

AUTH_RATE_LIMIT = get_settings().auth_rate_limit


@router.post(
    "/google",
    response_model=Envelope[LoginResponse],
    responses={
        400: {"description": "Malformed body"},
        401: {"description": "Identity token rejected"},
        503: {"description": "Identity provider unavailable"},
    },
)
@limiter.limit(AUTH_RATE_LIMIT)
async def google_login(
    request: Request, body: GoogleLoginRequest, service: SessionServiceDep
) -> Envelope[LoginResponse]:
    """Sign in with a Google ID token.

    The first account ever created becomes SUPER_ADMIN; later ones start as USER.
    Returns the user, a 15 minute access token and a 30 day refresh token.
    """
    return Envelope(data=await service.login(body.id_token))


@router.post(
    "/refresh",
    response_model=Envelope[TokenPair],
    responses={401: {"description": "Unknown, revoked, expired or already used refresh token"}},
)
@limiter.limit(AUTH_RATE_LIMIT)
async def refresh(
    request: Request, body: RefreshRequest, service: SessionServiceDep
) -> Envelope[TokenPair]:
    """Exchange a refresh token for a new access token and a new refresh token.

    The presented refresh token is revoked; reusing it fails.
    """
    return Envelope(data=await service.refresh(body.refresh_token))


@router.post("/logout", response_model=Envelope[LogoutResponse])
async def logout(
    service: SessionServiceDep, body: LogoutRequest | None = None
) -> Envelope[LogoutResponse]:
    """Revoke a refresh token. Succeeds even when there is nothing to revoke."""
    revoked = await service.logout(body.refresh_token if body else None)
    return Envelope(data=LogoutResponse(revoked=revoked))


@router.post("/logout-all", response_model=Envelope[LogoutResponse])
async def logout_all(
    principal: CurrentPrincipal, service: SessionServiceDep
) -> Envelope[LogoutResponse]:
    """Revoke every refresh token of the calling user."""
    revoked = await service.logout_all(principal.subject_id)
    return Envelope(data=LogoutResponse(revoked=revoked))


@router.get(
    "/me",
    response_model=Envelope[UserRead],
    responses={401: {"description": "Not authenticated"}},
)
async def me(token: BearerToken, service: SessionServiceDep) -> Envelope[UserRead]:
    user = await service.who_am_i(token)
    return Envelope(data=UserRead.model_validate(user))


@router.get("/setup-status", response_model=Envelope[SetupStatus])
async def setup_status(service: SessionServiceDep) -> Envelope[SetupStatus]:
    """Whether the next sign-in will bootstrap the first SUPER_ADMIN."""
    return Envelope(data=await service.setup_status())
