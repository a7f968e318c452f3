"""Authentication and authorization dependencies.

Protected routes trust the signed access token alone; no database lookup
happens on this path.
"""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Header

from src.carledger.api.dependencies.services import Signer
from src.carledger.core.exceptions import ForbiddenError, UnauthorizedError
from src.carledger.core.logging import bind_user_context, get_logger
from src.carledger.core.security import AccessClaims, is_role_allowed
from src.carledger.models import Role

logger = get_logger(__name__)


async def get_bearer_token(authorization: Annotated[str | None, Header()] = None) -> str:
    """Extract the raw token from `Authorization: Bearer <token>`."""
    if not authorization:
        raise UnauthorizedError("Missing authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Invalid authorization header")
    return token.strip()


BearerToken = Annotated[str, Depends(get_bearer_token)]


async def get_current_principal(token: BearerToken, signer: Signer) -> AccessClaims:
    """Verify the access token and bind its subject to the log context."""
    claims = signer.verify_access(token)
    bind_user_context(claims.subject_id, claims.role.value)
    return claims


CurrentPrincipal = Annotated[AccessClaims, Depends(get_current_principal)]


def require_roles(*roles: Role) -> Callable[..., Awaitable[AccessClaims]]:
    """Dependency factory admitting only principals whose role is listed."""
    allowed = frozenset(roles)

    async def dependency(principal: CurrentPrincipal) -> AccessClaims:
        if not is_role_allowed(principal.role, allowed):
            logger.warning(
                "Role not permitted",
                role=principal.role.value,
                allowed=sorted(r.value for r in allowed),
            )
            raise ForbiddenError("Insufficient role")
        return principal

    return dependency


SuperAdmin = Annotated[AccessClaims, Depends(require_roles(Role.SUPER_ADMIN))]
InvoiceAuthor = Annotated[AccessClaims, Depends(require_roles(Role.SALES, Role.SUPER_ADMIN))]
