"""User administration endpoints (SUPER_ADMIN only)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from src.carledger.api.dependencies import SuperAdmin, UserServiceDep
from src.carledger.schemas import Envelope, PaginatedResponse, UserRead, UserRoleUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=Envelope[PaginatedResponse[UserRead]])
async def list_users(
    _: SuperAdmin,
    service: UserServiceDep,
    cursor: str | None = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> Envelope[PaginatedResponse[UserRead]]:
    """List users, newest first. Pass `nextCursor` back as `cursor` for the next page."""
    return Envelope(data=await service.list_users(cursor, limit))


@router.patch(
    "/{user_id}/role",
    response_model=Envelope[UserRead],
    responses={404: {"description": "User not found"}},
)
async def update_user_role(
    user_id: UUID, body: UserRoleUpdate, _: SuperAdmin, service: UserServiceDep
) -> Envelope[UserRead]:
    user = await service.update_role(user_id, body.role)
    return Envelope(data=UserRead.model_validate(user))


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "User not found"}},
)
async def delete_user(user_id: UUID, _: SuperAdmin, service: UserServiceDep) -> Response:
    await service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
