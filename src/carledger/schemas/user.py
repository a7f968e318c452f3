from datetime import datetime
from uuid import UUID

from src.carledger.models.enums import Role
from src.carledger.schemas.base import CamelModel


class UserRead(CamelModel):
    id: UUID
    email: str
    name: str | None
    avatar_url: str | None
    role: Role
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserRoleUpdate(CamelModel):
    role: Role
