from fastapi import APIRouter

from src.carledger.api.v1 import auth, invoices, users
from src.carledger.core.config import get_settings

api_router = APIRouter(prefix=get_settings().api_prefix)
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(invoices.router)
