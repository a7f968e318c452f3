from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.carledger.api.middlewares import setup_middlewares
from src.carledger.api.v1.router import api_router
from src.carledger.core.config import get_settings
from src.carledger.core.db import dispose_engine
from src.carledger.core.exceptions import setup_exception_handlers
from src.carledger.core.health import setup_health_endpoint, setup_metrics
from src.carledger.core.logging import get_logger, setup_logging
from src.carledger.temporal.client import close_temporal_client

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info("API starting", app=settings.app_name, env=settings.app_env)
    try:
        yield
    finally:
        await close_temporal_client()
        await dispose_engine()
        logger.info("API stopped")


OPENAPI_TAGS = [
    {"name": "auth", "description": "Google sign-in and token lifecycle"},
    {"name": "users", "description": "User administration (SUPER_ADMIN)"},
    {"name": "invoices", "description": "Invoices and their document numbers"},
    {"name": "health", "description": "Liveness and dependency checks"},
]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Back-office API for vehicle export records",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    setup_exception_handlers(app)
    setup_middlewares(app, settings)

    app.include_router(api_router)
    setup_health_endpoint(app)
    setup_metrics(app)

    return app


app = create_app()
