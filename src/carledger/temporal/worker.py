"""Background job worker, run as its own process next to the API.

    python -m src.carledger.temporal.worker
    python -m src.carledger.temporal.worker --schedule-cleanup
"""

import argparse
import asyncio
from collections.abc import Callable

import uvicorn
from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from temporalio.client import Client
from temporalio.worker import Worker

from src.carledger.core.config import get_settings
from src.carledger.core.db import dispose_engine
from src.carledger.core.logging import get_logger, setup_logging
from src.carledger.temporal.activities import cleanup_refresh_tokens
from src.carledger.temporal.client import (
    close_temporal_client,
    get_temporal_client,
    schedule_token_cleanup,
)
from src.carledger.temporal.workflows import TokenCleanupWorkflow

logger = get_logger(__name__)

WORKER_HEALTH_PORT = 8001
MAX_CONCURRENT_TASKS = 10


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="carledger background worker")
    parser.add_argument(
        "--schedule-cleanup",
        action="store_true",
        help="register the daily refresh token cleanup before polling",
    )
    parser.add_argument(
        "--health-port",
        type=int,
        default=WORKER_HEALTH_PORT,
        help="port for the /health and /ready probes",
    )
    return parser.parse_args(argv)


def create_worker(client: Client, task_queue: str) -> Worker:
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[TokenCleanupWorkflow],
        activities=[cleanup_refresh_tokens],
        max_concurrent_activities=MAX_CONCURRENT_TASKS,
        max_concurrent_workflow_tasks=MAX_CONCURRENT_TASKS,
    )


def create_health_app(task_queue: str, is_ready: Callable[[], bool] = lambda: True) -> FastAPI:
    """Probe endpoints for the orchestrator.

    `/health` answers as long as the process is up; `/ready` turns 503
    whenever `is_ready` says the worker is not polling.
    """
    app = FastAPI(title="carledger worker", openapi_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "temporal-worker", "task_queue": task_queue}

    @app.get("/ready")
    async def ready() -> JSONResponse:
        if is_ready():
            return JSONResponse({"status": "ready"})
        return JSONResponse(
            {"status": "starting"}, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    return app


async def serve_probes(app: FastAPI, port: int) -> None:
    server = uvicorn.Server(uvicorn.Config(app, host="0.0.0.0", port=port, log_level="warning"))
    logger.info("Worker probes listening", port=port)
    await server.serve()


async def main() -> None:
    args = parse_args()
    settings = get_settings()
    setup_logging(settings.debug)

    client = await get_temporal_client()
    try:
        if args.schedule_cleanup:
            await schedule_token_cleanup(client)

        worker = create_worker(client, settings.temporal_task_queue)
        probes = create_health_app(settings.temporal_task_queue, lambda: worker.is_running)
        logger.info("Worker polling", task_queue=settings.temporal_task_queue)
        await asyncio.gather(worker.run(), serve_probes(probes, args.health_port))
    finally:
        await close_temporal_client()
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
