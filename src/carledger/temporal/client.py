"""Shared Temporal client and registration of the cleanup cron."""

from temporalio.client import Client
from temporalio.exceptions import WorkflowAlreadyStartedError

from src.carledger.core.config import get_settings
from src.carledger.core.logging import get_logger

logger = get_logger(__name__)

_client: Client | None = None

TOKEN_CLEANUP_WORKFLOW_ID = "token-cleanup"
TOKEN_CLEANUP_CRON = "0 3 * * *"  # daily, 03:00 UTC


async def get_temporal_client() -> Client:
    """Get or create Temporal client."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = await Client.connect(
            settings.temporal_host,
            namespace=settings.temporal_namespace,
        )
    return _client


async def close_temporal_client() -> None:
    """Close the Temporal client. Call during shutdown."""
    global _client
    if _client is not None:
        await _client.service_client.close()  # type: ignore[attr-defined]
        _client = None


async def schedule_token_cleanup(client: Client) -> bool:
    """Register the daily cleanup cron workflow.

    Returns False when it is already registered.
    """
    from src.carledger.temporal.workflows import TokenCleanupWorkflow

    settings = get_settings()
    try:
        await client.start_workflow(
            TokenCleanupWorkflow.run,
            settings.cleanup_retention_days,
            id=TOKEN_CLEANUP_WORKFLOW_ID,
            task_queue=settings.temporal_task_queue,
            cron_schedule=TOKEN_CLEANUP_CRON,
        )
    except WorkflowAlreadyStartedError:
        logger.info("Token cleanup already scheduled", workflow_id=TOKEN_CLEANUP_WORKFLOW_ID)
        return False

    logger.info("Token cleanup scheduled", cron=TOKEN_CLEANUP_CRON)
    return True
