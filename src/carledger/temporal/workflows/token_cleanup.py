"""Daily purge of refresh tokens that can no longer authenticate anyone."""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from src.carledger.temporal.activities import cleanup_refresh_tokens

CLEANUP_TIMEOUT = timedelta(minutes=5)
CLEANUP_RETRY = RetryPolicy(maximum_attempts=3, initial_interval=timedelta(seconds=2))


@workflow.defn
class TokenCleanupWorkflow:
    """Dead tokens are already refused at lookup, so a missed run only costs disk."""

    @workflow.run
    async def run(self, retention_days: int = 30) -> dict[str, int]:
        deleted = await workflow.execute_activity(
            cleanup_refresh_tokens,
            retention_days,
            start_to_close_timeout=CLEANUP_TIMEOUT,
            retry_policy=CLEANUP_RETRY,
        )
        workflow.logger.info(
            "Refresh token cleanup finished",
            extra={"deleted": deleted, "retention_days": retention_days},
        )
        return {"refresh_tokens": deleted}
