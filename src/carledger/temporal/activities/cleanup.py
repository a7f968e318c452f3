from temporalio import activity

from src.carledger.core.db import get_session
from src.carledger.repositories import RefreshTokenRepository


@activity.defn
async def cleanup_refresh_tokens(retention_days: int) -> int:
    """Delete refresh tokens dead for longer than `retention_days`; returns the count.

    Retries are harmless: a repeated run deletes nothing new.
    """
    async with get_session() as session:
        deleted = await RefreshTokenRepository(session).cleanup_expired(retention_days)
    activity.logger.info("Deleted %d refresh tokens", deleted)
    return deleted
