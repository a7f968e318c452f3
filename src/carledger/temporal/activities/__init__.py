"""Temporal activities."""

from src.carledger.temporal.activities.cleanup import cleanup_refresh_tokens

__all__ = ["cleanup_refresh_tokens"]
