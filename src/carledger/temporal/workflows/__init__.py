"""Temporal workflows."""

from src.carledger.temporal.workflows.token_cleanup import TokenCleanupWorkflow

__all__ = ["TokenCleanupWorkflow"]
