"""Root test fixtures shared across all test types.

This conftest sets the environment before any application import.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os
import tempfile

# APP_ENV=testing disables rate limiting
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.mkdtemp(prefix='carledger-'), 'app.db')}",
)
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client.apps.googleusercontent.com")

# ruff: noqa: E402 - Imports must be after env var setup
import pytest

from src.carledger.core.config import get_settings
from src.carledger.core.security import get_token_signer

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()
get_token_signer.cache_clear()


@pytest.fixture
def settings():
    return get_settings()
