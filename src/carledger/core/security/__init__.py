"""Security utilities - token crypto, role gate, response headers.

Re-exports all security-related functions for convenience.
"""

from src.carledger.core.security.crypto import (
    AccessClaims,
    TokenSigner,
    generate_refresh_secret,
    get_token_signer,
    hash_token,
)
from src.carledger.core.security.headers import SecurityHeadersMiddleware
from src.carledger.core.security.roles import is_role_allowed

__all__ = [
    # Crypto
    "AccessClaims",
    "TokenSigner",
    "generate_refresh_secret",
    "get_token_signer",
    "hash_token",
    # Roles
    "is_role_allowed",
    # Headers
    "SecurityHeadersMiddleware",
]
