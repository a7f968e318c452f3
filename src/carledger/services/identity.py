"""Identity assertion verification (Google Sign-In ID tokens).

The session layer trusts whatever `verify` returns; all checks on the external
identity (signature, audience, issuer, expiry) happen here.
"""

import asyncio
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from src.carledger.core.config import get_settings
from src.carledger.core.exceptions import InvalidAssertionError, UpstreamUnavailableError
from src.carledger.core.logging import get_logger

logger = get_logger(__name__)

GOOGLE_ISSUERS = frozenset({"accounts.google.com", "https://accounts.google.com"})


@dataclass(frozen=True)
class IdentityClaims:
    """Stable facts about the person behind an assertion."""

    subject_id: str
    email: str
    name: str | None = None
    avatar_url: str | None = None


class IdentityVerifier(Protocol):
    async def verify(self, assertion: str) -> IdentityClaims:
        """Return the asserted identity or raise InvalidAssertionError."""
        ...


class _BoundedRequest:
    """google-auth transport that always applies our timeout."""

    def __init__(self, timeout: float):
        self._request = google_requests.Request()
        self._timeout = timeout

    def __call__(self, url: str, method: str = "GET", body: Any = None, headers: Any = None,
                 timeout: float | None = None, **kwargs: Any) -> Any:
        return self._request(url, method=method, body=body, headers=headers,
                             timeout=self._timeout, **kwargs)


class GoogleIdentityVerifier:
    """Verifies Google ID tokens against the configured OAuth client id.

    Fails closed: a slow or unreachable certificate endpoint surfaces as
    UpstreamUnavailableError once `timeout` seconds have passed.
    """

    def __init__(self, client_id: str, timeout: float = 5.0, clock_skew_seconds: int = 300):
        self.client_id = client_id
        self.timeout = timeout
        self.clock_skew_seconds = clock_skew_seconds
        self._request = _BoundedRequest(timeout)

    async def verify(self, assertion: str) -> IdentityClaims:
        try:
            claims = await asyncio.wait_for(
                asyncio.to_thread(self._verify_sync, assertion),
                timeout=self.timeout,
            )
        except TimeoutError as e:
            logger.warning("Identity provider timed out", timeout=self.timeout)
            raise UpstreamUnavailableError("Identity provider timed out") from e
        return self._to_identity(claims)

    def _verify_sync(self, assertion: str) -> dict[str, Any]:
        try:
            return id_token.verify_oauth2_token(  # type: ignore[no-any-return]
                assertion,
                self._request,
                self.client_id,
                clock_skew_in_seconds=self.clock_skew_seconds,
            )
        except google_exceptions.TransportError as e:
            logger.warning("Identity provider unreachable", error=str(e))
            raise UpstreamUnavailableError("Identity provider unreachable") from e
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            logger.warning("Identity assertion rejected", error=str(e))
            raise InvalidAssertionError() from e

    @staticmethod
    def _to_identity(claims: dict[str, Any]) -> IdentityClaims:
        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise InvalidAssertionError("Invalid identity token issuer")

        subject_id = claims.get("sub")
        email = claims.get("email")
        if not subject_id or not email:
            raise InvalidAssertionError("Identity token lacks subject or email")
        if claims.get("email_verified") is False:
            raise InvalidAssertionError("Identity email is not verified")

        return IdentityClaims(
            subject_id=str(subject_id),
            email=str(email).strip().lower(),
            name=claims.get("name"),
            avatar_url=claims.get("picture"),
        )


@lru_cache
def get_identity_verifier() -> GoogleIdentityVerifier:
    settings = get_settings()
    return GoogleIdentityVerifier(
        settings.google_client_id,
        timeout=settings.google_verify_timeout_seconds,
        clock_skew_seconds=settings.google_clock_skew_seconds,
    )
