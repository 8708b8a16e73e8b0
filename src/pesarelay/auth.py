"""
PesaRelay OAuth

Client-credential token exchange against the Daraja authorization endpoint.
Tokens are fetched fresh for every caller unless a cache TTL is configured.
"""

import base64
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from .client import GatewayClient
from .config import Settings
from .errors import UpstreamAuthError

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth/v1/generate"


@dataclass
class AccessToken:
    """Bearer token issued by the gateway."""
    token: str
    expires_in: Optional[int] = None
    obtained_at: float = field(default_factory=time.monotonic)

    def age(self) -> float:
        return time.monotonic() - self.obtained_at


def basic_auth_header(consumer_key: str, consumer_secret: str) -> str:
    """Build the Basic authorization header for the token exchange."""
    raw = f"{consumer_key}:{consumer_secret}".encode("utf-8")
    return f"Basic {base64.b64encode(raw).decode('ascii')}"


def _parse_expires_in(value: Any) -> Optional[int]:
    # Daraja reports expires_in as a string, e.g. "3599"
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class TokenCache:
    """Holds one token for at most ``ttl`` seconds (or its own lifetime, if shorter)."""

    def __init__(self, ttl: float):
        self.ttl = ttl
        self._token: Optional[AccessToken] = None

    def get(self) -> Optional[AccessToken]:
        token = self._token
        if token is None:
            return None
        lifetime = self.ttl
        if token.expires_in is not None:
            lifetime = min(lifetime, token.expires_in)
        if token.age() >= lifetime:
            self._token = None
            return None
        return token

    def put(self, token: AccessToken) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class TokenProvider(GatewayClient):
    """
    Fetches access tokens with the consumer key/secret.

    Usage:
        provider = TokenProvider(settings)
        token = await provider.fetch_access_token()
        headers = {"Authorization": f"Bearer {token.token}"}
    """

    error_cls = UpstreamAuthError

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(settings, transport)
        self.cache = TokenCache(settings.token_cache_ttl) if settings.token_cache_ttl > 0 else None

    async def fetch_access_token(self) -> AccessToken:
        """Return a bearer token, exchanging credentials unless a cached one is still valid."""
        if self.cache is not None:
            cached = self.cache.get()
            if cached is not None:
                return cached

        headers = {
            "Authorization": basic_auth_header(
                self.settings.consumer_key, self.settings.consumer_secret
            )
        }
        body = await self._send(
            "GET",
            TOKEN_PATH,
            params={"grant_type": "client_credentials"},
            headers=headers,
        )

        if not isinstance(body, dict) or not body.get("access_token"):
            logger.warning("Token response carried no access_token")
            raise UpstreamAuthError(body)

        token = AccessToken(
            token=body["access_token"],
            expires_in=_parse_expires_in(body.get("expires_in")),
        )
        logger.debug("Obtained access token (expires_in=%s)", token.expires_in)

        if self.cache is not None:
            self.cache.put(token)
        return token

    def invalidate(self) -> None:
        """Forget any cached token."""
        if self.cache is not None:
            self.cache.clear()
