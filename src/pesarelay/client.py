"""
Shared outbound HTTP plumbing for the Daraja components.
"""

import logging
from typing import Any, Dict, Optional, Type

import httpx

from .config import Settings
from .errors import GatewayError, from_httpx, response_payload

logger = logging.getLogger(__name__)


class GatewayClient:
    """
    Base for components that call the Daraja gateway.

    A new httpx.AsyncClient is opened per call. Pass ``transport`` to route
    requests somewhere other than the network (e.g. httpx.MockTransport).
    """

    error_cls: Type[GatewayError] = GatewayError

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.settings.base_url, transport=self.transport)

    async def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request and return the decoded body, raising ``error_cls`` on failure."""
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            error = from_httpx(self.error_cls, exc)
            logger.warning(
                "%s %s failed (status=%s): %s",
                method, path, error.status_code, error.payload,
            )
            raise error from exc
        return response_payload(response)

    async def _post_authorized(self, path: str, token: str, payload: Dict[str, Any]) -> Any:
        headers = {"Authorization": f"Bearer {token}"}
        return await self._send("POST", path, json=payload, headers=headers)
