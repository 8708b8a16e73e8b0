"""
PesaRelay C2B URL registration.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .auth import TokenProvider
from .client import GatewayClient
from .config import Settings
from .errors import UpstreamRegistrationError

logger = logging.getLogger(__name__)

REGISTER_URL_PATH = "/mpesa/c2b/v1/registerurl"
RESPONSE_TYPE = "Completed"


class C2BRegisterRequest(BaseModel):
    """Body of POST /c2b/register. Both URLs are passed through unchecked."""
    model_config = ConfigDict(populate_by_name=True)

    confirmation_url: Optional[Any] = Field(None, alias="confirmationURL")
    validation_url: Optional[Any] = Field(None, alias="validationURL")


class WebhookRegistrar(GatewayClient):
    """Registers confirmation/validation URLs for the merchant shortcode."""

    error_cls = UpstreamRegistrationError

    def __init__(
        self,
        settings: Settings,
        token_provider: TokenProvider,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(settings, transport)
        self.token_provider = token_provider

    async def register_callback_urls(
        self,
        confirmation_url: Optional[Any],
        validation_url: Optional[Any],
    ) -> Any:
        token = await self.token_provider.fetch_access_token()
        payload = {
            "ShortCode": self.settings.shortcode,
            "ResponseType": RESPONSE_TYPE,
            "ConfirmationURL": confirmation_url,
            "ValidationURL": validation_url,
        }
        payload = {key: value for key, value in payload.items() if value is not None}
        logger.info(
            "Registering C2B URLs confirmation=%s validation=%s",
            confirmation_url, validation_url,
        )
        return await self._post_authorized(REGISTER_URL_PATH, token.token, payload)
