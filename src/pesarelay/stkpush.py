"""
PesaRelay STK Push (Lipa Na M-Pesa Online)

Builds the signed push-payment request and relays it to the gateway.
The gateway response is returned untouched.
"""

import base64
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .auth import TokenProvider
from .client import GatewayClient
from .config import Settings
from .errors import UpstreamPaymentError

logger = logging.getLogger(__name__)

STK_PUSH_PATH = "/mpesa/stkpush/v1/processrequest"
TRANSACTION_TYPE = "CustomerPayBillOnline"
DEFAULT_ACCOUNT_REFERENCE = "BOOK"
DEFAULT_DESCRIPTION = "Hotel booking"

_NON_DIGITS = re.compile(r"\D")


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Render ``moment`` (default: now) as the 14-digit UTC YYYYMMDDHHMMSS string.

    Naive datetimes are taken to be UTC already.
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return _NON_DIGITS.sub("", moment.isoformat())[:14]


def build_password(shortcode: str, passkey: str, timestamp: str) -> str:
    """Base64 of shortcode + passkey + timestamp."""
    raw = f"{shortcode}{passkey}{timestamp}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


class StkPushRequest(BaseModel):
    """Body of POST /stkpush. Values are passed through unchecked."""
    model_config = ConfigDict(populate_by_name=True)

    amount: Optional[Any] = None
    phone: Optional[Any] = None
    account_reference: Optional[Any] = Field(None, alias="accountReference")
    description: Optional[Any] = None


class PaymentInitiator(GatewayClient):
    """Sends STK push requests on behalf of the merchant shortcode."""

    error_cls = UpstreamPaymentError

    def __init__(
        self,
        settings: Settings,
        token_provider: TokenProvider,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(settings, transport)
        self.token_provider = token_provider

    def build_payload(
        self,
        amount: Any,
        phone: Any,
        timestamp: str,
        account_reference: Optional[Any] = None,
        description: Optional[Any] = None,
    ) -> Dict[str, Any]:
        shortcode = self.settings.shortcode
        payload = {
            "BusinessShortCode": shortcode,
            "Password": build_password(shortcode, self.settings.passkey, timestamp),
            "Timestamp": timestamp,
            "TransactionType": TRANSACTION_TYPE,
            "Amount": amount,
            "PartyA": phone,
            "PartyB": shortcode,
            "PhoneNumber": phone,
            "CallBackURL": self.settings.callback_url,
            "AccountReference": account_reference or DEFAULT_ACCOUNT_REFERENCE,
            "TransactionDesc": description or DEFAULT_DESCRIPTION,
        }
        # Fields the caller left out are not sent at all
        return {key: value for key, value in payload.items() if value is not None}

    async def initiate_push(
        self,
        amount: Any,
        phone: Any,
        account_reference: Optional[Any] = None,
        description: Optional[Any] = None,
    ) -> Any:
        """Request an STK push and return the gateway's JSON response verbatim."""
        token = await self.token_provider.fetch_access_token()
        payload = self.build_payload(
            amount,
            phone,
            format_timestamp(),
            account_reference=account_reference,
            description=description,
        )
        logger.info(
            "STK push amount=%s phone=%s reference=%s",
            payload.get("Amount"), payload.get("PhoneNumber"), payload["AccountReference"],
        )
        result = await self._post_authorized(STK_PUSH_PATH, token.token, payload)
        if isinstance(result, dict):
            logger.info(
                "STK push accepted checkout_request_id=%s response_code=%s",
                result.get("CheckoutRequestID"), result.get("ResponseCode"),
            )
        return result
