"""
PesaRelay gateway errors.

Every failed outbound call surfaces as a GatewayError subclass carrying the
upstream error body (or the transport error message). The HTTP layer turns
these into 500 responses; nothing below it retries or recovers.
"""

from typing import Any, Optional, Type, TypeVar

import httpx


class GatewayError(Exception):
    """Base error for a failed call to the Daraja gateway."""

    def __init__(self, payload: Any, status_code: Optional[int] = None):
        super().__init__(payload if isinstance(payload, str) else repr(payload))
        self.payload = payload
        self.status_code = status_code


class UpstreamAuthError(GatewayError):
    """OAuth token exchange failed."""


class UpstreamPaymentError(GatewayError):
    """STK push request was rejected or could not be sent."""


class UpstreamRegistrationError(GatewayError):
    """C2B URL registration was rejected or could not be sent."""


E = TypeVar("E", bound=GatewayError)


def response_payload(response: httpx.Response) -> Any:
    """Decode an upstream body as JSON, falling back to its text."""
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return response.text


def from_httpx(error_cls: Type[E], exc: httpx.HTTPError) -> E:
    """Translate an httpx failure into the given gateway error kind."""
    if isinstance(exc, httpx.HTTPStatusError):
        payload = response_payload(exc.response)
        if payload in ({}, ""):
            payload = str(exc)
        return error_cls(payload, status_code=exc.response.status_code)
    return error_cls(str(exc) or exc.__class__.__name__)
