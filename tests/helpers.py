"""Shared test helpers: fixed settings and a fake Daraja gateway."""

import json
from typing import Any, Dict, List, Optional

import httpx

from pesarelay.config import Settings

TOKEN = "test-access-token"


def make_settings(**overrides) -> Settings:
    values = dict(
        consumer_key="key",
        consumer_secret="secret",
        shortcode="174379",
        passkey="test",
        base_url="https://gateway.test",
        callback_url="https://relay.test/callback",
        token_cache_ttl=0,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeGateway:
    """
    Routes requests by path to canned responses and records what it saw.

    A route value may be an httpx.Response, a (status, body) tuple, or a
    callable taking the request.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[str, Any] = {
            "/oauth/v1/generate": (200, {"access_token": TOKEN, "expires_in": "3599"}),
            "/mpesa/stkpush/v1/processrequest": (200, {
                "MerchantRequestID": "29115-34620561-1",
                "CheckoutRequestID": "ws_CO_191220191020363925",
                "ResponseCode": "0",
                "ResponseDescription": "Success. Request accepted for processing",
                "CustomerMessage": "Success. Request accepted for processing",
            }),
            "/mpesa/c2b/v1/registerurl": (200, {
                "OriginatorCoversationID": "7619-37765134-1",
                "ResponseCode": "0",
                "ResponseDescription": "success",
            }),
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"errorMessage": "not found"})
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        status, body = route
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def calls_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def last_json(self, path: str) -> Optional[dict]:
        calls = self.calls_to(path)
        return json.loads(calls[-1].content) if calls else None

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def raise_connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)

