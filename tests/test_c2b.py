import pytest

from pesarelay.auth import TokenProvider
from pesarelay.c2b import C2BRegisterRequest, WebhookRegistrar
from pesarelay.errors import UpstreamRegistrationError

from helpers import TOKEN, raise_connect_error

REGISTER_PATH = "/mpesa/c2b/v1/registerurl"


def make_registrar(settings, gateway):
    return WebhookRegistrar(settings, TokenProvider(settings, gateway.transport), gateway.transport)


@pytest.mark.asyncio
async def test_register_posts_urls_for_shortcode(settings, gateway):
    result = await make_registrar(settings, gateway).register_callback_urls(
        "https://relay.test/confirm", "https://relay.test/validate"
    )

    assert result["ResponseDescription"] == "success"
    assert gateway.last_json(REGISTER_PATH) == {
        "ShortCode": "174379",
        "ResponseType": "Completed",
        "ConfirmationURL": "https://relay.test/confirm",
        "ValidationURL": "https://relay.test/validate",
    }
    assert gateway.calls_to(REGISTER_PATH)[0].headers["Authorization"] == f"Bearer {TOKEN}"


@pytest.mark.asyncio
async def test_missing_confirmation_url_is_sent_without_it(settings, gateway):
    await make_registrar(settings, gateway).register_callback_urls(None, "https://relay.test/validate")

    sent = gateway.last_json(REGISTER_PATH)
    assert "ConfirmationURL" not in sent
    assert sent["ValidationURL"] == "https://relay.test/validate"


@pytest.mark.asyncio
async def test_network_failure_raises_registration_error(settings, gateway):
    gateway.routes[REGISTER_PATH] = raise_connect_error

    with pytest.raises(UpstreamRegistrationError) as excinfo:
        await make_registrar(settings, gateway).register_callback_urls("https://a.test", "https://b.test")

    assert "connection refused" in excinfo.value.payload


def test_request_body_accepts_camel_case_and_missing_urls():
    body = C2BRegisterRequest.model_validate({"validationURL": "https://relay.test/validate"})
    assert body.confirmation_url is None
    assert body.validation_url == "https://relay.test/validate"
