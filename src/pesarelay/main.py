"""
PesaRelay - M-Pesa Daraja Relay
STK push, C2B URL registration and payment notifications
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .auth import TokenProvider
from .c2b import C2BRegisterRequest, WebhookRegistrar
from .config import Settings, settings as default_settings
from .errors import GatewayError
from .stkpush import PaymentInitiator, StkPushRequest
from .webhooks import CallbackReceiver

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle."""
    config: Settings = app.state.settings
    missing = config.missing_credentials()
    if missing:
        logger.warning("Missing env vars - please set %s", ", ".join(missing))
    logger.info("PesaRelay starting (gateway=%s)", config.base_url)
    yield
    logger.info("PesaRelay shutting down")


async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    logger.error(
        "%s on %s %s: %s",
        exc.__class__.__name__, request.method, request.url.path, exc.payload,
    )
    return JSONResponse(status_code=500, content={"error": exc.payload})


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the relay. ``transport`` replaces the network for outbound calls."""
    config = settings or default_settings

    app = FastAPI(
        title="PesaRelay",
        description="M-Pesa Daraja Relay",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GatewayError, handle_gateway_error)

    tokens = TokenProvider(config, transport)
    app.state.settings = config
    app.state.tokens = tokens
    app.state.payments = PaymentInitiator(config, tokens, transport)
    app.state.registrar = WebhookRegistrar(config, tokens, transport)
    app.state.callbacks = CallbackReceiver()

    @app.get("/")
    async def root():
        return {
            "name": "PesaRelay",
            "version": __version__,
            "description": "M-Pesa Daraja Relay",
            "endpoints": {
                "stkpush": "/stkpush",
                "c2b_register": "/c2b/register",
                "callback": "/callback",
                "token": "/token",
            },
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": "pesarelay"}

    @app.post("/stkpush")
    async def stk_push(request: Request, data: Optional[StkPushRequest] = None):
        """Prompt the customer's phone to authorize a payment."""
        # A request without a body is relayed like an empty object
        if data is None:
            data = StkPushRequest()
        payments: PaymentInitiator = request.app.state.payments
        return await payments.initiate_push(
            data.amount,
            data.phone,
            account_reference=data.account_reference,
            description=data.description,
        )

    @app.post("/c2b/register")
    async def register_c2b(request: Request, data: Optional[C2BRegisterRequest] = None):
        """Register confirmation and validation URLs with the gateway."""
        if data is None:
            data = C2BRegisterRequest()
        registrar: WebhookRegistrar = request.app.state.registrar
        return await registrar.register_callback_urls(data.confirmation_url, data.validation_url)

    @app.post("/callback")
    async def callback(request: Request):
        """Acknowledge a payment notification from the gateway."""
        try:
            payload = await request.json()
        except ValueError:
            logger.warning("Callback body is not valid JSON; acknowledging anyway")
            payload = None
        receiver: CallbackReceiver = request.app.state.callbacks
        return JSONResponse(status_code=200, content=receiver.receive(payload))

    @app.get("/token")
    async def token(request: Request):
        """Fetch an access token (debugging aid)."""
        tokens: TokenProvider = request.app.state.tokens
        access_token = await tokens.fetch_access_token()
        return {"access_token": access_token.token}

    return app


app = create_app()


def cli():
    """CLI entry point."""
    import uvicorn

    logging.basicConfig(
        level=default_settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(
        "pesarelay.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )


if __name__ == "__main__":
    cli()
