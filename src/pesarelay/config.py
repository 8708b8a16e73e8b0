"""
PesaRelay Configuration
"""

from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings

SANDBOX_URL = "https://sandbox.safaricom.co.ke"
PLACEHOLDER_CALLBACK_URL = "https://yourdomain.com/callback"


class Settings(BaseSettings):
    """Application settings."""

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"

    # Daraja credentials
    consumer_key: str = ""
    consumer_secret: str = ""
    shortcode: str = ""
    passkey: str = ""

    # Daraja endpoints
    base_url: str = SANDBOX_URL
    callback_url: str = PLACEHOLDER_CALLBACK_URL

    # Seconds to reuse an access token; 0 fetches a new one per request
    token_cache_ttl: int = 0

    class Config:
        env_file = ".env"
        extra = "ignore"
        frozen = True

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/") or SANDBOX_URL

    def missing_credentials(self) -> List[str]:
        """Names of the required credentials that are not set."""
        required = {
            "CONSUMER_KEY": self.consumer_key,
            "CONSUMER_SECRET": self.consumer_secret,
            "SHORTCODE": self.shortcode,
            "PASSKEY": self.passkey,
        }
        return [name for name, value in required.items() if not value]


settings = Settings()
