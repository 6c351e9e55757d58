"""
Configuration for the rate-limiting proxy.

The proxy holds the shared Semantic Scholar API key so that clients
never see it. All settings can be overridden via environment variables
with the S2_PROXY_ prefix; S2_PROXY_API_KEY is required.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..config import DEFAULT_S2_BASE_URL


class ProxySettings(BaseSettings):
    """
    Proxy settings with environment variable support.

    The key's rate limit for /paper/batch is 1 request/sec, hence the
    default MIN_INTERVAL.
    """

    model_config = SettingsConfigDict(
        env_prefix="S2_PROXY_",
        extra="ignore",
    )

    API_KEY: str
    UPSTREAM_URL: str = DEFAULT_S2_BASE_URL
    MIN_INTERVAL: float = 1.0  # Seconds between upstream batch requests
    MAX_ATTEMPTS: int = 3  # Upstream attempts on HTTP 429 before answering 504
    REQUEST_TIMEOUT: int = 60  # Seconds

    HOST: str = "127.0.0.1"
    PORT: int = 8000

    @field_validator("API_KEY")
    @classmethod
    def _api_key_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("you must set S2_PROXY_API_KEY=<semantic-scholar-api-key>")
        return value

    @field_validator("MAX_ATTEMPTS")
    @classmethod
    def _at_least_one_attempt(cls, value: int) -> int:
        if value < 1:
            raise ValueError("MAX_ATTEMPTS must be at least 1")
        return value
