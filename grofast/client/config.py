"""Client SDK configuration via environment variables (``GROFAST_`` prefix)."""

import logging

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Non-routable stand-ins: the SDK still constructs, every call fails with a transport error
PLACEHOLDER_BACKEND_URL = "http://grofast.invalid"
PLACEHOLDER_ANON_KEY = "placeholder-anon-key"


class ClientSettings(BaseSettings):
    """SDK settings loaded from environment variables."""

    BACKEND_URL: str = ""
    ANON_KEY: str = ""
    SESSION_TIMEOUT: float = 8.0

    class Config:
        env_prefix = "GROFAST_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def load_client_settings(**overrides) -> ClientSettings:
    """Read settings, substituting placeholders for a missing URL or key."""
    settings = ClientSettings(**overrides)
    if not settings.BACKEND_URL:
        logger.warning(
            "GROFAST_BACKEND_URL is not set; using placeholder %s, backend calls will fail",
            PLACEHOLDER_BACKEND_URL,
        )
        settings.BACKEND_URL = PLACEHOLDER_BACKEND_URL
    if not settings.ANON_KEY:
        logger.warning("GROFAST_ANON_KEY is not set; using a placeholder key")
        settings.ANON_KEY = PLACEHOLDER_ANON_KEY
    return settings
