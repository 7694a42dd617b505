"""Per-endpoint rate limits for credential and token-guessing surfaces.

In-memory storage (per process). Disabled in the testing environment.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.taskrelay.core.config import get_settings
from src.taskrelay.core.logging import get_logger

logger = get_logger(__name__)

AUTH_RATE_LIMIT = "5/minute"
INVITE_TOKEN_RATE_LIMIT = "30/minute"


def get_rate_limit_key(request: Request) -> str:
    """Key on client IP only; never on user-controlled headers."""
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    settings = get_settings()
    if settings.app_env == "testing":
        logger.info("Rate limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)
    return Limiter(key_func=get_rate_limit_key)


limiter = create_limiter()
