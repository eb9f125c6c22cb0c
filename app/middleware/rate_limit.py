"""Rate limiting for recipe generation using slowapi."""

from fastapi import Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address

from app.config import settings


def get_user_for_rate_limit(request: Request) -> str:
    """Limit per forwarded user id, or per client address for anonymous calls."""
    user_id = request.headers.get("X-User-Id")
    if user_id and user_id.strip():
        return f"user:{user_id.strip()}"
    return get_remote_address(request)


limiter = Limiter(key_func=get_user_for_rate_limit, storage_uri="memory://")

GENERATION_LIMIT = f"{settings.rate_limit_per_hour}/hour"


def get_rate_limit_exceeded_handler():
    """Get rate limit exceeded handler."""
    return _rate_limit_exceeded_handler
