"""
Rate limiting

SlowAPI with in-memory storage. Auth endpoints and the catalog/cart/order
endpoints are throttled in separate buckets, configured via RATE_LIMIT_AUTH
and RATE_LIMIT_API.
"""
import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse

from config import settings

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """
    Get client IP, respecting X-Forwarded-For for proxied requests.
    Falls back to direct IP if header not present.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # First IP in the chain is the original client
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(key_func=get_client_ip, enabled=settings.RATE_LIMIT_ENABLED)

auth_limit = limiter.limit(settings.RATE_LIMIT_AUTH)
api_limit = limiter.limit(settings.RATE_LIMIT_API)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded: %s on %s", get_client_ip(request), request.url.path)
    return JSONResponse(
        status_code=429,
        content={"ok": False, "message": "Too many requests. Please try again later."},
        headers={"Retry-After": "60"},
    )
