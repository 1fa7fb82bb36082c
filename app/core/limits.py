"""Rate limiting (slowapi) keyed by gym + member, falling back to client IP"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from app.core.config import RATE_LIMIT_ENABLED
from app.core.middleware import get_client_ip

logger = logging.getLogger(__name__)


def rate_limit_key(request: Request) -> str:
    gym_id = request.headers.get("x-gym-id")
    member_id = request.headers.get("x-member-id")
    if gym_id and member_id:
        return f"{gym_id}:{member_id}"
    return get_client_ip(request)


limiter = Limiter(key_func=rate_limit_key, enabled=RATE_LIMIT_ENABLED)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(
        f"Rate limit exceeded: {request.method} {request.url.path}",
        extra={"path": request.url.path, "limit": str(exc.detail)},
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "RATE_LIMIT_EXCEEDED",
            "message": f"Rate limit exceeded: {exc.detail}",
            "details": {},
            "path": request.url.path,
        },
    )
