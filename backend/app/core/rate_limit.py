"""BizDesk - Rate limiting (Redis fixed window)."""
import logging
import time
from typing import Callable

from fastapi import Request
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import get_settings
from app.core import redis as redis_client
from app.core.errors import ErrorCode
from app.core.responses import error_response

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Count requests per caller per window; answer 429 past the limit.

    Fails open: when Redis is unreachable the request goes through.
    """

    def __init__(self, app, limits: dict[str, int] | None = None, window: int | None = None):
        super().__init__(app)
        settings = get_settings()
        self.limits = limits or {
            "auth": settings.RATE_LIMIT_REQUESTS,
            "default": settings.RATE_LIMIT_ANONYMOUS_REQUESTS,
        }
        self.window = window or settings.RATE_LIMIT_WINDOW_SECONDS

    def identify(self, request: Request) -> tuple[str, str]:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            # token tail carries the signature, unique per token
            return "auth", auth_header[7:].strip()[-24:]
        return "default", request.client.host if request.client else "unknown"

    async def dispatch(self, request: Request, call_next: Callable):
        limit_type, caller_id = self.identify(request)
        limit = self.limits[limit_type]
        key = redis_client.rate_limit_key(limit_type, caller_id)

        try:
            r = await redis_client.get_redis()
            count = await r.incr(key)
            if count == 1:
                await r.expire(key, self.window)
            ttl = await r.ttl(key)
        except (RedisError, OSError) as exc:
            logger.warning("Rate limiter unavailable, allowing request: %s", exc)
            return await call_next(request)

        reset_at = str(int(time.time()) + (ttl if ttl > 0 else self.window))
        if count > limit:
            return error_response(
                ErrorCode.TOO_MANY_REQUESTS,
                "Too many requests. Please slow down.",
                429,
                headers={
                    "Retry-After": str(ttl if ttl > 0 else self.window),
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": reset_at,
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - count))
        response.headers["X-RateLimit-Reset"] = reset_at
        return response
