"""BizDesk - Redis client (rate limiting, revoked tokens)."""
from typing import Optional

import redis.asyncio as redis

from app.config import get_settings

_settings = get_settings()
_redis: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get Redis connection (application DB 1)."""
    global _redis
    if _redis is None:
        _redis = redis.from_url(_settings.REDIS_URL, decode_responses=True)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


def rate_limit_key(limit_type: str, caller_id: str) -> str:
    """Counter key for one caller: rl:{type}:{caller}"""
    return f"rl:{limit_type}:{caller_id}"


def revoked_token_key(jti: str) -> str:
    """Denylist entry for one token id: auth:revoked:{jti}"""
    return f"auth:revoked:{jti}"
